"""
LLM service used by entity extraction and conflict reasoning.

Supports Claude (Anthropic) and GPT-4o (OpenAI, or any OpenAI-compatible
gateway such as OpenRouter) with automatic fallback.
"""

from functools import lru_cache

import structlog
from anthropic import Anthropic
from openai import OpenAI
from tenacity import Retrying, stop_after_attempt, wait_exponential

from conflictguard.config import Settings, get_settings
from conflictguard.exceptions import LLMError, LLMNotConfiguredError

logger = structlog.get_logger(__name__)


def clean_json_response(response: str | None) -> str:
    """Strip surrounding markdown code fences from a model response."""
    if response is None or not response.strip():
        return "{}"
    cleaned = response.strip()

    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]

    return cleaned.strip()


class LLMService:
    """
    LLM service with a primary and a fallback provider.

    Each provider call is retried with exponential backoff; when every
    configured provider has failed, ``generate`` raises LLMError.
    """

    def __init__(self, settings: Settings | None = None):
        settings = settings or get_settings()
        self.settings = settings

        self._anthropic: Anthropic | None = None
        self._openai: OpenAI | None = None

        if settings.anthropic_api_key:
            self._anthropic = Anthropic(
                api_key=settings.anthropic_api_key, timeout=settings.llm_timeout
            )
        if settings.openai_api_key:
            self._openai = OpenAI(
                api_key=settings.openai_api_key,
                base_url=settings.openai_base_url,
                timeout=settings.llm_timeout,
            )

        self.primary_provider = settings.primary_llm_provider
        self.primary_model = settings.primary_llm_model
        self.fallback_provider = settings.fallback_llm_provider
        self.fallback_model = settings.fallback_llm_model
        self.wait = wait_exponential(multiplier=1, min=2, max=10)

    @property
    def is_configured(self) -> bool:
        return self._anthropic is not None or self._openai is not None

    def health_check(self) -> dict[str, bool]:
        """Report which providers have credentials."""
        return {
            "anthropic": self._anthropic is not None,
            "openai": self._openai is not None,
        }

    # =========================================================================
    # Core LLM Calls
    # =========================================================================

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.settings.llm_max_retries),
            wait=self.wait,
            reraise=True,
        )

    def _call_anthropic(self, system_prompt: str, user_prompt: str, model: str) -> str:
        """Call Anthropic Claude API."""
        response = self._anthropic.messages.create(
            model=model,
            max_tokens=self.settings.llm_max_tokens,
            temperature=self.settings.llm_temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )
        text = response.content[0].text if response.content else ""
        if not text.strip():
            raise LLMError("Empty response from Anthropic")
        return text

    def _call_openai(self, system_prompt: str, user_prompt: str, model: str) -> str:
        """Call an OpenAI-compatible chat completions API."""
        response = self._openai.chat.completions.create(
            model=model,
            max_tokens=self.settings.llm_max_tokens,
            temperature=self.settings.llm_temperature,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )
        text = response.choices[0].message.content if response.choices else None
        if not text or not text.strip():
            raise LLMError("Empty response from OpenAI")
        return text

    def _call(self, provider: str, model: str, system_prompt: str, user_prompt: str) -> str:
        call = self._call_anthropic if provider == "anthropic" else self._call_openai
        for attempt in self._retrying():
            with attempt:
                return call(system_prompt, user_prompt, model)
        raise LLMError(f"No attempt made for {provider}")

    def _available(self, provider: str) -> bool:
        if provider == "anthropic":
            return self._anthropic is not None
        return self._openai is not None

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        use_fallback: bool = True,
    ) -> tuple[str, str]:
        """
        Generate LLM response with automatic fallback.

        Returns (response_text, model_used).
        """
        if not self.is_configured:
            raise LLMNotConfiguredError(
                "No LLM provider configured. Set ANTHROPIC_API_KEY or OPENAI_API_KEY."
            )

        candidates = [(self.primary_provider, self.primary_model)]
        if use_fallback:
            candidates.append((self.fallback_provider, self.fallback_model))

        last_error: Exception | None = None
        for provider, model in candidates:
            if not self._available(provider):
                continue
            try:
                text = self._call(provider, model, system_prompt, user_prompt)
                logger.debug("llm_call_succeeded", provider=provider, model=model)
                return text, model
            except Exception as e:
                last_error = e
                logger.warning("llm_provider_failed", provider=provider, model=model, error=str(e))

        if last_error is None:
            raise LLMNotConfiguredError("No configured LLM provider is enabled for this call.")
        raise LLMError(f"AI service unavailable after multiple attempts: {last_error}") from last_error


@lru_cache()
def get_llm_service() -> LLMService:
    """Get cached LLM service instance."""
    return LLMService()
