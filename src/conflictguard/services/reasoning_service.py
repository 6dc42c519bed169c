"""
Conflict reasoning over a set of entities.
"""

import json
from functools import lru_cache

import structlog
from pydantic import ValidationError as PydanticValidationError

from conflictguard.config import Settings, get_settings
from conflictguard.exceptions import AIServiceUnavailableError, LLMError
from conflictguard.models import ConflictAnalysis, Entity
from conflictguard.services.llm_service import LLMService, clean_json_response, get_llm_service
from conflictguard.services.prompts import PromptTemplates, get_prompt_templates

logger = structlog.get_logger(__name__)


def format_entities(entities: list[Entity]) -> str:
    """One line per entity: ``- name (TYPE): value [context: ...]``."""
    return "\n".join(
        f"- {e.name} ({e.entity_type.value}): {e.value} [context: {e.source_context}]"
        for e in entities
    )


class ConflictReasoningService:
    """
    Asks the reasoning model which entities contradict each other.

    A malformed answer yields an empty analysis. An unreachable model raises
    AIServiceUnavailableError so that callers can retry later instead of
    reading "no conflicts" into a failed call.
    """

    def __init__(
        self,
        llm: LLMService | None = None,
        prompts: PromptTemplates | None = None,
        settings: Settings | None = None,
    ):
        self.llm = llm or get_llm_service()
        self.prompts = prompts or get_prompt_templates()
        self.settings = settings or get_settings()

    def analyze_conflicts(self, entities: list[Entity]) -> ConflictAnalysis:
        logger.info("conflict_reasoning_started", entities=len(entities))
        user_prompt = self.prompts.conflict_reasoning_user_prompt(format_entities(entities))

        try:
            response, model = self.llm.generate(
                self.prompts.conflict_reasoning_system_prompt, user_prompt
            )
        except LLMError as e:
            logger.error("conflict_reasoning_unavailable", error=str(e))
            raise AIServiceUnavailableError(
                service="llm",
                retry_after_seconds=self.settings.ai_retry_after_seconds,
            ) from e

        analysis = self._parse(response)
        logger.info(
            "conflict_reasoning_completed",
            conflicts=len(analysis.conflicts),
            model=model,
        )
        return analysis

    @staticmethod
    def _parse(response: str) -> ConflictAnalysis:
        try:
            return ConflictAnalysis.model_validate(json.loads(clean_json_response(response)))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.error("conflict_analysis_parse_failed", error=str(e))
            logger.debug("conflict_analysis_raw_response", response=response)
            return ConflictAnalysis(conflicts=[], overall_summary="Failed to parse conflict analysis")


@lru_cache()
def get_reasoning_service() -> ConflictReasoningService:
    """Get cached reasoning service instance."""
    return ConflictReasoningService()
