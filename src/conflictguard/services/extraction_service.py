"""
Entity extraction from document text.
"""

import json
from functools import lru_cache

import structlog
from pydantic import ValidationError as PydanticValidationError

from conflictguard.exceptions import LLMError
from conflictguard.models import DocumentType, ExtractionResult
from conflictguard.services.llm_service import LLMService, clean_json_response, get_llm_service
from conflictguard.services.prompts import PromptTemplates, get_prompt_templates

logger = structlog.get_logger(__name__)


class EntityExtractionService:
    """
    Turns raw document text into typed entities and their relations.

    Extraction never fails the caller: an unreachable model or an
    unparseable answer yields an empty result whose summary says why.
    """

    def __init__(
        self,
        llm: LLMService | None = None,
        prompts: PromptTemplates | None = None,
    ):
        self.llm = llm or get_llm_service()
        self.prompts = prompts or get_prompt_templates()

    def extract_entities(
        self, document_name: str, document_type: DocumentType, content: str
    ) -> ExtractionResult:
        logger.info(
            "entity_extraction_started",
            document_name=document_name,
            document_type=document_type.value,
        )
        user_prompt = self.prompts.entity_extraction_user_prompt(
            document_type.value, document_name, content
        )

        try:
            response, model = self.llm.generate(
                self.prompts.entity_extraction_system_prompt, user_prompt
            )
        except LLMError as e:
            logger.error("entity_extraction_failed", document_name=document_name, error=str(e))
            return ExtractionResult(entities=[], document_summary=f"AI extraction failed: {e}")

        result = self._parse(response)
        logger.info(
            "entity_extraction_completed",
            document_name=document_name,
            entities=len(result.entities),
            model=model,
        )
        return result

    @staticmethod
    def _parse(response: str) -> ExtractionResult:
        try:
            return ExtractionResult.model_validate(json.loads(clean_json_response(response)))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.error("extraction_parse_failed", error=str(e))
            logger.debug("extraction_raw_response", response=response)
            return ExtractionResult(entities=[], document_summary="Failed to parse extraction result")


@lru_cache()
def get_extraction_service() -> EntityExtractionService:
    """Get cached extraction service instance."""
    return EntityExtractionService()
