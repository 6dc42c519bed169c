"""
Business logic services for ConflictGuard.
"""

from conflictguard.services.llm_service import LLMService, clean_json_response, get_llm_service
from conflictguard.services.prompts import PromptTemplates, get_prompt_templates
from conflictguard.services.extraction_service import EntityExtractionService, get_extraction_service
from conflictguard.services.reasoning_service import ConflictReasoningService, get_reasoning_service
from conflictguard.services.document_service import DocumentService, get_document_service
from conflictguard.services.conflict_service import ConflictService, get_conflict_service
from conflictguard.services.entity_service import EntityService, get_entity_service

__all__ = [
    "LLMService",
    "clean_json_response",
    "get_llm_service",
    "PromptTemplates",
    "get_prompt_templates",
    "EntityExtractionService",
    "get_extraction_service",
    "ConflictReasoningService",
    "get_reasoning_service",
    "DocumentService",
    "get_document_service",
    "ConflictService",
    "get_conflict_service",
    "EntityService",
    "get_entity_service",
]
