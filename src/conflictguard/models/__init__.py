"""
Pydantic models for ConflictGuard.

This module contains all data models used throughout the application:
- Domain models for the Document -> Entity -> Conflict graph
- Gateway models for LLM extraction and reasoning output
- API models for request/response schemas
"""

from conflictguard.models.enums import (
    ConflictSeverity,
    DocumentType,
    EntityType,
    RelationshipType,
)
from conflictguard.models.entity import Entity, EntityRelationship
from conflictguard.models.document import Document
from conflictguard.models.conflict import Conflict, ConflictAnalysisResult
from conflictguard.models.extraction import (
    ConflictAnalysis,
    DetectedConflict,
    ExtractedEntity,
    ExtractedRelation,
    ExtractionResult,
)

__all__ = [
    # Enums
    "ConflictSeverity",
    "DocumentType",
    "EntityType",
    "RelationshipType",
    # Domain models
    "Entity",
    "EntityRelationship",
    "Document",
    "Conflict",
    "ConflictAnalysisResult",
    # Gateway models
    "ConflictAnalysis",
    "DetectedConflict",
    "ExtractedEntity",
    "ExtractedRelation",
    "ExtractionResult",
]
