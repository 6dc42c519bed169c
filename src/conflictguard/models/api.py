"""
API request and response models.

Responses flatten entity relations to (id, name, type) references so that
cyclic RELATES_TO edges never recurse during serialization.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from conflictguard.models.conflict import Conflict, ConflictAnalysisResult
from conflictguard.models.document import Document
from conflictguard.models.entity import Entity
from conflictguard.models.enums import ConflictSeverity, DocumentType, EntityType, RelationshipType


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Requests
# =============================================================================


class DocumentInput(_ApiModel):
    """Document ingestion payload. Limits are enforced by conflictguard.validation."""

    name: str | None = None
    content: str | None = None
    document_type: DocumentType | None = None


class DocumentIdsRequest(_ApiModel):
    """A list of document ids, used by analysis and document-scoped queries."""

    document_ids: list[str] | None = None


# =============================================================================
# Responses
# =============================================================================


class EntityRelationResponse(_ApiModel):
    entity_id: str | None
    entity_name: str
    relationship_type: RelationshipType


class EntityResponse(_ApiModel):
    id: str | None
    name: str
    entity_type: EntityType
    value: str | None = None
    source_context: str | None = None
    related_entities: list[EntityRelationResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, entity: Entity) -> "EntityResponse":
        return cls(
            id=entity.id,
            name=entity.name,
            entity_type=entity.entity_type,
            value=entity.value,
            source_context=entity.source_context,
            related_entities=[
                EntityRelationResponse(
                    entity_id=rel.target_entity.id,
                    entity_name=rel.target_entity.name,
                    relationship_type=rel.relationship_type,
                )
                for rel in entity.related_entities
            ],
        )


class EntityDetailResponse(EntityResponse):
    """Entity plus its parent document and the conflicts that involve it."""

    source_document_id: str | None = None
    source_document_name: str | None = None
    conflict_ids: list[str] = Field(default_factory=list)


class DocumentResponse(_ApiModel):
    id: str | None
    name: str
    content: str
    document_type: DocumentType
    created_at: datetime
    entities: list[EntityResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, document: Document) -> "DocumentResponse":
        return cls(
            id=document.id,
            name=document.name,
            content=document.content,
            document_type=document.document_type,
            created_at=document.created_at,
            entities=[EntityResponse.from_domain(e) for e in document.entities],
        )


class ConflictResponse(_ApiModel):
    id: str | None
    description: str
    severity: ConflictSeverity
    reasoning: str | None = None
    legal_principle: str | None = None
    detected_at: datetime
    entities: list[EntityResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, conflict: Conflict) -> "ConflictResponse":
        return cls(
            id=conflict.id,
            description=conflict.description,
            severity=conflict.severity,
            reasoning=conflict.reasoning,
            legal_principle=conflict.legal_principle,
            detected_at=conflict.detected_at,
            entities=[EntityResponse.from_domain(e) for e in conflict.entities],
        )


class ConflictAnalysisResponse(_ApiModel):
    conflicts: list[ConflictResponse] = Field(default_factory=list)
    summary: str
    analyzed_at: datetime

    @classmethod
    def from_domain(cls, result: ConflictAnalysisResult) -> "ConflictAnalysisResponse":
        return cls(
            conflicts=[ConflictResponse.from_domain(c) for c in result.conflicts],
            summary=result.summary,
            analyzed_at=result.analyzed_at,
        )


class DeleteResponse(_ApiModel):
    id: str
    deleted: bool
