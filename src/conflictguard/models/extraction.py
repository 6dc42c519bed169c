"""
Structures returned by the AI gateways.

These mirror the JSON the prompts ask the model to produce. Field aliases are
camelCase (``entityType``, ``involvedEntityNames``) while snake_case names
are accepted as well.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from conflictguard.models.enums import ConflictSeverity, EntityType, RelationshipType


class _ModelOutput(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ExtractedRelation(_ModelOutput):
    """Relation from an extracted entity to another entity, referenced by name."""

    target_entity_name: str
    relationship_type: RelationshipType


class ExtractedEntity(_ModelOutput):
    """Entity descriptor as produced by the extraction model."""

    name: str
    entity_type: EntityType
    value: str | None = None
    source_context: str | None = None
    relationships: list[ExtractedRelation] = Field(default_factory=list)

    @field_validator("relationships", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class ExtractionResult(_ModelOutput):
    """Entities extracted from a single document."""

    entities: list[ExtractedEntity] = Field(default_factory=list)
    document_summary: str | None = None

    @field_validator("entities", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class DetectedConflict(_ModelOutput):
    """Conflict descriptor as produced by the reasoning model."""

    description: str
    severity: ConflictSeverity
    reasoning: str | None = None
    legal_principle: str | None = None
    involved_entity_names: list[str] = Field(default_factory=list)

    @field_validator("involved_entity_names", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class ConflictAnalysis(_ModelOutput):
    """Conflicts detected across a set of entities, plus an overall summary."""

    conflicts: list[DetectedConflict] = Field(default_factory=list)
    overall_summary: str | None = None

    @field_validator("conflicts", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v
