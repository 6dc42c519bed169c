"""
Entity models: extracted facts and the typed edges between them.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from conflictguard.models.enums import EntityType, RelationshipType


class EntityRelationship(BaseModel):
    """Outgoing RELATES_TO edge from one entity to another."""

    model_config = ConfigDict(from_attributes=True)

    relationship_type: RelationshipType
    target_entity: "Entity"


class Entity(BaseModel):
    """
    A structured fact extracted from a document (e.g. a payment term).

    Entities are created only during document ingestion and belong to
    exactly one document. Conflicts reference them without owning them.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str | None = Field(default=None, description="Assigned by the graph store on save")
    name: str = Field(..., description="Human-readable key used for matching")
    entity_type: EntityType
    value: str | None = Field(default=None, description="Extracted content, e.g. '14 days'")
    source_context: str | None = Field(default=None, description="Surrounding text snippet")
    related_entities: list[EntityRelationship] = Field(default_factory=list)

    @field_validator("related_entities", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    def add_relationship(
        self, target: "Entity", relationship_type: RelationshipType
    ) -> EntityRelationship:
        """Append an outgoing relation to ``target``."""
        relationship = EntityRelationship(
            relationship_type=relationship_type, target_entity=target
        )
        self.related_entities.append(relationship)
        return relationship

    def to_neo4j_properties(self) -> dict[str, Any]:
        """Convert to Neo4j node properties."""
        return {
            "id": self.id,
            "name": self.name,
            "entity_type": self.entity_type.value,
            "value": self.value,
            "source_context": self.source_context,
        }

    def __repr__(self) -> str:
        return f"Entity(id={self.id!r}, name={self.name!r}, type={self.entity_type.value})"

    __str__ = __repr__


EntityRelationship.model_rebuild()
