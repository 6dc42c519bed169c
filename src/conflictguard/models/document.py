"""
Document model representing an ingested legal text.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from conflictguard.models.entity import Entity
from conflictguard.models.enums import DocumentType


def utc_now() -> datetime:
    """Current timestamp in UTC."""
    return datetime.now(timezone.utc)


class Document(BaseModel):
    """
    An ingested document and the entities extracted from it.

    The document owns its entities: saving it persists them together with
    their relation edges, and deleting it removes them.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str | None = Field(default=None, description="Assigned by the graph store on save")
    name: str
    content: str
    document_type: DocumentType
    created_at: datetime = Field(default_factory=utc_now)
    entities: list[Entity] = Field(default_factory=list)

    @field_validator("entities", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    def add_entity(self, entity: Entity) -> Entity:
        """Attach an entity to this document."""
        self.entities.append(entity)
        return entity

    def to_neo4j_properties(self) -> dict[str, Any]:
        """Convert to Neo4j node properties."""
        return {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "document_type": self.document_type.value,
            "created_at": self.created_at.isoformat(),
        }

    def __repr__(self) -> str:
        return (
            f"Document(id={self.id!r}, name={self.name!r}, "
            f"type={self.document_type.value}, entities={len(self.entities)})"
        )

    __str__ = __repr__
