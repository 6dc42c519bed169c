"""
Conflict models: detected contradictions between entities.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from conflictguard.models.document import utc_now
from conflictguard.models.entity import Entity
from conflictguard.models.enums import ConflictSeverity


class Conflict(BaseModel):
    """
    A contradiction between two or more entities, with legal reasoning.

    Conflicts are created only by conflict analysis and never mutated
    afterwards. Involved entities are shared references, not owned.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str | None = Field(default=None, description="Assigned by the graph store on save")
    description: str
    severity: ConflictSeverity
    reasoning: str | None = None
    legal_principle: str | None = Field(
        default=None, description="Label such as 'Lex Specialis'"
    )
    detected_at: datetime = Field(default_factory=utc_now)
    entities: list[Entity] = Field(default_factory=list)

    @property
    def entity_ids(self) -> list[str]:
        """Ids of the involved entities, in stored order."""
        return [e.id for e in self.entities if e.id is not None]

    def to_neo4j_properties(self) -> dict[str, Any]:
        """Convert to Neo4j node properties."""
        return {
            "id": self.id,
            "description": self.description,
            "severity": self.severity.value,
            "reasoning": self.reasoning,
            "legal_principle": self.legal_principle,
            "detected_at": self.detected_at.isoformat(),
        }

    def __repr__(self) -> str:
        return (
            f"Conflict(id={self.id!r}, severity={self.severity.value}, "
            f"entities={len(self.entities)}, description={self.description!r})"
        )

    __str__ = __repr__


class ConflictAnalysisResult(BaseModel):
    """Outcome of one conflict analysis run."""

    conflicts: list[Conflict] = Field(default_factory=list)
    summary: str
    analyzed_at: datetime = Field(default_factory=utc_now)
