"""
Graph store interface.

Any backend that persists the Document -CONTAINS-> Entity -RELATES_TO-> Entity
and Conflict -INVOLVES-> Entity shape can serve ConflictGuard by implementing
this protocol. Writes are atomic: a document with its entities and relation
edges, or a batch of conflicts with their INVOLVES edges, is stored
completely or not at all. Backend failures are raised as GraphStoreError.
"""

from typing import Protocol

from conflictguard.models import Conflict, ConflictSeverity, Document, Entity, EntityType


class GraphStore(Protocol):
    """Persistence and traversal queries for the conflict graph."""

    # Lifecycle
    def setup_schema(self) -> None: ...
    def health_check(self) -> bool: ...
    def close(self) -> None: ...

    # Documents
    def save_document(self, document: Document) -> Document:
        """Persist a document, its entities and their relations; fills in ids."""
        ...

    def find_document_by_id(self, document_id: str) -> Document | None: ...
    def find_documents_by_ids(self, document_ids: list[str]) -> list[Document]: ...
    def find_all_documents_by_created_at_descending(self) -> list[Document]: ...
    def find_document_by_entity_id(self, entity_id: str) -> Document | None: ...
    def delete_document(self, document_id: str) -> bool: ...

    # Entities
    def find_entity_by_id(self, entity_id: str) -> Entity | None: ...
    def find_entities(self, entity_type: EntityType | None = None) -> list[Entity]: ...
    def find_entities_by_document_id(self, document_id: str) -> list[Entity]: ...
    def find_entities_with_conflicts(self) -> list[Entity]: ...

    # Conflicts
    def save_conflict(self, conflict: Conflict) -> Conflict:
        """Persist a conflict and INVOLVES edges to already stored entities."""
        ...

    def save_conflicts(self, conflicts: list[Conflict]) -> list[Conflict]:
        """Persist several conflicts in one write; none are stored if any fails."""
        ...

    def find_conflict_by_id(self, conflict_id: str) -> Conflict | None: ...
    def delete_conflict(self, conflict_id: str) -> bool: ...

    def find_conflicts_involving_any_of(self, entity_ids: list[str]) -> list[Conflict]:
        """Conflicts that involve at least two of the given entity ids."""
        ...

    def find_conflicts_by_severity(self, severity: ConflictSeverity) -> list[Conflict]: ...
    def find_all_conflicts_by_detected_at_descending(self) -> list[Conflict]: ...
    def find_conflicts_involving_entity(self, entity_id: str) -> list[Conflict]: ...

    def find_conflicts_for_any_of_documents(self, document_ids: list[str]) -> list[Conflict]:
        """Conflicts touching any entity of the given documents, each returned once."""
        ...
