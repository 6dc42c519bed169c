"""
Read access to stored entities.
"""

from functools import lru_cache

from conflictguard.models import Document, Entity, EntityType
from conflictguard.storage import GraphStore, get_graph_store


class EntityService:
    def __init__(self, store: GraphStore | None = None):
        self.store = store or get_graph_store()

    def get_entities(self, entity_type: EntityType | None = None) -> list[Entity]:
        return self.store.find_entities(entity_type)

    def get_entity_by_id(self, entity_id: str) -> Entity | None:
        return self.store.find_entity_by_id(entity_id)

    def get_entities_for_document(self, document_id: str) -> list[Entity]:
        return self.store.find_entities_by_document_id(document_id)

    def get_source_document(self, entity_id: str) -> Document | None:
        """The document an entity was extracted from."""
        return self.store.find_document_by_entity_id(entity_id)

    def get_entities_with_conflicts(self) -> list[Entity]:
        """Entities on either end of a CONFLICTS_WITH relation."""
        return self.store.find_entities_with_conflicts()


@lru_cache()
def get_entity_service() -> EntityService:
    """Get cached entity service instance."""
    return EntityService()
