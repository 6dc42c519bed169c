"""
Document ingestion: extraction, graph assembly and persistence.
"""

from functools import lru_cache

import structlog

from conflictguard.models import Document, DocumentType, Entity
from conflictguard.services.extraction_service import (
    EntityExtractionService,
    get_extraction_service,
)
from conflictguard.storage import GraphStore, get_graph_store

logger = structlog.get_logger(__name__)


class DocumentService:
    """Ingests documents and serves them back from the graph store."""

    def __init__(
        self,
        store: GraphStore | None = None,
        extraction: EntityExtractionService | None = None,
    ):
        self.store = store or get_graph_store()
        self.extraction = extraction or get_extraction_service()

    def ingest_document(self, name: str, content: str, document_type: DocumentType) -> Document:
        """
        Extract entities from a document and persist the resulting subgraph.

        Entities are created first and relations wired in a second pass, since
        the model refers to relation targets by name and may point forward.
        Relations whose target name was not extracted are dropped. A failed
        or empty extraction still stores the document, with no entities.
        """
        logger.info("document_ingestion_started", name=name, document_type=document_type.value)

        document = Document(name=name, content=content, document_type=document_type)
        result = self.extraction.extract_entities(name, document_type, content)

        by_name: dict[str, Entity] = {}
        for extracted in result.entities:
            entity = Entity(
                name=extracted.name,
                entity_type=extracted.entity_type,
                value=extracted.value,
                source_context=extracted.source_context,
            )
            by_name[extracted.name] = entity
            document.add_entity(entity)

        dropped = 0
        for extracted in result.entities:
            source = by_name[extracted.name]
            for relation in extracted.relationships:
                target = by_name.get(relation.target_entity_name)
                if target is None:
                    dropped += 1
                    continue
                source.add_relationship(target, relation.relationship_type)

        saved = self.store.save_document(document)
        logger.info(
            "document_ingested",
            document_id=saved.id,
            entities=len(saved.entities),
            dropped_relations=dropped,
            summary=result.document_summary,
        )
        return saved

    def get_all_documents(self) -> list[Document]:
        return self.store.find_all_documents_by_created_at_descending()

    def get_document_by_id(self, document_id: str) -> Document | None:
        return self.store.find_document_by_id(document_id)

    def get_documents_by_ids(self, document_ids: list[str]) -> list[Document]:
        return self.store.find_documents_by_ids(document_ids)

    def delete_document(self, document_id: str) -> bool:
        """Delete a document and the entities it owns. False if absent."""
        deleted = self.store.delete_document(document_id)
        if deleted:
            logger.info("document_deleted", document_id=document_id)
        return deleted


@lru_cache()
def get_document_service() -> DocumentService:
    """Get cached document service instance."""
    return DocumentService()
