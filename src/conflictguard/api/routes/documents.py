"""
Document routes: ingestion, listing and deletion.
"""

import structlog
from fastapi import APIRouter, Depends, Query, status

from conflictguard.exceptions import NotFoundError
from conflictguard.models.api import DeleteResponse, DocumentInput, DocumentResponse, EntityResponse
from conflictguard.services.document_service import DocumentService, get_document_service
from conflictguard.services.entity_service import EntityService, get_entity_service
from conflictguard.validation import validate_document_input

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
def ingest_document(
    payload: DocumentInput,
    service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    """
    Ingest a document and extract its entities.
    """
    validate_document_input(payload.name, payload.content, payload.document_type)
    logger.info("ingest_document_requested", name=payload.name, document_type=payload.document_type.value)
    document = service.ingest_document(payload.name, payload.content, payload.document_type)
    return DocumentResponse.from_domain(document)


@router.get("", response_model=list[DocumentResponse])
def list_documents(
    ids: list[str] | None = Query(default=None),
    service: DocumentService = Depends(get_document_service),
) -> list[DocumentResponse]:
    """
    List all documents newest first, or only those named by repeated ``ids``.
    """
    documents = service.get_documents_by_ids(ids) if ids else service.get_all_documents()
    return [DocumentResponse.from_domain(d) for d in documents]


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(
    document_id: str,
    service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    document = service.get_document_by_id(document_id)
    if document is None:
        raise NotFoundError("Document", document_id)
    return DocumentResponse.from_domain(document)


@router.get("/{document_id}/entities", response_model=list[EntityResponse])
def get_document_entities(
    document_id: str,
    service: EntityService = Depends(get_entity_service),
) -> list[EntityResponse]:
    return [EntityResponse.from_domain(e) for e in service.get_entities_for_document(document_id)]


@router.delete("/{document_id}", response_model=DeleteResponse)
def delete_document(
    document_id: str,
    service: DocumentService = Depends(get_document_service),
) -> DeleteResponse:
    """
    Delete a document and the entities extracted from it.

    Returns ``deleted: false`` when no such document exists.
    """
    logger.info("delete_document_requested", document_id=document_id)
    return DeleteResponse(id=document_id, deleted=service.delete_document(document_id))
