"""
Conflict routes: analysis, listing and deletion.
"""

import structlog
from fastapi import APIRouter, Depends, Query

from conflictguard.models import ConflictSeverity
from conflictguard.models.api import (
    ConflictAnalysisResponse,
    ConflictResponse,
    DeleteResponse,
    DocumentIdsRequest,
)
from conflictguard.services.conflict_service import ConflictService, get_conflict_service
from conflictguard.validation import validate_document_ids

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/analyze", response_model=ConflictAnalysisResponse)
def analyze_conflicts(
    payload: DocumentIdsRequest,
    service: ConflictService = Depends(get_conflict_service),
) -> ConflictAnalysisResponse:
    """
    Detect conflicts between the entities of the given documents.

    Only conflicts persisted by this run are returned. Responds 503 with a
    Retry-After header when the reasoning model is unreachable.
    """
    validate_document_ids(payload.document_ids)
    logger.info("analyze_conflicts_requested", document_ids=payload.document_ids)
    result = service.analyze_conflicts(payload.document_ids)
    return ConflictAnalysisResponse.from_domain(result)


@router.get("", response_model=list[ConflictResponse])
def list_conflicts(
    severity: ConflictSeverity | None = Query(default=None),
    service: ConflictService = Depends(get_conflict_service),
) -> list[ConflictResponse]:
    """
    List conflicts, newest first, optionally filtered by severity.
    """
    return [ConflictResponse.from_domain(c) for c in service.get_conflicts(severity)]


@router.post("/for-documents", response_model=list[ConflictResponse])
def conflicts_for_documents(
    payload: DocumentIdsRequest,
    service: ConflictService = Depends(get_conflict_service),
) -> list[ConflictResponse]:
    """
    Conflicts touching any entity of the given documents.
    """
    conflicts = service.get_conflicts_for_documents(payload.document_ids or [])
    return [ConflictResponse.from_domain(c) for c in conflicts]


@router.delete("/{conflict_id}", response_model=DeleteResponse)
def delete_conflict(
    conflict_id: str,
    service: ConflictService = Depends(get_conflict_service),
) -> DeleteResponse:
    logger.info("delete_conflict_requested", conflict_id=conflict_id)
    return DeleteResponse(id=conflict_id, deleted=service.delete_conflict(conflict_id))
