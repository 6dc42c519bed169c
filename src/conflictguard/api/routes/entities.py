"""
Entity routes.
"""

from fastapi import APIRouter, Depends, Query

from conflictguard.exceptions import NotFoundError
from conflictguard.models import EntityType
from conflictguard.models.api import ConflictResponse, EntityDetailResponse, EntityResponse
from conflictguard.services.conflict_service import ConflictService, get_conflict_service
from conflictguard.services.entity_service import EntityService, get_entity_service

router = APIRouter()


@router.get("", response_model=list[EntityResponse])
def list_entities(
    entity_type: EntityType | None = Query(default=None, alias="type"),
    service: EntityService = Depends(get_entity_service),
) -> list[EntityResponse]:
    """
    List entities, optionally filtered by type.
    """
    return [EntityResponse.from_domain(e) for e in service.get_entities(entity_type)]


@router.get("/with-conflicts", response_model=list[EntityResponse])
def list_entities_with_conflicts(
    service: EntityService = Depends(get_entity_service),
) -> list[EntityResponse]:
    """
    Entities linked by a CONFLICTS_WITH relation.
    """
    return [EntityResponse.from_domain(e) for e in service.get_entities_with_conflicts()]


@router.get("/{entity_id}", response_model=EntityDetailResponse)
def get_entity(
    entity_id: str,
    entities: EntityService = Depends(get_entity_service),
    conflicts: ConflictService = Depends(get_conflict_service),
) -> EntityDetailResponse:
    """
    Entity with its relations, source document and involving conflicts.
    """
    entity = entities.get_entity_by_id(entity_id)
    if entity is None:
        raise NotFoundError("Entity", entity_id)

    source = entities.get_source_document(entity_id)
    base = EntityResponse.from_domain(entity)
    return EntityDetailResponse(
        **base.model_dump(),
        source_document_id=source.id if source else None,
        source_document_name=source.name if source else None,
        conflict_ids=[c.id for c in conflicts.get_conflicts_for_entity(entity_id)],
    )


@router.get("/{entity_id}/conflicts", response_model=list[ConflictResponse])
def get_entity_conflicts(
    entity_id: str,
    service: ConflictService = Depends(get_conflict_service),
) -> list[ConflictResponse]:
    return [ConflictResponse.from_domain(c) for c in service.get_conflicts_for_entity(entity_id)]
