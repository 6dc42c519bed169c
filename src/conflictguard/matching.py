"""
Name resolution and duplicate detection for AI-reported conflicts.

The reasoning model refers to entities by free-text name, which rarely
matches the stored name exactly. These heuristics are plain substring
checks and can both over- and under-match.
"""

from typing import Iterable

import structlog

from conflictguard.models import Conflict, Entity

logger = structlog.get_logger(__name__)


def find_best_matching_entity(ai_name: str, entities: Iterable[Entity]) -> Entity | None:
    """
    Resolve an AI-provided name to a stored entity.

    Tries, in order, and stops at the first hit:

    1. case-insensitive exact name equality
    2. case-insensitive substring match in either direction, trimmed
    3. case-insensitive substring match against the entity value

    Returns None when nothing matches.
    """
    candidates = list(entities)
    normalized = ai_name.lower().strip()

    for entity in candidates:
        if entity.name.lower() == ai_name.lower():
            return entity

    for entity in candidates:
        entity_name = entity.name.lower().strip()
        if normalized in entity_name or entity_name in normalized:
            return entity

    for entity in candidates:
        if entity.value is not None and normalized in entity.value.lower():
            return entity

    logger.warning("entity_name_unmatched", ai_name=ai_name)
    return None


def find_involved_entities(ai_names: list[str] | None, entities: list[Entity]) -> list[Entity]:
    """Resolve every name, dropping misses and repeated hits on the same entity."""
    if not ai_names:
        return []

    matched: list[Entity] = []
    for ai_name in ai_names:
        best = find_best_matching_entity(ai_name, entities)
        # Identity, not equality: relation cycles make model equality recursive.
        if best is not None and not any(best is m for m in matched):
            matched.append(best)
    return matched


def is_duplicate_of(existing: Conflict, entity_ids: list[str], description: str | None) -> bool:
    """
    True when ``existing`` already covers a new conflict.

    A conflict is a duplicate when it involves exactly the same entity ids,
    or when either lower-cased description contains the other.
    """
    if sorted(existing.entity_ids) == sorted(entity_ids):
        logger.debug("duplicate_conflict_same_entities", existing_id=existing.id)
        return True

    if existing.description is not None and description is not None:
        existing_norm = existing.description.lower()
        new_norm = description.lower()
        if existing_norm in new_norm or new_norm in existing_norm:
            logger.debug("duplicate_conflict_similar_description", existing_id=existing.id)
            return True

    return False
