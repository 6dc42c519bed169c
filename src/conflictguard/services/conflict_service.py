"""
Conflict analysis: reasoning, name resolution, deduplication and persistence.
"""

from functools import lru_cache

import structlog

from conflictguard.matching import find_involved_entities, is_duplicate_of
from conflictguard.models import (
    Conflict,
    ConflictAnalysisResult,
    ConflictSeverity,
    Entity,
)
from conflictguard.models.document import utc_now
from conflictguard.services.reasoning_service import (
    ConflictReasoningService,
    get_reasoning_service,
)
from conflictguard.storage import GraphStore, get_graph_store

logger = structlog.get_logger(__name__)

NO_DOCUMENTS_SUMMARY = "No documents found for analysis"
NO_ENTITIES_SUMMARY = "No entities found for conflict analysis"


class ConflictService:
    """
    Detects conflicts across documents and manages stored conflicts.

    Two analyses over overlapping document sets may race between the
    duplicate check and the save; each save is atomic but the pair is not
    serialized, so a duplicate can slip through under concurrency.
    """

    def __init__(
        self,
        store: GraphStore | None = None,
        reasoning: ConflictReasoningService | None = None,
    ):
        self.store = store or get_graph_store()
        self.reasoning = reasoning or get_reasoning_service()

    def analyze_conflicts(self, document_ids: list[str]) -> ConflictAnalysisResult:
        """
        Run conflict analysis over the entities of the given documents.

        Returns only the conflicts persisted by this run. New conflicts are
        saved in a single store write, so a GraphStoreError leaves none of
        them behind. Raises AIServiceUnavailableError when the reasoning
        model cannot be reached.
        """
        logger.info("conflict_analysis_started", document_ids=document_ids)

        documents = self.store.find_documents_by_ids(document_ids)
        if not documents:
            logger.warning("conflict_analysis_no_documents", document_ids=document_ids)
            return ConflictAnalysisResult(conflicts=[], summary=NO_DOCUMENTS_SUMMARY)

        entities: list[Entity] = [e for doc in documents for e in doc.entities]
        if not entities:
            logger.warning("conflict_analysis_no_entities", document_ids=document_ids)
            return ConflictAnalysisResult(conflicts=[], summary=NO_ENTITIES_SUMMARY)

        analysis = self.reasoning.analyze_conflicts(entities)

        pending: list[Conflict] = []
        for detected in analysis.conflicts:
            involved = find_involved_entities(detected.involved_entity_names, entities)
            if not involved:
                logger.warning("conflict_skipped_unmatched", description=detected.description)
                continue

            conflict = Conflict(
                description=detected.description,
                severity=detected.severity,
                reasoning=detected.reasoning,
                legal_principle=detected.legal_principle,
                detected_at=utc_now(),
                entities=involved,
            )
            if self._is_duplicate(conflict, pending):
                logger.info("conflict_skipped_duplicate", description=detected.description)
                continue
            pending.append(conflict)

        saved = self.store.save_conflicts(pending) if pending else []

        logger.info("conflict_analysis_completed", detected=len(analysis.conflicts), saved=len(saved))
        return ConflictAnalysisResult(
            conflicts=saved,
            summary=analysis.overall_summary or "",
            analyzed_at=utc_now(),
        )

    def _is_duplicate(self, conflict: Conflict, pending: list[Conflict]) -> bool:
        """Check against stored conflicts and those queued earlier in this run."""
        entity_ids = conflict.entity_ids
        if len(entity_ids) < 2:
            return False
        wanted = set(entity_ids)
        candidates = self.store.find_conflicts_involving_any_of(entity_ids) + [
            p for p in pending if len(wanted.intersection(p.entity_ids)) >= 2
        ]
        return any(is_duplicate_of(c, entity_ids, conflict.description) for c in candidates)

    def get_conflicts(self, severity: ConflictSeverity | None = None) -> list[Conflict]:
        if severity is not None:
            return self.store.find_conflicts_by_severity(severity)
        return self.store.find_all_conflicts_by_detected_at_descending()

    def get_conflicts_for_documents(self, document_ids: list[str]) -> list[Conflict]:
        return self.store.find_conflicts_for_any_of_documents(document_ids)

    def get_conflicts_for_entity(self, entity_id: str) -> list[Conflict]:
        return self.store.find_conflicts_involving_entity(entity_id)

    def delete_conflict(self, conflict_id: str) -> bool:
        deleted = self.store.delete_conflict(conflict_id)
        if deleted:
            logger.info("conflict_deleted", conflict_id=conflict_id)
        return deleted


@lru_cache()
def get_conflict_service() -> ConflictService:
    """Get cached conflict service instance."""
    return ConflictService()
