"""Tests for ConflictService: the analysis pipeline end to end over the memory store."""

from unittest.mock import MagicMock

import pytest

from conflictguard.exceptions import AIServiceUnavailableError, GraphStoreError
from conflictguard.models import ConflictAnalysis, ConflictSeverity, DetectedConflict, DocumentType
from conflictguard.services.conflict_service import (
    NO_DOCUMENTS_SUMMARY,
    NO_ENTITIES_SUMMARY,
    ConflictService,
)
from conflictguard.services.document_service import DocumentService
from conflictguard.storage import InMemoryGraphStore


class TestAnalyzeConflicts:

    def test_lex_specialis_conflict_persisted(self, conflict_service, ingested_pair, memory_store):
        contract, regulation = ingested_pair

        result = conflict_service.analyze_conflicts([contract.id, regulation.id])

        assert result.summary == "One conflict found between contract and regulation"
        assert len(result.conflicts) == 1
        conflict = result.conflicts[0]
        assert conflict.id is not None
        assert conflict.severity is ConflictSeverity.HIGH
        assert conflict.legal_principle == "Lex Specialis"
        assert {e.name for e in conflict.entities} == {"Payment Term", "Statutory Payment Deadline"}

        stored = memory_store.find_all_conflicts_by_detected_at_descending()
        assert [c.id for c in stored] == [conflict.id]

    def test_reasoning_sees_entities_of_all_documents(self, conflict_service, ingested_pair, mock_reasoning):
        contract, regulation = ingested_pair
        conflict_service.analyze_conflicts([contract.id, regulation.id])

        (entities,), _ = mock_reasoning.analyze_conflicts.call_args
        assert {e.name for e in entities} == {
            "Payment Term",
            "Late Payment Penalty",
            "Statutory Payment Deadline",
        }

    def test_repeated_analysis_is_idempotent(self, conflict_service, ingested_pair, memory_store):
        ids = [d.id for d in ingested_pair]

        first = conflict_service.analyze_conflicts(ids)
        second = conflict_service.analyze_conflicts(ids)

        assert len(first.conflicts) == 1
        assert second.conflicts == []
        assert len(memory_store.find_all_conflicts_by_detected_at_descending()) == 1

    def test_no_documents(self, conflict_service, mock_reasoning):
        result = conflict_service.analyze_conflicts(["missing"])
        assert result.conflicts == []
        assert result.summary == NO_DOCUMENTS_SUMMARY
        mock_reasoning.analyze_conflicts.assert_not_called()

    def test_no_entities(self, memory_store, mock_reasoning, make_document):
        empty = memory_store.save_document(make_document("empty"))
        service = ConflictService(store=memory_store, reasoning=mock_reasoning)

        result = service.analyze_conflicts([empty.id])
        assert result.summary == NO_ENTITIES_SUMMARY
        mock_reasoning.analyze_conflicts.assert_not_called()

    def test_unmatched_conflict_discarded(self, ingested_pair):
        store = MagicMock()
        store.find_documents_by_ids.return_value = list(ingested_pair)
        reasoning = MagicMock()
        reasoning.analyze_conflicts.return_value = ConflictAnalysis(
            conflicts=[DetectedConflict(
                description="Governing law mismatch",
                severity="MEDIUM",
                involved_entity_names=["Governing Law", "Jurisdiction"],
            )],
            overall_summary="summary",
        )

        result = ConflictService(store=store, reasoning=reasoning).analyze_conflicts(["a", "b"])

        assert result.conflicts == []
        assert result.summary == "summary"
        store.save_conflicts.assert_not_called()

    def test_single_entity_conflict_skips_dedup(self, ingested_pair):
        store = MagicMock()
        store.find_documents_by_ids.return_value = list(ingested_pair)
        store.save_conflicts.side_effect = lambda conflicts: conflicts
        reasoning = MagicMock()
        reasoning.analyze_conflicts.return_value = ConflictAnalysis(conflicts=[
            DetectedConflict(
                description="Penalty is unenforceable",
                severity="LOW",
                involved_entity_names=["Late Payment Penalty"],
            )
        ])

        result = ConflictService(store=store, reasoning=reasoning).analyze_conflicts(["a"])

        assert len(result.conflicts) == 1
        store.find_conflicts_involving_any_of.assert_not_called()

    def test_duplicate_by_description_skipped(self, conflict_service, ingested_pair, mock_reasoning):
        ids = [d.id for d in ingested_pair]
        conflict_service.analyze_conflicts(ids)

        mock_reasoning.analyze_conflicts.return_value = ConflictAnalysis(conflicts=[
            DetectedConflict(
                description="contract payment term of 30 days exceeds the statutory 14 day limit (restated)",
                severity="CRITICAL",
                involved_entity_names=["Payment Term", "Statutory Payment Deadline", "Late Payment Penalty"],
            )
        ])
        result = conflict_service.analyze_conflicts(ids)
        assert result.conflicts == []

    def test_reasoning_unavailable_propagates(self, ingested_pair, memory_store):
        reasoning = MagicMock()
        reasoning.analyze_conflicts.side_effect = AIServiceUnavailableError(retry_after_seconds=30)
        service = ConflictService(store=memory_store, reasoning=reasoning)

        with pytest.raises(AIServiceUnavailableError):
            service.analyze_conflicts([d.id for d in ingested_pair])
        assert memory_store.find_all_conflicts_by_detected_at_descending() == []

    def test_missing_overall_summary(self, conflict_service, ingested_pair, mock_reasoning):
        mock_reasoning.analyze_conflicts.return_value = ConflictAnalysis(conflicts=[])
        result = conflict_service.analyze_conflicts([d.id for d in ingested_pair])
        assert result.summary == ""

    def test_store_failure_leaves_no_conflicts(self, mock_extraction, mock_reasoning):
        class FailingStore(InMemoryGraphStore):
            def _conflict_props(self, conflict):
                if conflict.description == "second":
                    raise GraphStoreError("write failed")
                return super()._conflict_props(conflict)

        store = FailingStore()
        documents = DocumentService(store=store, extraction=mock_extraction)
        contract = documents.ingest_document("supply.txt", "text", DocumentType.CONTRACT)
        regulation = documents.ingest_document("directive.txt", "text", DocumentType.REGULATION)
        service = ConflictService(store=store, reasoning=mock_reasoning)
        mock_reasoning.analyze_conflicts.return_value = ConflictAnalysis(conflicts=[
            DetectedConflict(
                description="first",
                severity="HIGH",
                involved_entity_names=["Payment Term", "Statutory Payment Deadline"],
            ),
            DetectedConflict(
                description="second",
                severity="LOW",
                involved_entity_names=["Late Payment Penalty", "Payment Term"],
            ),
        ])

        with pytest.raises(GraphStoreError):
            service.analyze_conflicts([contract.id, regulation.id])
        assert store.find_all_conflicts_by_detected_at_descending() == []

    def test_duplicates_within_one_run_saved_once(self, conflict_service, ingested_pair, mock_reasoning):
        mock_reasoning.analyze_conflicts.return_value = ConflictAnalysis(conflicts=[
            DetectedConflict(
                description="Payment term exceeds the statutory limit",
                severity="HIGH",
                involved_entity_names=["Payment Term", "Statutory Payment Deadline"],
            ),
            DetectedConflict(
                description="Thirty days is longer than fourteen",
                severity="MEDIUM",
                involved_entity_names=["Statutory Payment Deadline", "Payment Term"],
            ),
        ])

        result = conflict_service.analyze_conflicts([d.id for d in ingested_pair])

        assert [c.description for c in result.conflicts] == ["Payment term exceeds the statutory limit"]


class TestConflictQueries:

    def test_queries_and_delete(self, conflict_service, ingested_pair):
        contract, regulation = ingested_pair
        saved = conflict_service.analyze_conflicts([contract.id, regulation.id]).conflicts[0]

        assert [c.id for c in conflict_service.get_conflicts()] == [saved.id]
        assert conflict_service.get_conflicts(ConflictSeverity.LOW) == []
        assert [c.id for c in conflict_service.get_conflicts(ConflictSeverity.HIGH)] == [saved.id]
        assert [c.id for c in conflict_service.get_conflicts_for_documents([contract.id])] == [saved.id]

        term = next(e for e in contract.entities if e.name == "Payment Term")
        assert [c.id for c in conflict_service.get_conflicts_for_entity(term.id)] == [saved.id]

        assert conflict_service.delete_conflict(saved.id) is True
        assert conflict_service.get_conflicts() == []
