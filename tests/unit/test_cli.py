"""Tests for the click CLI."""

import os

import pytest
from unittest.mock import MagicMock
from click.testing import CliRunner

from conflictguard.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def wired_services(monkeypatch, document_service, conflict_service):
    """Route CLI commands to services backed by the shared memory store."""
    monkeypatch.setattr(
        "conflictguard.services.document_service.get_document_service", lambda: document_service
    )
    monkeypatch.setattr(
        "conflictguard.services.conflict_service.get_conflict_service", lambda: conflict_service
    )


class TestIngest:

    def test_ingest_file(self, runner, wired_services, tmp_path):
        path = tmp_path / "supply.txt"
        path.write_text("The Buyer shall pay within 30 days.", encoding="utf-8")

        result = runner.invoke(cli, ["ingest", str(path), "--type", "contract"])

        assert result.exit_code == 0, result.output
        assert "Entities extracted: 2" in result.output
        assert "Payment Term (TIME_PERIOD): 30 days" in result.output

    def test_empty_file_rejected(self, runner, wired_services, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_text("   ", encoding="utf-8")

        result = runner.invoke(cli, ["ingest", str(path)])

        assert result.exit_code != 0
        assert "Document content cannot be empty" in result.output


class TestAnalyze:

    def test_check_ingests_and_analyzes(self, runner, wired_services, tmp_path):
        contract = tmp_path / "supply.txt"
        contract.write_text("pay within 30 days", encoding="utf-8")

        result = runner.invoke(cli, ["check", str(contract)])

        assert result.exit_code == 0, result.output
        assert "Ingested supply.txt" in result.output
        assert "Summary: One conflict found" in result.output

    def test_analyze_requires_ids(self, runner, wired_services):
        result = runner.invoke(cli, ["analyze"])
        assert result.exit_code != 0
        assert "At least one document ID is required" in result.output

    def test_analyze_prints_conflicts(self, runner, wired_services, ingested_pair):
        ids = [d.id for d in ingested_pair]

        result = runner.invoke(cli, ["analyze", *ids])

        assert result.exit_code == 0, result.output
        assert "New conflicts: 1" in result.output
        assert "[HIGH]" in result.output
        assert "principle: Lex Specialis" in result.output

    def test_unavailable_reasoning_exits_non_zero(self, runner, monkeypatch):
        from conflictguard.exceptions import AIServiceUnavailableError

        service = MagicMock()
        service.analyze_conflicts.side_effect = AIServiceUnavailableError()
        monkeypatch.setattr("conflictguard.services.conflict_service.get_conflict_service", lambda: service)

        result = runner.invoke(cli, ["analyze", "doc-1"])

        assert result.exit_code == 1
        assert "SERVICE_UNAVAILABLE" in result.output


class TestListing:

    def test_empty_listings(self, runner, wired_services):
        assert "No documents stored." in runner.invoke(cli, ["documents"]).output
        assert "No conflicts found." in runner.invoke(cli, ["conflicts"]).output

    def test_conflicts_by_severity(self, runner, wired_services, ingested_pair, conflict_service):
        conflict_service.analyze_conflicts([d.id for d in ingested_pair])

        high = runner.invoke(cli, ["conflicts", "--severity", "high"])
        low = runner.invoke(cli, ["conflicts", "--severity", "LOW"])

        assert "[HIGH]" in high.output
        assert "No conflicts found." in low.output

    def test_config(self, runner):
        result = runner.invoke(cli, ["--in-memory", "config"])
        assert result.exit_code == 0
        assert "Graph backend: memory" in result.output


class TestInMemory:

    def test_in_memory_leaves_environment_untouched(self, runner, monkeypatch):
        monkeypatch.setenv("GRAPH_BACKEND", "neo4j")

        result = runner.invoke(cli, ["--in-memory", "documents"])

        assert result.exit_code == 0, result.output
        assert "No documents stored." in result.output
        assert os.environ["GRAPH_BACKEND"] == "neo4j"

        from conflictguard.config import get_settings
        assert get_settings().graph_backend == "neo4j"

    def test_documents_by_id(self, runner, wired_services, ingested_pair):
        contract, _ = ingested_pair

        result = runner.invoke(cli, ["documents", "--id", contract.id])

        assert "supply.txt" in result.output
        assert "directive.txt" not in result.output
