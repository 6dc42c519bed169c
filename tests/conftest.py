"""Shared pytest fixtures and mocks for the ConflictGuard test suite."""

import pytest
from unittest.mock import MagicMock

from conflictguard.config import Settings
from conflictguard.models import (
    ConflictAnalysis,
    DetectedConflict,
    Document,
    DocumentType,
    Entity,
    EntityType,
    ExtractedEntity,
    ExtractedRelation,
    ExtractionResult,
)
from conflictguard.services.conflict_service import ConflictService
from conflictguard.services.document_service import DocumentService
from conflictguard.services.entity_service import EntityService
from conflictguard.storage import InMemoryGraphStore


# ---------------------------------------------------------------------------
# Environment and singleton cache clearing (autouse)
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Force the in-memory backend, drop real API keys, clear @lru_cache singletons."""
    monkeypatch.setenv("GRAPH_BACKEND", "memory")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")

    from conflictguard.config import get_settings
    from conflictguard.services.conflict_service import get_conflict_service
    from conflictguard.services.document_service import get_document_service
    from conflictguard.services.entity_service import get_entity_service
    from conflictguard.services.extraction_service import get_extraction_service
    from conflictguard.services.llm_service import get_llm_service
    from conflictguard.services.prompts import get_prompt_templates
    from conflictguard.services.reasoning_service import get_reasoning_service
    from conflictguard.storage import get_graph_store

    caches = [
        get_settings,
        get_graph_store,
        get_llm_service,
        get_prompt_templates,
        get_extraction_service,
        get_reasoning_service,
        get_document_service,
        get_conflict_service,
        get_entity_service,
    ]
    for cached in caches:
        cached.cache_clear()
    yield
    for cached in caches:
        cached.cache_clear()


@pytest.fixture
def settings():
    return Settings(graph_backend="memory", llm_max_retries=1)


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

CONTRACT_TEXT = (
    "Supply Agreement. The Buyer shall pay every invoice within 30 days of receipt. "
    "Late payment incurs a penalty of 2% per month."
)

REGULATION_TEXT = (
    "Late Payment Directive. Payment terms in commercial contracts with small "
    "suppliers shall not exceed 14 days."
)


@pytest.fixture
def contract_extraction():
    """Extraction for a contract with a 30-day payment term and a dependent penalty."""
    return ExtractionResult(
        entities=[
            ExtractedEntity(
                name="Payment Term",
                entity_type=EntityType.TIME_PERIOD,
                value="30 days",
                source_context="The Buyer shall pay every invoice within 30 days of receipt.",
            ),
            ExtractedEntity(
                name="Late Payment Penalty",
                entity_type=EntityType.PENALTY,
                value="2% per month",
                source_context="Late payment incurs a penalty of 2% per month.",
                relationships=[
                    ExtractedRelation(
                        target_entity_name="Payment Term",
                        relationship_type="DEPENDS_ON",
                    )
                ],
            ),
        ],
        document_summary="Supply agreement with 30 day payment terms",
    )


@pytest.fixture
def regulation_extraction():
    """Extraction for a regulation capping payment terms at 14 days."""
    return ExtractionResult(
        entities=[
            ExtractedEntity(
                name="Statutory Payment Deadline",
                entity_type=EntityType.TIME_PERIOD,
                value="14 days",
                source_context="Payment terms ... shall not exceed 14 days.",
            ),
        ],
        document_summary="Caps payment terms at 14 days",
    )


@pytest.fixture
def lex_specialis_analysis():
    """Reasoning output reporting the payment-term conflict."""
    return ConflictAnalysis(
        conflicts=[
            DetectedConflict(
                description="Contract payment term of 30 days exceeds the statutory 14 day limit",
                severity="HIGH",
                reasoning="The directive is the more specific rule for supplier payments.",
                legal_principle="Lex Specialis",
                involved_entity_names=["Payment Term", "Statutory Payment Deadline"],
            )
        ],
        overall_summary="One conflict found between contract and regulation",
    )


@pytest.fixture
def sample_entities():
    """Two unsaved entities from different documents."""
    return [
        Entity(name="Payment Term", entity_type=EntityType.TIME_PERIOD, value="30 days"),
        Entity(name="Statutory Payment Deadline", entity_type=EntityType.TIME_PERIOD, value="14 days"),
    ]


# ---------------------------------------------------------------------------
# Store and gateway doubles
# ---------------------------------------------------------------------------

@pytest.fixture
def memory_store():
    return InMemoryGraphStore()


@pytest.fixture
def mock_extraction(contract_extraction, regulation_extraction):
    """Extraction gateway keyed on the document type."""
    extraction = MagicMock()

    def extract(name, document_type, content):
        if document_type == DocumentType.REGULATION:
            return regulation_extraction
        return contract_extraction

    extraction.extract_entities.side_effect = extract
    return extraction


@pytest.fixture
def mock_reasoning(lex_specialis_analysis):
    reasoning = MagicMock()
    reasoning.analyze_conflicts.return_value = lex_specialis_analysis
    return reasoning


@pytest.fixture
def document_service(memory_store, mock_extraction):
    return DocumentService(store=memory_store, extraction=mock_extraction)


@pytest.fixture
def conflict_service(memory_store, mock_reasoning):
    return ConflictService(store=memory_store, reasoning=mock_reasoning)


@pytest.fixture
def entity_service(memory_store):
    return EntityService(store=memory_store)


@pytest.fixture
def ingested_pair(document_service):
    """A stored contract and a stored regulation."""
    contract = document_service.ingest_document("supply.txt", CONTRACT_TEXT, DocumentType.CONTRACT)
    regulation = document_service.ingest_document(
        "directive.txt", REGULATION_TEXT, DocumentType.REGULATION
    )
    return contract, regulation


@pytest.fixture
def make_document():
    """Build an unsaved document holding the given entities."""

    def build(name, *entities, document_type=DocumentType.CONTRACT):
        document = Document(name=name, content=f"{name} content", document_type=document_type)
        for entity in entities:
            document.add_entity(entity)
        return document

    return build
