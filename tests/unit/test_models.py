"""Tests for conflictguard.models: enums, domain models, gateway parsing."""

from conflictguard.models import (
    ConflictAnalysis,
    ConflictSeverity,
    Conflict,
    Document,
    DocumentType,
    Entity,
    EntityType,
    ExtractionResult,
    RelationshipType,
)
from conflictguard.models.api import DocumentResponse, EntityResponse


class TestConflictSeverity:

    def test_declaration_order(self):
        assert ConflictSeverity.LOW < ConflictSeverity.MEDIUM < ConflictSeverity.HIGH
        assert ConflictSeverity.HIGH < ConflictSeverity.CRITICAL

    def test_not_string_order(self):
        # "CRITICAL" < "LOW" as strings
        assert ConflictSeverity.CRITICAL > ConflictSeverity.LOW

    def test_sorting(self):
        ordered = sorted([ConflictSeverity.CRITICAL, ConflictSeverity.LOW, ConflictSeverity.HIGH])
        assert ordered == [ConflictSeverity.LOW, ConflictSeverity.HIGH, ConflictSeverity.CRITICAL]

    def test_usable_as_dict_key(self):
        counts = {ConflictSeverity.HIGH: 2}
        assert counts[ConflictSeverity("HIGH")] == 2


class TestLenientEnums:

    def test_lowercase(self):
        assert DocumentType("regulation") is DocumentType.REGULATION

    def test_spaces_and_hyphens(self):
        assert DocumentType("terms and conditions") is DocumentType.TERMS_AND_CONDITIONS
        assert RelationshipType("conflicts-with") is RelationshipType.CONFLICTS_WITH


class TestEntity:

    def test_related_entities_none_becomes_empty(self):
        entity = Entity(name="Payment Term", entity_type=EntityType.TIME_PERIOD, related_entities=None)
        assert entity.related_entities == []

    def test_add_relationship(self):
        source = Entity(name="Penalty", entity_type=EntityType.PENALTY)
        target = Entity(name="Payment Term", entity_type=EntityType.TIME_PERIOD)
        rel = source.add_relationship(target, RelationshipType.DEPENDS_ON)
        assert source.related_entities == [rel]
        assert rel.target_entity is target

    def test_repr_survives_cycles(self):
        a = Entity(name="A", entity_type=EntityType.CLAUSE)
        b = Entity(name="B", entity_type=EntityType.CLAUSE)
        a.add_relationship(b, RelationshipType.CONFLICTS_WITH)
        b.add_relationship(a, RelationshipType.CONFLICTS_WITH)
        assert "A" in repr(a)
        assert "B" in str(b)

    def test_to_neo4j_properties(self):
        entity = Entity(id="e1", name="Fee", entity_type=EntityType.MONETARY_VALUE, value="EUR 100")
        props = entity.to_neo4j_properties()
        assert props["entity_type"] == "MONETARY_VALUE"
        assert props["value"] == "EUR 100"


class TestDocumentAndConflict:

    def test_document_created_at_is_utc(self):
        doc = Document(name="a", content="b", document_type=DocumentType.CONTRACT)
        assert doc.created_at.tzinfo is not None

    def test_document_properties_serialize_timestamp(self):
        doc = Document(name="a", content="b", document_type=DocumentType.CONTRACT)
        assert doc.to_neo4j_properties()["created_at"] == doc.created_at.isoformat()

    def test_conflict_entity_ids_skip_unsaved(self):
        conflict = Conflict(
            description="x",
            severity=ConflictSeverity.LOW,
            entities=[
                Entity(id="e1", name="A", entity_type=EntityType.CLAUSE),
                Entity(name="B", entity_type=EntityType.CLAUSE),
            ],
        )
        assert conflict.entity_ids == ["e1"]


class TestGatewayModels:

    def test_extraction_from_camel_case(self):
        result = ExtractionResult.model_validate({
            "entities": [{
                "name": "Payment Term",
                "entityType": "TIME_PERIOD",
                "value": "30 days",
                "sourceContext": "within 30 days",
                "relationships": [{"targetEntityName": "Invoice", "relationshipType": "DEPENDS_ON"}],
            }],
            "documentSummary": "summary",
        })
        entity = result.entities[0]
        assert entity.entity_type is EntityType.TIME_PERIOD
        assert entity.relationships[0].target_entity_name == "Invoice"
        assert result.document_summary == "summary"

    def test_null_lists_become_empty(self):
        result = ExtractionResult.model_validate({"entities": None})
        assert result.entities == []
        analysis = ConflictAnalysis.model_validate({
            "conflicts": [{"description": "d", "severity": "low", "involvedEntityNames": None}],
        })
        assert analysis.conflicts[0].involved_entity_names == []
        assert analysis.conflicts[0].severity is ConflictSeverity.LOW

    def test_unknown_fields_ignored(self):
        analysis = ConflictAnalysis.model_validate({"conflicts": [], "confidence": 0.9})
        assert analysis.overall_summary is None


class TestApiModels:

    def test_entity_response_flattens_relations(self):
        a = Entity(id="a", name="A", entity_type=EntityType.CLAUSE)
        b = Entity(id="b", name="B", entity_type=EntityType.CLAUSE)
        a.add_relationship(b, RelationshipType.OVERRIDES)
        b.add_relationship(a, RelationshipType.OVERRIDES)

        response = EntityResponse.from_domain(a)
        assert response.related_entities[0].entity_id == "b"
        dumped = response.model_dump(by_alias=True)
        assert dumped["relatedEntities"][0]["relationshipType"] == "OVERRIDES"

    def test_document_response_uses_camel_case(self):
        doc = Document(id="d1", name="a", content="b", document_type=DocumentType.REGULATION)
        dumped = DocumentResponse.from_domain(doc).model_dump(by_alias=True, mode="json")
        assert dumped["documentType"] == "REGULATION"
        assert "createdAt" in dumped
