"""
In-process graph store backed by a NetworkX multigraph.

Used by the test suite, local demos and the CLI when no Neo4j instance is
available. Node keys are entity/document/conflict ids; every node carries a
``label`` attribute and edges are keyed by relationship type.
"""

import threading
from datetime import datetime
from typing import Any, Iterable
from uuid import uuid4

import networkx as nx
import structlog

from conflictguard.exceptions import GraphStoreError
from conflictguard.models import (
    Conflict,
    ConflictSeverity,
    Document,
    DocumentType,
    Entity,
    EntityType,
    RelationshipType,
)

logger = structlog.get_logger(__name__)

DOCUMENT = "Document"
ENTITY = "Entity"
CONFLICT = "Conflict"

CONTAINS = "CONTAINS"
RELATES_TO = "RELATES_TO"
INVOLVES = "INVOLVES"


def _new_id() -> str:
    return str(uuid4())


class InMemoryGraphStore:
    """
    GraphStore implementation holding the whole graph in memory.

    Writes stage every node and edge first and apply them under a lock, so a
    failed validation leaves the graph and the caller's objects untouched.
    Reads return freshly built model objects.
    """

    def __init__(self):
        self._graph = nx.MultiDiGraph()
        self._lock = threading.RLock()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def setup_schema(self) -> None:
        """Nothing to create for an in-memory graph."""
        logger.debug("memory_schema_setup_skipped")

    def health_check(self) -> bool:
        return True

    def close(self) -> None:
        pass

    # =========================================================================
    # Document Operations
    # =========================================================================

    def save_document(self, document: Document) -> Document:
        with self._lock:
            document_id = document.id or _new_id()
            entity_ids: dict[int, str] = {
                id(entity): entity.id or _new_id() for entity in document.entities
            }

            relations: list[tuple[str, str, RelationshipType]] = []
            for entity in document.entities:
                for rel in entity.related_entities:
                    target_id = entity_ids.get(id(rel.target_entity)) or rel.target_entity.id
                    if target_id is None or (
                        id(rel.target_entity) not in entity_ids
                        and not self._has(target_id, ENTITY)
                    ):
                        raise GraphStoreError(
                            f"Relation target '{rel.target_entity.name}' is neither part "
                            f"of document '{document.name}' nor stored"
                        )
                    relations.append(
                        (entity_ids[id(entity)], target_id, rel.relationship_type)
                    )

            self._graph.add_node(document_id, label=DOCUMENT, **self._document_props(document))
            for entity in document.entities:
                entity_id = entity_ids[id(entity)]
                self._graph.add_node(entity_id, label=ENTITY, **self._entity_props(entity))
                if not self._graph.has_edge(document_id, entity_id, key=CONTAINS):
                    self._graph.add_edge(document_id, entity_id, key=CONTAINS)
                stale = [
                    (entity_id, target, key)
                    for _, target, key, data in self._graph.out_edges(
                        entity_id, keys=True, data=True
                    )
                    if data.get("kind") == RELATES_TO
                ]
                self._graph.remove_edges_from(stale)

            for source_id, target_id, relationship_type in relations:
                if self._has_relation(source_id, target_id, relationship_type):
                    continue
                # Several relations between the same pair share the RELATES_TO
                # key, so networkx assigns them distinct integer keys instead.
                self._graph.add_edge(
                    source_id,
                    target_id,
                    relationship_type=relationship_type.value,
                    kind=RELATES_TO,
                )

            document.id = document_id
            for entity in document.entities:
                entity.id = entity_ids[id(entity)]

        logger.debug(
            "document_saved",
            document_id=document_id,
            entities=len(document.entities),
            relations=len(relations),
        )
        return document

    def find_document_by_id(self, document_id: str) -> Document | None:
        with self._lock:
            if not self._has(document_id, DOCUMENT):
                return None
            return self._build_document(document_id)

    def find_documents_by_ids(self, document_ids: list[str]) -> list[Document]:
        with self._lock:
            return [
                self._build_document(doc_id)
                for doc_id in dict.fromkeys(document_ids)
                if self._has(doc_id, DOCUMENT)
            ]

    def find_all_documents_by_created_at_descending(self) -> list[Document]:
        with self._lock:
            documents = [self._build_document(n) for n in self._nodes(DOCUMENT)]
        return sorted(documents, key=lambda d: d.created_at, reverse=True)

    def find_document_by_entity_id(self, entity_id: str) -> Document | None:
        with self._lock:
            if not self._has(entity_id, ENTITY):
                return None
            for source, _, key in self._graph.in_edges(entity_id, keys=True):
                if key == CONTAINS:
                    return self._build_document(source)
            return None

    def delete_document(self, document_id: str) -> bool:
        with self._lock:
            if not self._has(document_id, DOCUMENT):
                return False
            owned = self._contained_entity_ids(document_id)
            self._graph.remove_nodes_from([document_id, *owned])
        logger.debug("document_deleted", document_id=document_id, entities=len(owned))
        return True

    # =========================================================================
    # Entity Operations
    # =========================================================================

    def find_entity_by_id(self, entity_id: str) -> Entity | None:
        with self._lock:
            if not self._has(entity_id, ENTITY):
                return None
            return self._build_entities([entity_id])[0]

    def find_entities(self, entity_type: EntityType | None = None) -> list[Entity]:
        with self._lock:
            ids = [
                n
                for n in self._nodes(ENTITY)
                if entity_type is None
                or self._graph.nodes[n]["entity_type"] == entity_type.value
            ]
            return self._build_entities(ids)

    def find_entities_by_document_id(self, document_id: str) -> list[Entity]:
        with self._lock:
            if not self._has(document_id, DOCUMENT):
                return []
            return self._build_entities(self._contained_entity_ids(document_id))

    def find_entities_with_conflicts(self) -> list[Entity]:
        with self._lock:
            ids: dict[str, None] = {}
            for source, target, data in self._graph.edges(data=True):
                if (
                    data.get("kind") == RELATES_TO
                    and data.get("relationship_type") == RelationshipType.CONFLICTS_WITH.value
                ):
                    ids[source] = None
                    ids[target] = None
            return self._build_entities(list(ids))

    # =========================================================================
    # Conflict Operations
    # =========================================================================

    def save_conflict(self, conflict: Conflict) -> Conflict:
        return self.save_conflicts([conflict])[0]

    def save_conflicts(self, conflicts: list[Conflict]) -> list[Conflict]:
        with self._lock:
            staged: list[tuple[str, dict[str, Any], list[str]]] = []
            for conflict in conflicts:
                missing = [
                    e.name
                    for e in conflict.entities
                    if e.id is None or not self._has(e.id, ENTITY)
                ]
                if missing:
                    raise GraphStoreError(f"Conflict references unsaved entities: {missing}")
                staged.append(
                    (
                        conflict.id or _new_id(),
                        self._conflict_props(conflict),
                        list(dict.fromkeys(e.id for e in conflict.entities)),
                    )
                )

            for conflict_id, props, entity_ids in staged:
                self._graph.add_node(conflict_id, label=CONFLICT, **props)
                for entity_id in entity_ids:
                    if not self._graph.has_edge(conflict_id, entity_id, key=INVOLVES):
                        self._graph.add_edge(conflict_id, entity_id, key=INVOLVES)

            for conflict, (conflict_id, _, _) in zip(conflicts, staged):
                conflict.id = conflict_id

        logger.debug("conflicts_saved", conflict_ids=[c.id for c in conflicts])
        return conflicts

    def find_conflict_by_id(self, conflict_id: str) -> Conflict | None:
        with self._lock:
            if not self._has(conflict_id, CONFLICT):
                return None
            return self._build_conflict(conflict_id)

    def delete_conflict(self, conflict_id: str) -> bool:
        with self._lock:
            if not self._has(conflict_id, CONFLICT):
                return False
            self._graph.remove_node(conflict_id)
        logger.debug("conflict_deleted", conflict_id=conflict_id)
        return True

    def find_conflicts_involving_any_of(self, entity_ids: list[str]) -> list[Conflict]:
        wanted = set(entity_ids)
        with self._lock:
            matches = [
                c
                for c in self._nodes(CONFLICT)
                if len(wanted.intersection(self._involved_entity_ids(c))) >= 2
            ]
            return self._build_conflicts(matches)

    def find_conflicts_by_severity(self, severity: ConflictSeverity) -> list[Conflict]:
        with self._lock:
            matches = [
                c
                for c in self._nodes(CONFLICT)
                if self._graph.nodes[c]["severity"] == severity.value
            ]
            return self._build_conflicts(matches)

    def find_all_conflicts_by_detected_at_descending(self) -> list[Conflict]:
        with self._lock:
            return self._build_conflicts(self._nodes(CONFLICT))

    def find_conflicts_involving_entity(self, entity_id: str) -> list[Conflict]:
        with self._lock:
            if not self._has(entity_id, ENTITY):
                return []
            matches = [
                source
                for source, _, key in self._graph.in_edges(entity_id, keys=True)
                if key == INVOLVES
            ]
            return self._build_conflicts(matches)

    def find_conflicts_for_any_of_documents(self, document_ids: list[str]) -> list[Conflict]:
        with self._lock:
            entity_ids: set[str] = set()
            for doc_id in document_ids:
                if self._has(doc_id, DOCUMENT):
                    entity_ids.update(self._contained_entity_ids(doc_id))
            matches = [
                c
                for c in self._nodes(CONFLICT)
                if entity_ids.intersection(self._involved_entity_ids(c))
            ]
            return self._build_conflicts(matches)

    # =========================================================================
    # Helper Methods
    # =========================================================================

    def _has(self, node_id: str, label: str) -> bool:
        return (
            node_id in self._graph
            and self._graph.nodes[node_id].get("label") == label
        )

    def _nodes(self, label: str) -> list[str]:
        return [n for n, data in self._graph.nodes(data=True) if data.get("label") == label]

    def _has_relation(
        self, source_id: str, target_id: str, relationship_type: RelationshipType
    ) -> bool:
        """True when an identical RELATES_TO edge is already stored."""
        edges = self._graph.get_edge_data(source_id, target_id) or {}
        return any(
            data.get("kind") == RELATES_TO
            and data.get("relationship_type") == relationship_type.value
            for data in edges.values()
        )

    def _contained_entity_ids(self, document_id: str) -> list[str]:
        return [
            target
            for _, target, key in self._graph.out_edges(document_id, keys=True)
            if key == CONTAINS
        ]

    def _involved_entity_ids(self, conflict_id: str) -> list[str]:
        return [
            target
            for _, target, key in self._graph.out_edges(conflict_id, keys=True)
            if key == INVOLVES
        ]

    @staticmethod
    def _document_props(document: Document) -> dict[str, Any]:
        return {
            "name": document.name,
            "content": document.content,
            "document_type": document.document_type.value,
            "created_at": document.created_at,
        }

    @staticmethod
    def _entity_props(entity: Entity) -> dict[str, Any]:
        return {
            "name": entity.name,
            "entity_type": entity.entity_type.value,
            "value": entity.value,
            "source_context": entity.source_context,
        }

    @staticmethod
    def _conflict_props(conflict: Conflict) -> dict[str, Any]:
        return {
            "description": conflict.description,
            "severity": conflict.severity.value,
            "reasoning": conflict.reasoning,
            "legal_principle": conflict.legal_principle,
            "detected_at": conflict.detected_at,
        }

    def _entity_node(self, entity_id: str) -> Entity:
        data = self._graph.nodes[entity_id]
        return Entity(
            id=entity_id,
            name=data["name"],
            entity_type=EntityType(data["entity_type"]),
            value=data.get("value"),
            source_context=data.get("source_context"),
        )

    def _build_entities(self, entity_ids: Iterable[str], with_relations: bool = True) -> list[Entity]:
        """Build entities; relation targets outside the set are built without relations."""
        built = {entity_id: self._entity_node(entity_id) for entity_id in entity_ids}
        if with_relations:
            for entity_id, entity in built.items():
                for _, target_id, data in self._graph.out_edges(entity_id, data=True):
                    if data.get("kind") != RELATES_TO:
                        continue
                    target = built.get(target_id) or self._entity_node(target_id)
                    entity.add_relationship(
                        target, RelationshipType(data["relationship_type"])
                    )
        return list(built.values())

    def _build_document(self, document_id: str) -> Document:
        data = self._graph.nodes[document_id]
        return Document(
            id=document_id,
            name=data["name"],
            content=data["content"],
            document_type=DocumentType(data["document_type"]),
            created_at=data["created_at"],
            entities=self._build_entities(self._contained_entity_ids(document_id)),
        )

    def _build_conflict(self, conflict_id: str) -> Conflict:
        data = self._graph.nodes[conflict_id]
        detected_at: datetime = data["detected_at"]
        return Conflict(
            id=conflict_id,
            description=data["description"],
            severity=ConflictSeverity(data["severity"]),
            reasoning=data.get("reasoning"),
            legal_principle=data.get("legal_principle"),
            detected_at=detected_at,
            entities=self._build_entities(
                self._involved_entity_ids(conflict_id), with_relations=False
            ),
        )

    def _build_conflicts(self, conflict_ids: Iterable[str]) -> list[Conflict]:
        conflicts = [self._build_conflict(c) for c in dict.fromkeys(conflict_ids)]
        return sorted(conflicts, key=lambda c: c.detected_at, reverse=True)
