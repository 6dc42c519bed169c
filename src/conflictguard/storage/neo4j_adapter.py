"""
Neo4j graph database adapter.
"""

from contextlib import contextmanager
from typing import Any, Iterator
from uuid import uuid4

import structlog
from neo4j import Driver, GraphDatabase, ManagedTransaction
from neo4j.exceptions import DriverError, Neo4jError, ServiceUnavailable

from conflictguard.config import get_settings
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


CONFLICT_RETURN = """
OPTIONAL MATCH (c)-[:INVOLVES]->(e:Entity)
RETURN c, collect(e) AS entities
ORDER BY c.detected_at DESC
"""


class Neo4jGraphStore:
    """
    Neo4j graph database adapter.

    Stores Document -CONTAINS-> Entity -RELATES_TO-> Entity and
    Conflict -INVOLVES-> Entity. Every save runs in a single write
    transaction; timestamps are stored as ISO-8601 strings.
    """

    def __init__(
        self,
        uri: str | None = None,
        user: str | None = None,
        password: str | None = None,
        database: str | None = None,
    ):
        settings = get_settings()
        self.uri = uri or settings.neo4j_uri
        self.user = user or settings.neo4j_user
        self.password = password or settings.neo4j_password
        self.database = database or settings.neo4j_database

        self._driver: Driver | None = None

    @property
    def driver(self) -> Driver:
        """Get or create the Neo4j driver."""
        if self._driver is None:
            self._driver = GraphDatabase.driver(self.uri, auth=(self.user, self.password))
            logger.info("neo4j_connected", uri=self.uri)
        return self._driver

    def close(self) -> None:
        """Close the Neo4j driver."""
        if self._driver:
            self._driver.close()
            self._driver = None
            logger.info("neo4j_disconnected")

    def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            self.driver.verify_connectivity()
            return True
        except (ServiceUnavailable, DriverError) as e:
            logger.error("neo4j_health_check_failed", error=str(e))
            return False

    @contextmanager
    def _wrap_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except (Neo4jError, DriverError) as e:
            logger.error("neo4j_operation_failed", operation=operation, error=str(e))
            raise GraphStoreError(f"Graph store {operation} failed: {e}") from e

    def _read(self, operation: str, work, *args: Any):
        with self._wrap_errors(operation):
            with self.driver.session(database=self.database) as session:
                return session.execute_read(work, *args)

    def _write(self, operation: str, work, *args: Any):
        with self._wrap_errors(operation):
            with self.driver.session(database=self.database) as session:
                return session.execute_write(work, *args)

    # =========================================================================
    # Schema Setup
    # =========================================================================

    def setup_schema(self) -> None:
        """Create constraints and indexes for the conflict graph."""
        constraints = [
            "CREATE CONSTRAINT document_id IF NOT EXISTS FOR (d:Document) REQUIRE d.id IS UNIQUE",
            "CREATE CONSTRAINT entity_id IF NOT EXISTS FOR (e:Entity) REQUIRE e.id IS UNIQUE",
            "CREATE CONSTRAINT conflict_id IF NOT EXISTS FOR (c:Conflict) REQUIRE c.id IS UNIQUE",
        ]
        indexes = [
            "CREATE INDEX entity_name IF NOT EXISTS FOR (e:Entity) ON (e.name)",
            "CREATE INDEX entity_type IF NOT EXISTS FOR (e:Entity) ON (e.entity_type)",
            "CREATE INDEX conflict_severity IF NOT EXISTS FOR (c:Conflict) ON (c.severity)",
        ]

        with self._wrap_errors("setup_schema"):
            with self.driver.session(database=self.database) as session:
                for query in constraints + indexes:
                    session.run(query).consume()

        logger.info("neo4j_schema_setup_complete")

    # =========================================================================
    # Document Operations
    # =========================================================================

    def save_document(self, document: Document) -> Document:
        document_id = document.id or str(uuid4())
        entity_ids = {id(e): e.id or str(uuid4()) for e in document.entities}

        document_props = document.to_neo4j_properties() | {"id": document_id}
        entity_props = [
            e.to_neo4j_properties() | {"id": entity_ids[id(e)]} for e in document.entities
        ]
        relations = []
        for entity in document.entities:
            for rel in entity.related_entities:
                target_id = entity_ids.get(id(rel.target_entity)) or rel.target_entity.id
                if target_id is None:
                    raise GraphStoreError(
                        f"Relation target '{rel.target_entity.name}' has no id"
                    )
                relations.append(
                    {
                        "source": entity_ids[id(entity)],
                        "target": target_id,
                        "type": rel.relationship_type.value,
                    }
                )

        self._write(
            "save_document", self._save_document_tx, document_props, entity_props, relations
        )

        document.id = document_id
        for entity in document.entities:
            entity.id = entity_ids[id(entity)]

        logger.debug(
            "document_saved",
            document_id=document_id,
            entities=len(entity_props),
            relations=len(relations),
        )
        return document

    @staticmethod
    def _save_document_tx(
        tx: ManagedTransaction,
        document: dict[str, Any],
        entities: list[dict[str, Any]],
        relations: list[dict[str, Any]],
    ) -> None:
        tx.run("MERGE (d:Document {id: $props.id}) SET d += $props", props=document).consume()
        tx.run(
            """
            MATCH (d:Document {id: $document_id})
            UNWIND $entities AS props
            MERGE (e:Entity {id: props.id})
            SET e += props
            MERGE (d)-[:CONTAINS]->(e)
            """,
            document_id=document["id"],
            entities=entities,
        ).consume()
        tx.run(
            """
            UNWIND $entity_ids AS entity_id
            MATCH (:Entity {id: entity_id})-[r:RELATES_TO]->()
            DELETE r
            """,
            entity_ids=[e["id"] for e in entities],
        ).consume()
        record = tx.run(
            """
            UNWIND $relations AS rel
            MATCH (s:Entity {id: rel.source})
            MATCH (t:Entity {id: rel.target})
            MERGE (s)-[:RELATES_TO {relationship_type: rel.type}]->(t)
            RETURN count(*) AS linked
            """,
            relations=relations,
        ).single()
        linked = record["linked"] if record else 0
        if linked != len(relations):
            # Raising inside the managed transaction rolls it back.
            raise GraphStoreError(
                f"Only {linked} of {len(relations)} relation targets exist"
            )

    def find_document_by_id(self, document_id: str) -> Document | None:
        documents = self.find_documents_by_ids([document_id])
        return documents[0] if documents else None

    def find_documents_by_ids(self, document_ids: list[str]) -> list[Document]:
        return self._read(
            "find_documents_by_ids",
            self._documents_tx,
            "MATCH (d:Document) WHERE d.id IN $ids",
            {"ids": list(dict.fromkeys(document_ids))},
        )

    def find_all_documents_by_created_at_descending(self) -> list[Document]:
        return self._read(
            "find_all_documents", self._documents_tx, "MATCH (d:Document)", {}
        )

    def find_document_by_entity_id(self, entity_id: str) -> Document | None:
        documents = self._read(
            "find_document_by_entity_id",
            self._documents_tx,
            "MATCH (d:Document)-[:CONTAINS]->(:Entity {id: $entity_id})",
            {"entity_id": entity_id},
        )
        return documents[0] if documents else None

    def delete_document(self, document_id: str) -> bool:
        def work(tx: ManagedTransaction) -> int:
            record = tx.run(
                """
                MATCH (d:Document {id: $id})
                OPTIONAL MATCH (d)-[:CONTAINS]->(e:Entity)
                WITH d, collect(e) AS entities
                FOREACH (x IN entities | DETACH DELETE x)
                DETACH DELETE d
                RETURN count(*) AS deleted
                """,
                id=document_id,
            ).single()
            return record["deleted"] if record else 0

        deleted = self._write("delete_document", work) > 0
        if deleted:
            logger.debug("document_deleted", document_id=document_id)
        return deleted

    def _documents_tx(
        self, tx: ManagedTransaction, match: str, params: dict[str, Any]
    ) -> list[Document]:
        records = list(
            tx.run(
                f"""
                {match}
                OPTIONAL MATCH (d)-[:CONTAINS]->(e:Entity)
                RETURN d, collect(e.id) AS entity_ids
                ORDER BY d.created_at DESC
                """,
                **params,
            )
        )
        all_ids = [eid for r in records for eid in r["entity_ids"]]
        entities = {e.id: e for e in self._entities_tx(tx, all_ids)}
        return [
            self._record_to_document(
                dict(r["d"]), [entities[eid] for eid in r["entity_ids"] if eid in entities]
            )
            for r in records
        ]

    # =========================================================================
    # Entity Operations
    # =========================================================================

    def find_entity_by_id(self, entity_id: str) -> Entity | None:
        entities = self._read("find_entity_by_id", self._entities_tx, [entity_id])
        return entities[0] if entities else None

    def find_entities(self, entity_type: EntityType | None = None) -> list[Entity]:
        def work(tx: ManagedTransaction) -> list[Entity]:
            ids = [
                r["id"]
                for r in tx.run(
                    """
                    MATCH (e:Entity)
                    WHERE $entity_type IS NULL OR e.entity_type = $entity_type
                    RETURN e.id AS id ORDER BY e.name
                    """,
                    entity_type=entity_type.value if entity_type else None,
                )
            ]
            return self._entities_tx(tx, ids)

        return self._read("find_entities", work)

    def find_entities_by_document_id(self, document_id: str) -> list[Entity]:
        def work(tx: ManagedTransaction) -> list[Entity]:
            ids = [
                r["id"]
                for r in tx.run(
                    "MATCH (:Document {id: $id})-[:CONTAINS]->(e:Entity) RETURN e.id AS id",
                    id=document_id,
                )
            ]
            return self._entities_tx(tx, ids)

        return self._read("find_entities_by_document_id", work)

    def find_entities_with_conflicts(self) -> list[Entity]:
        def work(tx: ManagedTransaction) -> list[Entity]:
            ids = [
                r["id"]
                for r in tx.run(
                    """
                    MATCH (e:Entity)-[:RELATES_TO {relationship_type: $type}]-(:Entity)
                    RETURN DISTINCT e.id AS id
                    """,
                    type=RelationshipType.CONFLICTS_WITH.value,
                )
            ]
            return self._entities_tx(tx, ids)

        return self._read("find_entities_with_conflicts", work)

    def _entities_tx(self, tx: ManagedTransaction, entity_ids: list[str]) -> list[Entity]:
        """Load entities with their outgoing relations, in the order given."""
        if not entity_ids:
            return []
        records = list(
            tx.run(
                """
                MATCH (e:Entity) WHERE e.id IN $ids
                OPTIONAL MATCH (e)-[r:RELATES_TO]->(t:Entity)
                RETURN e, collect({type: r.relationship_type, target: t}) AS relations
                """,
                ids=entity_ids,
            )
        )
        built = {r["e"]["id"]: self._record_to_entity(dict(r["e"])) for r in records}
        for record in records:
            entity = built[record["e"]["id"]]
            for rel in record["relations"]:
                target = rel["target"]
                if target is None:
                    continue
                target_entity = built.get(target["id"]) or self._record_to_entity(dict(target))
                entity.add_relationship(target_entity, RelationshipType(rel["type"]))
        return [built[eid] for eid in dict.fromkeys(entity_ids) if eid in built]

    # =========================================================================
    # Conflict Operations
    # =========================================================================

    def save_conflict(self, conflict: Conflict) -> Conflict:
        return self.save_conflicts([conflict])[0]

    def save_conflicts(self, conflicts: list[Conflict]) -> list[Conflict]:
        batch = []
        for conflict in conflicts:
            entity_ids = list(dict.fromkeys(e.id for e in conflict.entities))
            if None in entity_ids:
                raise GraphStoreError("Conflict references entities that were never saved")
            batch.append(
                {
                    "props": conflict.to_neo4j_properties() | {"id": conflict.id or str(uuid4())},
                    "entity_ids": entity_ids,
                }
            )

        if batch:
            self._write("save_conflicts", self._save_conflicts_tx, batch)

        for conflict, item in zip(conflicts, batch):
            conflict.id = item["props"]["id"]
        logger.debug("conflicts_saved", conflict_ids=[c.id for c in conflicts])
        return conflicts

    @staticmethod
    def _save_conflicts_tx(tx: ManagedTransaction, batch: list[dict[str, Any]]) -> None:
        for item in batch:
            record = tx.run(
                """
                MERGE (c:Conflict {id: $props.id})
                SET c += $props
                WITH c
                UNWIND $entity_ids AS entity_id
                MATCH (e:Entity {id: entity_id})
                MERGE (c)-[:INVOLVES]->(e)
                RETURN count(e) AS linked
                """,
                props=item["props"],
                entity_ids=item["entity_ids"],
            ).single()
            linked = record["linked"] if record else 0
            if linked != len(item["entity_ids"]):
                raise GraphStoreError(
                    f"Only {linked} of {len(item['entity_ids'])} involved entities exist"
                )

    def find_conflict_by_id(self, conflict_id: str) -> Conflict | None:
        conflicts = self._conflicts(
            "find_conflict_by_id", "MATCH (c:Conflict {id: $id})", id=conflict_id
        )
        return conflicts[0] if conflicts else None

    def delete_conflict(self, conflict_id: str) -> bool:
        def work(tx: ManagedTransaction) -> int:
            record = tx.run(
                """
                MATCH (c:Conflict {id: $id})
                DETACH DELETE c
                RETURN count(*) AS deleted
                """,
                id=conflict_id,
            ).single()
            return record["deleted"] if record else 0

        deleted = self._write("delete_conflict", work) > 0
        if deleted:
            logger.debug("conflict_deleted", conflict_id=conflict_id)
        return deleted

    def find_conflicts_involving_any_of(self, entity_ids: list[str]) -> list[Conflict]:
        return self._conflicts(
            "find_conflicts_involving_any_of",
            """
            MATCH (c:Conflict)-[:INVOLVES]->(m:Entity)
            WHERE m.id IN $entity_ids
            WITH c, collect(DISTINCT m.id) AS involved_ids
            WHERE size(involved_ids) >= 2
            """,
            entity_ids=entity_ids,
        )

    def find_conflicts_by_severity(self, severity: ConflictSeverity) -> list[Conflict]:
        return self._conflicts(
            "find_conflicts_by_severity",
            "MATCH (c:Conflict {severity: $severity})",
            severity=severity.value,
        )

    def find_all_conflicts_by_detected_at_descending(self) -> list[Conflict]:
        return self._conflicts("find_all_conflicts", "MATCH (c:Conflict)")

    def find_conflicts_involving_entity(self, entity_id: str) -> list[Conflict]:
        return self._conflicts(
            "find_conflicts_involving_entity",
            "MATCH (c:Conflict)-[:INVOLVES]->(:Entity {id: $entity_id})",
            entity_id=entity_id,
        )

    def find_conflicts_for_any_of_documents(self, document_ids: list[str]) -> list[Conflict]:
        return self._conflicts(
            "find_conflicts_for_any_of_documents",
            """
            MATCH (d:Document)-[:CONTAINS]->(:Entity)<-[:INVOLVES]-(c:Conflict)
            WHERE d.id IN $document_ids
            WITH DISTINCT c
            """,
            document_ids=document_ids,
        )

    def _conflicts(self, operation: str, match: str, **params: Any) -> list[Conflict]:
        def work(tx: ManagedTransaction) -> list[Conflict]:
            return [
                self._record_to_conflict(dict(r["c"]), r["entities"])
                for r in tx.run(match + CONFLICT_RETURN, **params)
            ]

        return self._read(operation, work)

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @staticmethod
    def _record_to_entity(props: dict[str, Any]) -> Entity:
        return Entity(
            id=props["id"],
            name=props["name"],
            entity_type=EntityType(props["entity_type"]),
            value=props.get("value"),
            source_context=props.get("source_context"),
        )

    @staticmethod
    def _record_to_document(props: dict[str, Any], entities: list[Entity]) -> Document:
        return Document(
            id=props["id"],
            name=props["name"],
            content=props["content"],
            document_type=DocumentType(props["document_type"]),
            created_at=props["created_at"],
            entities=entities,
        )

    def _record_to_conflict(self, props: dict[str, Any], entity_nodes: list[Any]) -> Conflict:
        return Conflict(
            id=props["id"],
            description=props["description"],
            severity=ConflictSeverity(props["severity"]),
            reasoning=props.get("reasoning"),
            legal_principle=props.get("legal_principle"),
            detected_at=props["detected_at"],
            entities=[self._record_to_entity(dict(node)) for node in entity_nodes],
        )
