"""
Graph storage backends for ConflictGuard.

Provides the GraphStore interface plus Neo4j and in-memory implementations.
"""

from functools import lru_cache

import structlog

from conflictguard.config import get_settings
from conflictguard.storage.base import GraphStore
from conflictguard.storage.memory import InMemoryGraphStore
from conflictguard.storage.neo4j_adapter import Neo4jGraphStore

logger = structlog.get_logger(__name__)


@lru_cache()
def get_graph_store() -> GraphStore:
    """Get cached graph store for the configured backend."""
    backend = get_settings().graph_backend
    logger.info("graph_store_selected", backend=backend)
    if backend == "memory":
        return InMemoryGraphStore()
    return Neo4jGraphStore()


__all__ = [
    "GraphStore",
    "InMemoryGraphStore",
    "Neo4jGraphStore",
    "get_graph_store",
]
