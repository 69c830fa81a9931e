"""Graph database abstraction layer for kg-accessor.

This package provides the backend-agnostic query interface the traversal
layer depends on, the error taxonomy, and a Neo4j implementation.

Usage:
    from kg_accessor.graph.factory import get_graph_client, get_session

    with get_graph_client(settings) as client:
        session = get_session(settings, registry, client)
"""

from kg_accessor.graph.base import (
    GraphBackend,
    GraphClient,
    RawRow,
)

__all__ = [
    "GraphBackend",
    "GraphClient",
    "RawRow",
]
