"""Neo4j implementation of the graph backend.

This package provides the concrete backend used against a Neo4j database.
"""

from kg_accessor.graph.neo4j.client import Neo4jClient

__all__ = [
    "Neo4jClient",
]
