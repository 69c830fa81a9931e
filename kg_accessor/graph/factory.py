"""Factory for creating graph backends and traversal sessions.

Consumers (CLI, application code) depend on the abstract GraphBackend and on
GraphSession, not on a concrete database client.
"""

import logging
from typing import TYPE_CHECKING

from kg_accessor.graph.base import GraphBackend, GraphClient
from kg_accessor.graph.exceptions import GraphError, InvalidSpecError

if TYPE_CHECKING:
    from kg_accessor.config.settings import Settings
    from kg_accessor.schema.registry import SchemaRegistry
    from kg_accessor.traversal.session import GraphSession

logger = logging.getLogger(__name__)


def get_graph_client(config: "Settings") -> GraphClient:
    """Get graph client based on configuration.

    Args:
        config: Application settings

    Returns:
        GraphClient: Configured (not yet connected) graph client

    Raises:
        GraphError: If backend type is not supported
    """
    backend_type = config.graph.backend

    if backend_type == "neo4j":
        from kg_accessor.graph.neo4j.client import Neo4jClient
        return Neo4jClient(
            uri=config.neo4j.uri,
            username=config.neo4j.username,
            password=config.neo4j.password,
            database=config.neo4j.database
        )
    else:
        raise GraphError(f"Unsupported graph backend: {backend_type}")


def get_registry(config: "Settings") -> "SchemaRegistry":
    """Load the schema registry named in the configuration.

    Raises:
        InvalidSpecError: If no schema file is configured
        FileNotFoundError: If the schema file doesn't exist
    """
    from kg_accessor.schema.loader import load_registry

    schema_path = config.registry.schema_path
    if not schema_path:
        raise InvalidSpecError(
            "No schema file configured (set registry.schema_path or KG_SCHEMA_PATH)"
        )
    return load_registry(schema_path)


def get_session(
    config: "Settings",
    registry: "SchemaRegistry",
    backend: GraphBackend
) -> "GraphSession":
    """Create a traversal session from configuration.

    The backend must be ready for queries; open a graph client with
    ``with get_graph_client(config) as client`` and pass it in.

    Args:
        config: Application settings
        registry: Schema registry (finalized by the session)
        backend: Backend used for every query

    Returns:
        GraphSession: Session bound to the backend
    """
    from kg_accessor.traversal.mapper import AmbiguityPolicy
    from kg_accessor.traversal.session import GraphSession

    return GraphSession(
        registry,
        backend,
        kind_key=config.registry.kind_key,
        ambiguity_policy=AmbiguityPolicy(config.registry.ambiguity_policy),
        cache_relations=config.registry.cache_relations,
    )
