"""Entry point for typed traversal of a graph."""

import logging
from typing import Iterator, Optional, Tuple

from kg_accessor.graph.base import GraphBackend
from kg_accessor.schema.registry import SchemaRegistry
from kg_accessor.traversal.bridge import RelationResolver
from kg_accessor.traversal.entity import Entity
from kg_accessor.traversal.identity import NodeId, NodeRef
from kg_accessor.traversal.mapper import AmbiguityPolicy, RowMapper
from kg_accessor.traversal.query import QueryBuilder

logger = logging.getLogger(__name__)


class GraphSession:
    """Typed view of a graph backend through a schema registry.

    Creating a session finalizes the registry, so schema errors are raised
    here, before any query runs.

    Usage:
        session = GraphSession(registry, client)
        topic = session.fetch("Topic", "t1")
        for sub in topic.subtopics():
            print(sub.name)
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        backend: GraphBackend,
        kind_key: str = "kind",
        ambiguity_policy: AmbiguityPolicy = AmbiguityPolicy.FIRST_DECLARED,
        cache_relations: bool = False,
    ):
        self.registry = registry.finalize()
        self.backend = backend
        self.resolver = RelationResolver(
            registry,
            backend,
            mapper=RowMapper(registry, kind_key=kind_key, ambiguity_policy=ambiguity_policy),
            builder=QueryBuilder(registry),
            cache_relations=cache_relations,
        )
        logger.debug(
            f"Graph session ready (kinds={len(registry)}, kind_key='{kind_key}', "
            f"ambiguity_policy={self.resolver.ambiguity_policy.value}, "
            f"cache_relations={cache_relations})"
        )

    def ref(self, kind: str, node_id: NodeId) -> NodeRef:
        """Create a NodeRef for a registered kind."""
        self.registry.lookup(kind)
        return NodeRef(id=node_id, kind=kind)

    def node(self, kind: str, node_id: NodeId) -> Entity:
        """Entity for a known id without fetching it; all fields are unset."""
        return self.resolver.bind(self.ref(kind, node_id))

    def fetch(self, kind: str, node_id: NodeId) -> Optional[Entity]:
        """Fetch a node with its field values, or None if it doesn't exist."""
        return self.resolver.fetch(self.ref(kind, node_id))

    def related(self, source: NodeRef, relation: str) -> Tuple[Entity, ...]:
        """Resolve a relation starting from a bare NodeRef."""
        return self.resolver.resolve(source, relation)

    def stream(self, source: NodeRef, relation: str) -> Iterator[Entity]:
        """Resolve a relation lazily; see RelationResolver.stream."""
        return self.resolver.stream(source, relation)
