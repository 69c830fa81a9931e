"""Execution of one-hop queries and mapping of their rows to entities."""

import logging
from typing import Any, Iterator, List, Mapping, Optional, Sequence, Tuple

from kg_accessor.graph.base import GraphBackend, RawRow
from kg_accessor.graph.exceptions import EmptyRelationError
from kg_accessor.schema.models import Cardinality
from kg_accessor.schema.registry import SchemaRegistry
from kg_accessor.traversal.entity import Entity
from kg_accessor.traversal.identity import NodeRef
from kg_accessor.traversal.mapper import AmbiguityPolicy, RowMapper
from kg_accessor.traversal.query import Query, QueryBuilder

logger = logging.getLogger(__name__)


class RelationResolver:
    """Run relation queries against an injected backend.

    The resolver keeps no connection of its own: every call goes through
    ``backend.execute_query`` and backend errors reach the caller unchanged.
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        backend: GraphBackend,
        mapper: Optional[RowMapper] = None,
        builder: Optional[QueryBuilder] = None,
        cache_relations: bool = False,
    ):
        """Initialize resolver.

        Args:
            registry: Schema registry (finalized here if it is not already)
            backend: Graph backend used for every query
            mapper: Row mapper (default: discriminator key 'kind',
                first-declared ambiguity policy)
            builder: Query builder for the registry
            cache_relations: Memoize accessor results on each entity
        """
        self.registry = registry.finalize()
        self.backend = backend
        self.mapper = mapper or RowMapper(registry)
        self.builder = builder or QueryBuilder(registry)
        self.cache_relations = cache_relations

    @property
    def ambiguity_policy(self) -> AmbiguityPolicy:
        return self.mapper.ambiguity_policy

    def execute(self, query: Query) -> List[RawRow]:
        """Send a query to the backend and return its rows."""
        logger.debug(f"Executing: {query.text} with {query.parameters}")
        rows = self.backend.execute_query(query.text, dict(query.parameters))
        return list(rows or [])

    def map_row(self, raw: RawRow, expected_kinds: Sequence[str]) -> Entity:
        """Turn one result row into an entity of one of ``expected_kinds``."""
        mapped = self.mapper.map_row(raw, expected_kinds)
        return self.bind(NodeRef(id=mapped.id, kind=mapped.kind.name), mapped.values)

    def bind(self, ref: NodeRef, values: Optional[Mapping[str, Any]] = None) -> Entity:
        """Wrap a NodeRef (and optional field values) into an entity."""
        return Entity(
            ref,
            self.registry.lookup(ref.kind),
            values,
            resolver=self,
            cache_relations=self.cache_relations,
        )

    def stream(self, source: NodeRef, relation: str) -> Iterator[Entity]:
        """
        Resolve a relation lazily.

        The query runs immediately; rows are mapped one at a time as the
        iterator is consumed. A mapping error surfaces at the offending row.
        Iterate again by calling ``stream`` again.
        """
        spec = self.builder.relation_for(source, relation)
        rows = self.execute(self.builder.build_one_hop(source, relation))
        return (self.map_row(raw, spec.targets) for raw in rows)

    def resolve(self, source: NodeRef, relation: str) -> Tuple[Entity, ...]:
        """
        Resolve a relation completely.

        Either every row maps or the call fails; no partial result is returned.

        Raises:
            UnknownRelationError: If the relation is not declared on the source kind
            EmptyRelationError: If a mandatory 'one' relation returned no nodes
            KindMismatchError: If a row has an unexpected kind
            BackendError: If the backend fails
        """
        spec = self.builder.relation_for(source, relation)
        entities = tuple(self.stream(source, relation))

        if spec.cardinality is Cardinality.ONE:
            if not entities and spec.required:
                raise EmptyRelationError(source.kind, relation, str(source.id))
            if len(entities) > 1:
                logger.warning(
                    f"Relation {source.kind}.{relation} of '{source.id}' is declared 'one' "
                    f"but returned {len(entities)} nodes"
                )
        return entities

    def fetch(self, ref: NodeRef) -> Optional[Entity]:
        """
        Fetch a node by id.

        When several nodes share the id, the first one of ``ref.kind`` is used.

        Returns:
            Entity, or None if no node has that id

        Raises:
            KindMismatchError: If the node exists but is not of ``ref.kind``
        """
        rows = self.execute(self.builder.build_fetch(ref))
        if not rows:
            return None
        row = rows[0]
        if len(rows) > 1:
            matching = [
                raw for raw in rows
                if ref.kind in self.mapper.discriminators(self.mapper.node_data(raw))
            ]
            if matching:
                row = matching[0]
            logger.warning(
                f"{len(rows)} nodes share id '{ref.id}'; using the first {ref.kind} node"
            )
        return self.map_row(row, (ref.kind,))
