"""One-hop query construction."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict

from kg_accessor.graph.exceptions import UnknownRelationError
from kg_accessor.schema.models import RelationSpec
from kg_accessor.schema.registry import SchemaRegistry
from kg_accessor.traversal.identity import NodeRef

logger = logging.getLogger(__name__)

ONE_HOP_TEMPLATE = "MATCH (src {{id: $id}}) -[r:{label}]-> (dst) RETURN dst"
FETCH_TEMPLATE = "MATCH (dst {id: $id}) RETURN dst"

# Name of the column holding the destination node
RESULT_COLUMN = "dst"


@dataclass(frozen=True)
class Query:
    """Query text plus its bound parameters."""

    text: str
    parameters: Dict[str, Any] = field(default_factory=dict)


class QueryBuilder:
    """Build the fixed one-hop pattern for a (source, relation) pair.

    The node id always travels as the ``$id`` parameter; only the wire label,
    which comes from the registry, is part of the text.

    Creating a builder finalizes the registry, so schema errors are raised
    before any query is built.
    """

    def __init__(self, registry: SchemaRegistry):
        self.registry = registry.finalize()

    def relation_for(self, source: NodeRef, relation: str) -> RelationSpec:
        """
        Look up a relation on the source node's kind.

        Raises:
            UnknownKindError: If the source kind is not registered
            UnknownRelationError: If the kind has no such relation
        """
        kind = self.registry.lookup(source.kind)
        spec = kind.relation(relation)
        if spec is None:
            raise UnknownRelationError(kind.name, relation)
        return spec

    def build_one_hop(self, source: NodeRef, relation: str) -> Query:
        """
        Build the query returning the destination nodes of ``relation``.

        Args:
            source: Node to start from
            relation: Relation name declared on the source kind

        Returns:
            Query: ``MATCH (src {id: $id}) -[r:LABEL]-> (dst) RETURN dst``
        """
        spec = self.relation_for(source, relation)
        text = ONE_HOP_TEMPLATE.format(label=spec.quoted_label)
        logger.debug(f"Built one-hop query for {source.kind}.{relation}: {text}")
        return Query(text=text, parameters={"id": source.id})

    def build_fetch(self, ref: NodeRef) -> Query:
        """Build the query returning the node identified by ``ref``."""
        self.registry.lookup(ref.kind)
        return Query(text=FETCH_TEMPLATE, parameters={"id": ref.id})
