"""Relationship resolution: query building, row mapping and typed entities."""

from kg_accessor.traversal.identity import NodeRef
from kg_accessor.traversal.query import Query, QueryBuilder
from kg_accessor.traversal.mapper import AmbiguityPolicy, RowMapper, coerce_value
from kg_accessor.traversal.entity import Entity
from kg_accessor.traversal.bridge import RelationResolver
from kg_accessor.traversal.session import GraphSession

__all__ = [
    "NodeRef",
    "Query",
    "QueryBuilder",
    "AmbiguityPolicy",
    "RowMapper",
    "coerce_value",
    "Entity",
    "RelationResolver",
    "GraphSession",
]
