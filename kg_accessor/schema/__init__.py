"""Schema registry: entity kinds, scalar fields and typed relations."""

from kg_accessor.schema.models import (
    Cardinality,
    Direction,
    EntityKind,
    FieldSpec,
    RelationSpec,
    ScalarType,
    to_wire_label,
)
from kg_accessor.schema.registry import SchemaRegistry
from kg_accessor.schema.loader import SchemaLoader, load_registry

__all__ = [
    "Cardinality",
    "Direction",
    "EntityKind",
    "FieldSpec",
    "RelationSpec",
    "ScalarType",
    "to_wire_label",
    "SchemaRegistry",
    "SchemaLoader",
    "load_registry",
]
