"""Pydantic models for entity kind declarations."""

import re
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def to_wire_label(name: str) -> str:
    """
    Derive the relationship type used on the wire from a relation name.

    Examples:
        "subtopics" -> "SUBTOPICS"
        "broaderSpaces" -> "BROADER_SPACES"
        "entity page" -> "ENTITY_PAGE"
    """
    label = _CAMEL_BOUNDARY.sub("_", name.strip())
    label = re.sub(r"[\s\-]+", "_", label)
    return label.upper()


class ScalarType(str, Enum):
    """Semantic type of a scalar field."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    URL = "url"
    IMAGE = "image"
    ANY = "any"

    @classmethod
    def parse(cls, value: str) -> "ScalarType":
        """Parse a type name, accepting the common aliases."""
        key = str(value).strip().lower()
        key = _SCALAR_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown scalar type: '{value}'")


_SCALAR_ALIASES = {
    "text": "string",
    "str": "string",
    "int": "number",
    "float": "number",
    "bool": "boolean",
    "checkbox": "boolean",
    "datetime": "date",
    "time": "date",
    "web url": "url",
    "web_url": "url",
    "image-reference": "image",
    "image_reference": "image",
}


class Cardinality(str, Enum):
    """How many destination nodes a relation is expected to yield."""

    ONE = "one"
    MANY = "many"


class Direction(str, Enum):
    """Edge direction relative to the source node."""

    OUTGOING = "outgoing"


# Attribute names used by Entity itself; schema names may not shadow them.
RESERVED_NAMES = frozenset({
    "id", "kind", "ref", "entity_kind", "values", "related", "related_one", "field", "to_dict",
})


class FieldSpec(BaseModel):
    """A scalar field of an entity kind."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Field name as exposed on the entity")
    type: ScalarType = Field(default=ScalarType.ANY, description="Semantic scalar type")


class RelationSpec(BaseModel):
    """An outgoing, named relationship of an entity kind."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Accessor name (e.g., 'subtopics')")
    wire_label: str = Field(default="", description="Relationship type in the query language")
    targets: Tuple[str, ...] = Field(..., description="Target kind names, in declaration order")
    direction: Direction = Field(default=Direction.OUTGOING)
    cardinality: Cardinality = Field(default=Cardinality.MANY)
    required: bool = Field(default=False, description="Mandatory for cardinality 'one'")

    @field_validator("targets", mode="before")
    @classmethod
    def validate_targets(cls, v):
        """Accept a single kind name or a sequence of them."""
        if isinstance(v, str):
            v = (v,)
        targets = tuple(v or ())
        if not targets:
            raise ValueError("Relation must declare at least one target kind")
        if len(set(targets)) != len(targets):
            raise ValueError(f"Relation lists a target kind more than once: {list(targets)}")
        return targets

    @model_validator(mode="before")
    @classmethod
    def default_wire_label(cls, data):
        if isinstance(data, dict) and not data.get("wire_label") and data.get("name"):
            data = dict(data, wire_label=to_wire_label(data["name"]))
        return data

    @property
    def quoted_label(self) -> str:
        """Wire label safe to splice into a pattern.

        Relationship types cannot be bound parameters, so anything that is not
        a plain identifier is back-tick quoted.
        """
        if _IDENTIFIER.match(self.wire_label):
            return self.wire_label
        return "`" + self.wire_label.replace("`", "``") + "`"


class EntityKind(BaseModel):
    """A named entry of the schema registry."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Unique kind name (e.g., 'Topic')")
    fields: Dict[str, FieldSpec] = Field(default_factory=dict)
    relations: Dict[str, RelationSpec] = Field(default_factory=dict)

    def field(self, name: str) -> Optional[FieldSpec]:
        return self.fields.get(name)

    def relation(self, name: str) -> Optional[RelationSpec]:
        return self.relations.get(name)

    def field_names(self) -> Tuple[str, ...]:
        return tuple(self.fields)

    def relation_names(self) -> Tuple[str, ...]:
        return tuple(self.relations)
