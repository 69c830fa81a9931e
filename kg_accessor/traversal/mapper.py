"""Classification of raw result rows into entity kinds."""

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Mapping, NamedTuple, Optional, Sequence, Tuple

from kg_accessor.graph.exceptions import (
    AmbiguousKindError,
    InvalidRowError,
    KindMismatchError,
)
from kg_accessor.graph.base import RawRow
from kg_accessor.schema.models import EntityKind, ScalarType
from kg_accessor.schema.registry import SchemaRegistry
from kg_accessor.traversal.identity import NodeId
from kg_accessor.traversal.query import RESULT_COLUMN

logger = logging.getLogger(__name__)


class AmbiguityPolicy(str, Enum):
    """What to do when a row matches several expected kinds."""

    FIRST_DECLARED = "first_declared"
    ERROR = "error"


class MappedRow(NamedTuple):
    """A classified row, ready to become an entity."""

    kind: EntityKind
    id: NodeId
    values: Dict[str, Any]


class RowMapper:
    """Read the kind discriminator and scalar fields of result rows.

    The discriminator is the ``kind_key`` property of the node (a string or a
    list of strings). Rows without it fall back to the node labels.
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        kind_key: str = "kind",
        labels_key: str = "labels",
        ambiguity_policy: AmbiguityPolicy = AmbiguityPolicy.FIRST_DECLARED,
    ):
        self.registry = registry
        self.kind_key = kind_key
        self.labels_key = labels_key
        self.ambiguity_policy = AmbiguityPolicy(ambiguity_policy)

    def node_data(self, raw: RawRow) -> Mapping[str, Any]:
        """Unwrap the destination node from a record.

        A record holding only the result column is unwrapped; any other
        mapping is taken as the node itself.
        """
        node = raw
        if isinstance(raw, Mapping) and set(raw) == {RESULT_COLUMN}:
            node = raw[RESULT_COLUMN]
        if not isinstance(node, Mapping):
            raise InvalidRowError(f"Result row is not a node mapping: {raw!r}")
        return node

    def discriminators(self, node: Mapping[str, Any]) -> Tuple[str, ...]:
        """
        Kind names carried by a node.

        Raises:
            InvalidRowError: If the discriminator is not a string or a
                list/tuple/set of strings
        """
        key = self.kind_key
        value = node.get(key)
        if value is None:
            key = self.labels_key
            value = node.get(key)
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        if isinstance(value, (list, tuple, set, frozenset)) \
                and all(isinstance(v, str) for v in value):
            return tuple(value)
        raise InvalidRowError(
            f"Node '{node.get('id')}' has an unusable '{key}' value: {value!r}", field=key
        )

    def classify(self, node: Mapping[str, Any], expected_kinds: Sequence[str]) -> EntityKind:
        """
        Pick the kind of a node among the expected kinds.

        Candidates keep the order of ``expected_kinds`` (the relation's declared
        target order), so FIRST_DECLARED is deterministic.

        Raises:
            KindMismatchError: If no expected kind matches
            AmbiguousKindError: If several match and the policy is ERROR
        """
        found = self.discriminators(node)
        candidates = [kind for kind in expected_kinds if kind in found]

        if not candidates:
            raise KindMismatchError(found, expected_kinds)

        if len(candidates) > 1:
            node_id = node.get("id")
            if self.ambiguity_policy is AmbiguityPolicy.ERROR:
                raise AmbiguousKindError(str(node_id), candidates)
            logger.warning(
                f"Node '{node_id}' matches kinds {candidates}; "
                f"using first declared kind '{candidates[0]}'"
            )

        return self.registry.lookup(candidates[0])

    def map_row(self, raw: RawRow, expected_kinds: Sequence[str]) -> MappedRow:
        """
        Classify a row and read its scalar fields.

        Absent fields are set to None.

        Raises:
            KindMismatchError: If the row kind is not expected
            AmbiguousKindError: If the row kind is ambiguous under ERROR policy
            InvalidRowError: If the row has no id or a value has the wrong type
        """
        node = self.node_data(raw)
        kind = self.classify(node, expected_kinds)

        node_id = node.get("id")
        if node_id is None or node_id == "" or isinstance(node_id, bool) \
                or not isinstance(node_id, (str, int)):
            raise InvalidRowError(f"{kind.name} row has no usable 'id': {node_id!r}", field="id")

        values = {}
        for name, spec in kind.fields.items():
            values[name] = coerce_value(node.get(name), spec.type, f"{kind.name}.{name}")

        return MappedRow(kind=kind, id=node_id, values=values)


# ============= SCALAR COERCION =============

def _to_string(value):
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise TypeError


def _to_number(value):
    if isinstance(value, bool):
        raise TypeError
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            return float(text)
    raise TypeError


_TRUE = {"true", "yes", "1"}
_FALSE = {"false", "no", "0"}


def _to_boolean(value):
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
    raise ValueError


def _to_date(value):
    if isinstance(value, (date, datetime)):
        return value
    if hasattr(value, "to_native"):
        # neo4j.time temporal types
        return value.to_native()
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        if "T" in text or " " in text:
            return datetime.fromisoformat(text)
        return date.fromisoformat(text)
    raise TypeError


def _to_reference(value):
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    raise TypeError


_COERCERS: Dict[ScalarType, Callable[[Any], Any]] = {
    ScalarType.STRING: _to_string,
    ScalarType.NUMBER: _to_number,
    ScalarType.BOOLEAN: _to_boolean,
    ScalarType.DATE: _to_date,
    ScalarType.URL: _to_reference,
    ScalarType.IMAGE: _to_reference,
    ScalarType.ANY: lambda value: value,
}


def coerce_value(value: Any, scalar_type: ScalarType, label: Optional[str] = None) -> Any:
    """
    Convert a raw property value to the Python value of a scalar type.

    Args:
        value: Raw value (None means unset)
        scalar_type: Declared type of the field
        label: Field label used in error messages

    Returns:
        The converted value, or None when unset

    Raises:
        InvalidRowError: If the value cannot be converted
    """
    if value is None:
        return None
    try:
        return _COERCERS[scalar_type](value)
    except (TypeError, ValueError):
        raise InvalidRowError(
            f"Value {value!r} of {label or 'field'} is not a valid {scalar_type.value}",
            field=label,
        )
