"""Generic typed entity."""

from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Tuple

from kg_accessor.graph.exceptions import GraphError, UnknownRelationError
from kg_accessor.schema.models import EntityKind
from kg_accessor.traversal.identity import NodeId, NodeRef

if TYPE_CHECKING:
    from kg_accessor.traversal.bridge import RelationResolver


class Entity:
    """A node snapshot of a registered kind.

    Scalar fields are read as attributes (``topic.name``) and every declared
    relation is a zero-argument accessor (``topic.subtopics()``) that runs one
    one-hop query per call. Entities are immutable; two entities are equal
    when they address the same node.

    With relation caching enabled, accessor results are kept for the lifetime
    of the entity, keyed by relation name.
    """

    __slots__ = ("_ref", "_kind", "_values", "_resolver", "_cache")

    def __init__(
        self,
        ref: NodeRef,
        kind: EntityKind,
        values: Optional[Mapping[str, Any]] = None,
        resolver: Optional["RelationResolver"] = None,
        cache_relations: bool = False,
    ):
        if ref.kind != kind.name:
            raise ValueError(f"NodeRef kind '{ref.kind}' does not match '{kind.name}'")

        snapshot = {name: None for name in kind.fields}
        if values:
            snapshot.update((k, v) for k, v in values.items() if k in kind.fields)

        object.__setattr__(self, "_ref", ref)
        object.__setattr__(self, "_kind", kind)
        object.__setattr__(self, "_values", MappingProxyType(snapshot))
        object.__setattr__(self, "_resolver", resolver)
        object.__setattr__(self, "_cache", {} if cache_relations else None)

    @property
    def ref(self) -> NodeRef:
        return self._ref

    @property
    def id(self) -> NodeId:
        return self._ref.id

    @property
    def kind(self) -> str:
        return self._kind.name

    @property
    def entity_kind(self) -> EntityKind:
        return self._kind

    @property
    def values(self) -> Mapping[str, Any]:
        """Read-only view of the scalar field values."""
        return self._values

    def field(self, name: str) -> Any:
        """Value of a scalar field (None when unset)."""
        if name not in self._values:
            raise AttributeError(f"Kind '{self.kind}' has no field '{name}'")
        return self._values[name]

    def related(self, relation: str) -> Tuple["Entity", ...]:
        """
        Resolve a relation of this entity.

        Args:
            relation: Relation name declared on this entity's kind

        Returns:
            tuple: Destination entities

        Raises:
            UnknownRelationError: If the relation is not declared (no query runs)
            EmptyRelationError: If a mandatory relation returned nothing
            KindMismatchError: If a destination node has an unexpected kind
            BackendError: If the backend fails
        """
        if relation not in self._kind.relations:
            raise UnknownRelationError(self.kind, relation)

        if self._cache is not None and relation in self._cache:
            return self._cache[relation]

        if self._resolver is None:
            raise GraphError(f"{self._ref} is not bound to a resolver")

        result = self._resolver.resolve(self._ref, relation)
        if self._cache is not None:
            self._cache[relation] = result
        return result

    def related_one(self, relation: str) -> Optional["Entity"]:
        """First destination entity of a relation, or None if there is none."""
        result = self.related(relation)
        return result[0] if result else None

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "kind": self.kind}
        data.update(self._values)
        return data

    def __getattr__(self, name: str) -> Any:
        # only called for names not found by normal lookup
        if name.startswith("_"):
            raise AttributeError(name)

        kind = object.__getattribute__(self, "_kind")
        if name in kind.fields:
            return object.__getattribute__(self, "_values")[name]
        if name in kind.relations:
            return self._accessor(name)
        raise UnknownRelationError(kind.name, name)

    def _accessor(self, relation: str) -> Callable[[], Tuple["Entity", ...]]:
        def accessor() -> Tuple["Entity", ...]:
            return self.related(relation)

        accessor.__name__ = relation
        accessor.__qualname__ = f"{self.kind}.{relation}"
        return accessor

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __dir__(self):
        return sorted(set(super().__dir__()) | set(self._kind.fields) | set(self._kind.relations))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return NotImplemented
        return self._ref == other._ref

    def __hash__(self) -> int:
        return hash(self._ref)

    def __repr__(self) -> str:
        shown = ", ".join(f"{k}={v!r}" for k, v in self._values.items() if v is not None)
        prefix = f"id={self.id!r}"
        return f"{self.kind}({prefix}{', ' + shown if shown else ''})"
