"""Schema registry of entity kinds."""

import logging
import threading
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from kg_accessor.graph.exceptions import (
    DuplicateKindError,
    InvalidSpecError,
    UnknownKindError,
)
from kg_accessor.schema.models import (
    RESERVED_NAMES,
    EntityKind,
    FieldSpec,
    RelationSpec,
    ScalarType,
)

logger = logging.getLogger(__name__)

FieldsArg = Union[Mapping[str, Any], Iterable[FieldSpec], None]
RelationsArg = Union[Mapping[str, Any], Iterable[RelationSpec], None]


class SchemaRegistry:
    """Registry of entity kinds, built once and then frozen.

    Kinds are registered during start-up. ``finalize()`` checks that every
    relation targets a registered kind and closes the registry; later
    registrations are rejected.
    """

    def __init__(self):
        self._kinds: Dict[str, EntityKind] = {}
        self._finalized = False
        self._lock = threading.Lock()

    def register_kind(
        self,
        name: str,
        fields: FieldsArg = None,
        relations: RelationsArg = None,
    ) -> EntityKind:
        """
        Register a new entity kind.

        Args:
            name: Unique kind name
            fields: Field name -> scalar type (or FieldSpec objects)
            relations: Relation name -> RelationSpec, dict of RelationSpec
                attributes, or a bare target kind name (or RelationSpec objects)

        Returns:
            The registered EntityKind

        Raises:
            DuplicateKindError: If the name is already registered
            InvalidSpecError: If the declaration is malformed or the registry
                is already finalized
        """
        if not name or not isinstance(name, str):
            raise InvalidSpecError(f"Kind name must be a non-empty string, got {name!r}")

        field_specs = self._build_fields(name, fields)
        relation_specs = self._build_relations(name, relations)

        clashes = set(field_specs) & set(relation_specs)
        if clashes:
            raise InvalidSpecError(
                f"Kind '{name}' uses the same name for a field and a relation: {sorted(clashes)}"
            )

        kind = EntityKind(name=name, fields=field_specs, relations=relation_specs)

        with self._lock:
            if self._finalized:
                raise InvalidSpecError(
                    f"Cannot register '{name}': schema registry is already finalized"
                )
            if name in self._kinds:
                raise DuplicateKindError(name)
            self._kinds[name] = kind

        logger.debug(
            f"Registered kind '{name}' with {len(field_specs)} fields "
            f"and {len(relation_specs)} relations"
        )
        return kind

    def finalize(self) -> "SchemaRegistry":
        """
        Validate relation targets and freeze the registry.

        Safe to call more than once.

        Raises:
            InvalidSpecError: If a relation targets an unregistered kind
        """
        with self._lock:
            if self._finalized:
                return self

            problems = []
            for kind in self._kinds.values():
                for relation in kind.relations.values():
                    for target in relation.targets:
                        if target not in self._kinds:
                            problems.append(f"{kind.name}.{relation.name} -> {target}")

            if problems:
                raise InvalidSpecError(
                    "Relations target unregistered kinds: " + ", ".join(problems)
                )

            self._finalized = True

        logger.info(f"Schema registry finalized with {len(self._kinds)} kinds")
        return self

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    def lookup(self, name: str) -> EntityKind:
        """
        Get a kind by name.

        Raises:
            UnknownKindError: If no such kind is registered
        """
        kind = self._kinds.get(name)
        if kind is None:
            raise UnknownKindError(name)
        return kind

    def get(self, name: str) -> Optional[EntityKind]:
        return self._kinds.get(name)

    def kinds(self) -> List[EntityKind]:
        """All kinds, in registration order."""
        return list(self._kinds.values())

    def names(self) -> List[str]:
        return list(self._kinds)

    def __contains__(self, name: object) -> bool:
        return name in self._kinds

    def __len__(self) -> int:
        return len(self._kinds)

    def __iter__(self) -> Iterator[EntityKind]:
        return iter(self.kinds())

    # ------------------------------------------------------------------

    @staticmethod
    def _build_fields(kind_name: str, fields: FieldsArg) -> Dict[str, FieldSpec]:
        result: Dict[str, FieldSpec] = {}
        for field_name, spec in _entries(kind_name, "field", fields):
            try:
                if isinstance(spec, FieldSpec):
                    field_spec = spec
                elif isinstance(spec, ScalarType):
                    field_spec = FieldSpec(name=field_name, type=spec)
                elif spec is None:
                    field_spec = FieldSpec(name=field_name)
                elif isinstance(spec, Mapping):
                    data = dict(spec)
                    if "type" in data:
                        data["type"] = ScalarType.parse(data["type"])
                    field_spec = FieldSpec(name=field_name, **data)
                else:
                    field_spec = FieldSpec(name=field_name, type=ScalarType.parse(spec))
            except (TypeError, ValueError, ValidationError) as e:
                raise InvalidSpecError(f"Invalid field '{kind_name}.{field_name}': {e}")

            _check_name(kind_name, "field", field_spec.name)
            if field_spec.name in result:
                raise InvalidSpecError(f"Duplicate field '{kind_name}.{field_spec.name}'")
            result[field_spec.name] = field_spec
        return result

    @staticmethod
    def _build_relations(kind_name: str, relations: RelationsArg) -> Dict[str, RelationSpec]:
        result: Dict[str, RelationSpec] = {}
        for relation_name, spec in _entries(kind_name, "relation", relations):
            try:
                if isinstance(spec, RelationSpec):
                    relation_spec = spec
                elif isinstance(spec, Mapping):
                    relation_spec = RelationSpec(name=relation_name, **dict(spec))
                else:
                    relation_spec = RelationSpec(name=relation_name, targets=spec)
            except (TypeError, ValidationError) as e:
                raise InvalidSpecError(f"Invalid relation '{kind_name}.{relation_name}': {e}")

            _check_name(kind_name, "relation", relation_spec.name)
            if relation_spec.name in result:
                raise InvalidSpecError(
                    f"Duplicate relation '{kind_name}.{relation_spec.name}'"
                )
            result[relation_spec.name] = relation_spec
        return result


def _entries(kind_name: str, what: str, declared) -> Iterator[Tuple[str, Any]]:
    """Yield (name, spec) pairs from a mapping or a sequence of specs."""
    if declared is None:
        return
    if isinstance(declared, Mapping):
        yield from declared.items()
        return
    for spec in declared:
        if isinstance(spec, (FieldSpec, RelationSpec)):
            yield spec.name, spec
        elif isinstance(spec, tuple) and len(spec) == 2:
            yield spec
        else:
            raise InvalidSpecError(f"Invalid {what} declaration on '{kind_name}': {spec!r}")


def _check_name(kind_name: str, what: str, name: str) -> None:
    if not name or not name.isidentifier():
        raise InvalidSpecError(
            f"Invalid {what} name '{name}' on '{kind_name}': must be a Python identifier"
        )
    if name in RESERVED_NAMES or name.startswith("_"):
        raise InvalidSpecError(f"{what.capitalize()} name '{kind_name}.{name}' is reserved")
