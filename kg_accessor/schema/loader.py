"""Schema file loader."""

import logging
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Tuple, Union

import yaml

from kg_accessor.graph.exceptions import DuplicateKindError, InvalidSpecError
from kg_accessor.schema.registry import SchemaRegistry

logger = logging.getLogger(__name__)


class SchemaLoader:
    """Load entity kinds from a YAML schema description.

    Expected layout::

        kinds:
          - name: Topic
            fields:
              name: string
            relations:
              subtopics: {targets: [Topic]}
              cover: Image

    ``kinds`` may also be a mapping of kind name to declaration.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize loader.

        Args:
            path: Path to the YAML schema file
        """
        self.path = Path(path)

    def load(self, registry: SchemaRegistry = None) -> SchemaRegistry:
        """
        Load all kinds into a registry and finalize it.

        Args:
            registry: Registry to fill (a new one by default)

        Returns:
            The finalized registry

        Raises:
            FileNotFoundError: If the schema file doesn't exist
            DuplicateKindError: If a kind is declared twice
            InvalidSpecError: If the document is malformed
        """
        if not self.path.exists():
            raise FileNotFoundError(f"Schema file not found: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidSpecError(f"Error parsing schema file {self.path}: {e}")

        registry = registry if registry is not None else SchemaRegistry()
        self.load_document(document, registry)

        registry.finalize()
        logger.info(f"Loaded {len(registry)} entity kinds from {self.path}")
        return registry

    def load_document(self, document: Any, registry: SchemaRegistry) -> SchemaRegistry:
        """Register every kind of an already parsed document (no finalization)."""
        if not isinstance(document, Mapping) or "kinds" not in document:
            raise InvalidSpecError(f"{self.path}: top-level 'kinds' key is missing")

        for name, declaration in _kind_declarations(document["kinds"]):
            if declaration is None:
                declaration = {}
            if not isinstance(declaration, Mapping):
                raise InvalidSpecError(f"{self.path}: kind '{name}' must be a mapping")

            unknown = set(declaration) - {"name", "fields", "relations", "description"}
            if unknown:
                raise InvalidSpecError(
                    f"{self.path}: unknown keys on kind '{name}': {sorted(unknown)}"
                )

            registry.register_kind(
                name,
                fields=declaration.get("fields") or {},
                relations=_normalize_relations(name, declaration.get("relations") or {}),
            )
        return registry


def load_registry(path: Union[str, Path]) -> SchemaRegistry:
    """Load and finalize a registry from a YAML schema file."""
    return SchemaLoader(path).load()


def _kind_declarations(kinds: Any) -> Iterator[Tuple[str, Any]]:
    if isinstance(kinds, Mapping):
        yield from kinds.items()
        return

    if not isinstance(kinds, list):
        raise InvalidSpecError("'kinds' must be a list or a mapping")

    seen = set()
    for entry in kinds:
        if not isinstance(entry, Mapping) or not entry.get("name"):
            raise InvalidSpecError(f"Kind entry without a name: {entry!r}")
        name = entry["name"]
        # the registry would catch this too, but only after a partial load
        if name in seen:
            raise DuplicateKindError(name)
        seen.add(name)
        yield name, entry


def _normalize_relations(kind_name: str, relations: Any) -> Dict[str, Any]:
    if not isinstance(relations, Mapping):
        raise InvalidSpecError(f"Relations of '{kind_name}' must be a mapping")

    normalized = {}
    for name, spec in relations.items():
        if isinstance(spec, Mapping):
            spec = dict(spec)
            if "target" in spec and "targets" not in spec:
                spec["targets"] = spec.pop("target")
            if "label" in spec and "wire_label" not in spec:
                spec["wire_label"] = spec.pop("label")
        normalized[name] = spec
    return normalized
