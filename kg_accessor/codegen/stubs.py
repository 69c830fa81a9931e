"""Typed stub generation for registered entity kinds.

The runtime uses one generic Entity class. This module renders a Python
module of ``typing.Protocol`` classes, one per kind, so accessor code can be
type checked against the schema.
"""

import re
from pathlib import Path
from typing import Dict, List, Optional

from jinja2 import BaseLoader, Environment

from kg_accessor import __version__
from kg_accessor.schema.models import EntityKind, RelationSpec, ScalarType
from kg_accessor.schema.registry import SchemaRegistry
from kg_accessor.utils.logging import get_logger

logger = get_logger(__name__)

PYTHON_TYPES: Dict[ScalarType, str] = {
    ScalarType.STRING: "str",
    ScalarType.NUMBER: "float",
    ScalarType.BOOLEAN: "bool",
    ScalarType.DATE: "date",
    ScalarType.URL: "str",
    ScalarType.IMAGE: "str",
    ScalarType.ANY: "Any",
}

STUB_TEMPLATE = '''"""Typed entity protocols generated by kg-accessor {{ version }}. Do not edit."""

from datetime import date
from typing import Any, Optional, Protocol, Tuple, Union

from kg_accessor.traversal.identity import NodeRef
{% for kind in kinds %}


class {{ kind.class_name }}(Protocol):
    """Entity kind '{{ kind.name }}'."""

    id: Union[str, int]
    kind: str
    ref: NodeRef
{% for field in kind.fields %}
    {{ field.name }}: Optional[{{ field.type }}]
{% endfor %}
{% for relation in kind.relations %}

    def {{ relation.name }}(self) -> Tuple[{{ relation.returns }}, ...]:
        """{{ relation.cardinality }} -[{{ relation.label }}]-> {{ relation.targets }}"""
        ...
{% endfor %}
{% endfor %}
'''


def class_name_for(kind_name: str) -> str:
    """
    Python class name for a kind name.

    Examples:
        "Topic" -> "Topic"
        "table block" -> "TableBlock"
        "web-url" -> "WebUrl"
    """
    parts = [p for p in re.split(r"[^0-9A-Za-z]+", kind_name) if p]
    name = "".join(p[0].upper() + p[1:] for p in parts)
    if not name or name[0].isdigit():
        name = "Kind" + name
    return name


class StubGenerator:
    """Render typed Protocol stubs for a schema registry."""

    def __init__(self, registry: SchemaRegistry):
        self.registry = registry
        self.jinja_env = Environment(
            loader=BaseLoader(),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def render(self) -> str:
        """Render the stub module source."""
        class_names = self._class_names()
        kinds = [self._kind_context(kind, class_names) for kind in self.registry.kinds()]

        template = self.jinja_env.from_string(STUB_TEMPLATE)
        source = template.render(version=__version__, kinds=kinds)
        logger.debug(f"Rendered stubs for {len(kinds)} kinds")
        return source

    def write(self, output_path: Path) -> Path:
        """Render the stubs into a file."""
        output_path = Path(output_path)
        output_path.write_text(self.render(), encoding="utf-8")
        logger.info(f"Typed stubs written to: {output_path}")
        return output_path

    def _class_names(self) -> Dict[str, str]:
        names: Dict[str, str] = {}
        taken: Dict[str, str] = {}
        for kind in self.registry.kinds():
            name = class_name_for(kind.name)
            if name in taken:
                suffix = 2
                while f"{name}{suffix}" in taken:
                    suffix += 1
                logger.warning(
                    f"Kinds '{taken[name]}' and '{kind.name}' map to class '{name}'; "
                    f"using '{name}{suffix}' for '{kind.name}'"
                )
                name = f"{name}{suffix}"
            taken[name] = kind.name
            names[kind.name] = name
        return names

    def _kind_context(self, kind: EntityKind, class_names: Dict[str, str]) -> dict:
        return {
            "name": kind.name,
            "class_name": class_names[kind.name],
            "fields": [
                {"name": spec.name, "type": PYTHON_TYPES[spec.type]}
                for spec in kind.fields.values()
            ],
            "relations": [
                self._relation_context(spec, class_names) for spec in kind.relations.values()
            ],
        }

    @staticmethod
    def _relation_context(spec: RelationSpec, class_names: Dict[str, str]) -> dict:
        targets: List[str] = [f'"{class_names[t]}"' for t in spec.targets]
        returns = targets[0] if len(targets) == 1 else f"Union[{', '.join(targets)}]"
        return {
            "name": spec.name,
            "label": spec.wire_label,
            "cardinality": spec.cardinality.value,
            "targets": ", ".join(spec.targets),
            "returns": returns,
        }


def render_stubs(registry: SchemaRegistry, output_path: Optional[Path] = None) -> str:
    """Render typed stubs for a registry, optionally writing them to a file."""
    generator = StubGenerator(registry)
    source = generator.render()
    if output_path is not None:
        Path(output_path).write_text(source, encoding="utf-8")
        logger.info(f"Typed stubs written to: {output_path}")
    return source
