"""Shared pytest fixtures."""

from typing import Any, Dict, List, Optional

import pytest
from unittest.mock import Mock

from kg_accessor.graph.base import GraphBackend
from kg_accessor.schema.registry import SchemaRegistry
from kg_accessor.traversal.session import GraphSession


class RecordingBackend(GraphBackend):
    """In-memory backend that records every query it receives.

    ``responses`` maps query text to the rows returned for it; ``by_id``
    optionally narrows that further by the ``$id`` parameter.
    """

    def __init__(self):
        self.calls: List[tuple] = []
        self.responses: Dict[str, List[Dict[str, Any]]] = {}
        self.by_id: Dict[tuple, List[Dict[str, Any]]] = {}

    def respond(self, text: str, rows: List[Dict[str, Any]], node_id: Optional[str] = None):
        if node_id is None:
            self.responses[text] = rows
        else:
            self.by_id[(text, node_id)] = rows

    def execute_query(self, query, parameters=None):
        parameters = parameters or {}
        self.calls.append((query, dict(parameters)))
        key = (query, parameters.get("id"))
        if key in self.by_id:
            return list(self.by_id[key])
        return list(self.responses.get(query, []))


def node_row(kind: str, node_id: Any, **properties) -> Dict[str, Any]:
    """Record shaped like the result of a one-hop query."""
    node = {"id": node_id, "kind": kind}
    node.update(properties)
    return {"dst": node}


@pytest.fixture
def registry():
    """Unfinalized registry with a small content schema."""
    reg = SchemaRegistry()
    reg.register_kind(
        "Topic",
        fields={"name": "string", "weight": "number", "created": "date"},
        relations={
            "subtopics": {"targets": ["Topic"]},
            "cover": {"targets": ["Image"], "cardinality": "one"},
            "owner": {"targets": ["Person"], "cardinality": "one", "required": True},
            "see_also": "Topic",
            "attachments": {"targets": ["Image", "Person"], "wire_label": "HAS_ATTACHMENT"},
        },
    )
    reg.register_kind("Image", fields={"image_url": "url", "height": "number"})
    reg.register_kind(
        "Person",
        fields={"name": "string", "active": "boolean", "avatar": "image"},
        relations={"authored": {"targets": ["Topic"]}},
    )
    return reg


@pytest.fixture
def make_row():
    """Factory for one-hop result records."""
    return node_row


@pytest.fixture
def backend():
    """Recording in-memory backend."""
    return RecordingBackend()


@pytest.fixture
def mock_backend():
    """Mocked backend returning no rows."""
    backend = Mock(spec=GraphBackend)
    backend.execute_query.return_value = []
    return backend


@pytest.fixture
def session(registry, backend):
    """Session over the recording backend."""
    return GraphSession(registry, backend)
