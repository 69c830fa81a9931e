"""Tests for relation resolution against a backend."""

from unittest.mock import Mock

import pytest

from kg_accessor.graph.base import GraphBackend
from kg_accessor.graph.exceptions import (
    BackendError,
    EmptyRelationError,
    GraphError,
    InvalidRowError,
    InvalidSpecError,
    KindMismatchError,
    UnknownRelationError,
)
from kg_accessor.schema.registry import SchemaRegistry
from kg_accessor.traversal.bridge import RelationResolver
from kg_accessor.traversal.identity import NodeRef

SUBTOPICS = "MATCH (src {id: $id}) -[r:SUBTOPICS]-> (dst) RETURN dst"
OWNER = "MATCH (src {id: $id}) -[r:OWNER]-> (dst) RETURN dst"
COVER = "MATCH (src {id: $id}) -[r:COVER]-> (dst) RETURN dst"
ATTACHMENTS = "MATCH (src {id: $id}) -[r:HAS_ATTACHMENT]-> (dst) RETURN dst"
FETCH = "MATCH (dst {id: $id}) RETURN dst"

T1 = NodeRef(id="t1", kind="Topic")


@pytest.fixture
def resolver(registry, backend):
    """Resolver over the recording backend."""
    return RelationResolver(registry, backend)


class TestResolve:
    """Test full relation resolution."""

    def test_subtopics(self, resolver, backend, make_row):
        """Test resolving Topic.subtopics into two Topic entities."""
        backend.respond(SUBTOPICS, [
            make_row("Topic", "t2", name="Graphs"),
            make_row("Topic", "t3", name="Trees", weight="1.5"),
        ])

        result = resolver.resolve(T1, "subtopics")

        assert isinstance(result, tuple)
        assert [e.id for e in result] == ["t2", "t3"]
        assert all(e.kind == "Topic" for e in result)
        assert result[1].weight == 1.5
        assert backend.calls == [(SUBTOPICS, {"id": "t1"})]

    def test_empty_many_relation(self, resolver):
        """Test that an empty 'many' relation returns an empty tuple."""
        assert resolver.resolve(T1, "subtopics") == ()

    def test_mixed_targets(self, resolver, backend, make_row):
        """Test a relation whose rows have different target kinds."""
        backend.respond(ATTACHMENTS, [
            make_row("Image", "i1", height=300),
            make_row("Person", "p1", name="Ada"),
        ])

        result = resolver.resolve(T1, "attachments")

        assert [e.kind for e in result] == ["Image", "Person"]

    def test_kind_mismatch_fails_whole_call(self, resolver, backend, make_row):
        """Test that one unexpected row fails the whole call."""
        backend.respond(SUBTOPICS, [make_row("Topic", "t2"), make_row("Image", "i1")])

        with pytest.raises(KindMismatchError):
            resolver.resolve(T1, "subtopics")

    def test_invalid_row_fails_whole_call(self, resolver, backend, make_row):
        """Test that one malformed row fails the whole call."""
        backend.respond(SUBTOPICS, [make_row("Topic", "t2"), make_row("Topic", "")])

        with pytest.raises(InvalidRowError):
            resolver.resolve(T1, "subtopics")

    def test_required_one_relation_empty(self, resolver):
        """Test that an empty mandatory relation raises error."""
        with pytest.raises(EmptyRelationError) as exc_info:
            resolver.resolve(T1, "owner")

        assert exc_info.value.relation == "owner"
        assert exc_info.value.node_id == "t1"

    def test_optional_one_relation_empty(self, resolver):
        """Test that an empty optional relation returns nothing."""
        assert resolver.resolve(T1, "cover") == ()

    def test_one_relation_with_extra_rows(self, resolver, backend, make_row, caplog):
        """Test that extra rows on a 'one' relation are logged."""
        backend.respond(COVER, [make_row("Image", "i1"), make_row("Image", "i2")])

        with caplog.at_level("WARNING"):
            result = resolver.resolve(T1, "cover")

        assert len(result) == 2
        assert "declared 'one'" in caplog.text

    def test_required_one_relation(self, resolver, backend, make_row):
        """Test resolving a mandatory 'one' relation."""
        backend.respond(OWNER, [make_row("Person", "p1", name="Ada", active="yes")])

        (owner,) = resolver.resolve(T1, "owner")

        assert owner.name == "Ada"
        assert owner.active is True

    def test_unknown_relation_makes_no_call(self, registry, mock_backend):
        """Test that unknown relations fail before any query."""
        resolver = RelationResolver(registry.finalize(), mock_backend)

        with pytest.raises(UnknownRelationError):
            resolver.resolve(NodeRef(id="i1", kind="Image"), "subtopics")

        mock_backend.execute_query.assert_not_called()

    def test_backend_error_passes_through(self, registry):
        """Test that backend errors reach the caller unchanged."""
        failing = Mock(spec=GraphBackend)
        error = BackendError("connection reset")
        failing.execute_query.side_effect = error
        resolver = RelationResolver(registry.finalize(), failing)

        with pytest.raises(BackendError) as exc_info:
            resolver.resolve(T1, "subtopics")

        assert exc_info.value is error
        assert failing.execute_query.call_count == 1

    def test_resolved_entities_are_bound(self, resolver, backend, make_row):
        """Test that resolved entities can traverse further."""
        backend.respond(SUBTOPICS, [make_row("Topic", "t2")], node_id="t1")
        backend.respond(SUBTOPICS, [make_row("Topic", "t4")], node_id="t2")

        (child,) = resolver.resolve(T1, "subtopics")
        (grandchild,) = child.subtopics()

        assert grandchild.id == "t4"
        assert backend.calls[-1] == (SUBTOPICS, {"id": "t2"})


class TestStream:
    """Test lazy resolution."""

    def test_query_runs_before_iteration(self, resolver, backend, make_row):
        """Test that the query runs eagerly and rows map lazily."""
        backend.respond(SUBTOPICS, [make_row("Topic", "t2"), make_row("Image", "i1")])

        stream = resolver.stream(T1, "subtopics")

        assert len(backend.calls) == 1
        assert next(stream).id == "t2"
        with pytest.raises(KindMismatchError):
            next(stream)


class TestFetch:
    """Test fetching a node by id."""

    def test_fetch(self, resolver, backend, make_row):
        """Test fetching a node by id."""
        backend.respond(FETCH, [make_row("Topic", "t1", name="Root")])

        entity = resolver.fetch(T1)

        assert entity.name == "Root"
        assert backend.calls == [(FETCH, {"id": "t1"})]

    def test_fetch_missing(self, resolver):
        """Test fetching an id that doesn't exist."""
        assert resolver.fetch(T1) is None

    def test_fetch_wrong_kind(self, resolver, backend, make_row):
        """Test fetching a node of another kind."""
        backend.respond(FETCH, [make_row("Image", "t1")])

        with pytest.raises(KindMismatchError):
            resolver.fetch(T1)

    def test_fetch_prefers_node_of_requested_kind(self, resolver, backend, make_row, caplog):
        """Test that a shared id resolves to the node of the requested kind."""
        backend.respond(FETCH, [
            make_row("Image", "t1"),
            make_row("Topic", "t1", name="Root"),
            make_row("Topic", "t1", name="Copy"),
        ])

        with caplog.at_level("WARNING"):
            entity = resolver.fetch(T1)

        assert entity.kind == "Topic"
        assert entity.name == "Root"
        assert "3 nodes share id 't1'" in caplog.text


class TestSchemaValidation:
    """Test that resolvers never query with an invalid schema."""

    def test_resolver_finalizes_registry(self, registry, backend):
        """Test that creating a resolver finalizes its registry."""
        RelationResolver(registry, backend)
        assert registry.is_finalized

    def test_invalid_registry_sends_no_query(self, backend):
        """Test that schema errors surface before anything reaches the backend."""
        registry = SchemaRegistry()
        registry.register_kind("Topic", relations={"cover": "Image"})

        with pytest.raises(InvalidSpecError):
            RelationResolver(registry, backend)

        assert backend.calls == []


class TestMalformedRows:
    """Test rows that cannot be classified."""

    def test_non_string_kind(self, resolver, backend):
        """Test that a numeric kind property raises a row error."""
        backend.respond(SUBTOPICS, [{"dst": {"id": "t2", "kind": 7}}])

        with pytest.raises(InvalidRowError) as exc_info:
            resolver.resolve(T1, "subtopics")

        assert isinstance(exc_info.value, GraphError)
        assert exc_info.value.field == "kind"
