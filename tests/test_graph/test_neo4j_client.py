"""Tests for the Neo4j backend client (driver mocked)."""

from unittest.mock import MagicMock, Mock, patch

import pytest
from neo4j.exceptions import AuthError, DriverError, Neo4jError, ServiceUnavailable
from neo4j.graph import Node

from kg_accessor.graph.exceptions import BackendError, ConnectionError
from kg_accessor.graph.neo4j.client import Neo4jClient


def make_client():
    return Neo4jClient("bolt://localhost:7687", "neo4j", "secret", database="content")


def connected_client(records):
    """Client with a mocked driver whose session returns ``records``."""
    client = make_client()
    session = MagicMock()
    session.run.return_value = records
    driver = MagicMock()
    driver.session.return_value.__enter__.return_value = session
    client._driver = driver
    return client, driver, session


def make_node(labels, properties):
    node = Mock(spec=Node)
    node.labels = frozenset(labels)
    node.items.return_value = list(properties.items())
    return node


class TestConnection:
    """Test connection lifecycle."""

    @patch("kg_accessor.graph.neo4j.client.GraphDatabase")
    def test_connect(self, mock_graph_db):
        """Test connecting with the configured credentials."""
        client = make_client()

        assert client.connect() is True

        mock_graph_db.driver.assert_called_once_with(
            "bolt://localhost:7687", auth=("neo4j", "secret")
        )
        assert client.driver is mock_graph_db.driver.return_value

    @patch("kg_accessor.graph.neo4j.client.GraphDatabase")
    def test_connect_auth_failure(self, mock_graph_db):
        """Test that authentication failures raise a connection error."""
        mock_graph_db.driver.return_value.verify_connectivity.side_effect = AuthError("denied")

        with pytest.raises(ConnectionError, match="Authentication failed"):
            make_client().connect()

    @patch("kg_accessor.graph.neo4j.client.GraphDatabase")
    def test_connect_unavailable(self, mock_graph_db):
        """Test that an unreachable server raises a connection error."""
        mock_graph_db.driver.side_effect = ServiceUnavailable("down")

        with pytest.raises(ConnectionError, match="unavailable"):
            make_client().connect()

    @patch("kg_accessor.graph.neo4j.client.GraphDatabase")
    def test_context_manager(self, mock_graph_db):
        """Test connecting and closing through a with block."""
        driver = mock_graph_db.driver.return_value

        with make_client() as client:
            assert client.driver is driver

        driver.close.assert_called_once()
        assert client.driver is None

    def test_close_is_idempotent(self):
        """Test that close can be called twice."""
        client, driver, _ = connected_client([])

        client.close()
        client.close()

        driver.close.assert_called_once()

    def test_verify_connectivity_without_driver(self):
        """Test verifying connectivity before connecting."""
        assert make_client().verify_connectivity() is False

    def test_verify_connectivity_failure(self):
        """Test that connectivity failures return False."""
        client, driver, _ = connected_client([])
        driver.verify_connectivity.side_effect = ServiceUnavailable("down")

        assert client.verify_connectivity() is False


class TestExecuteQuery:
    """Test query execution."""

    def test_not_connected(self):
        """Test querying before connecting."""
        with pytest.raises(ConnectionError, match="Not connected"):
            make_client().execute_query("RETURN 1")

    def test_runs_in_configured_database(self):
        """Test that queries run in the configured database."""
        client, driver, session = connected_client([{"n": 1}])

        rows = client.execute_query("MATCH (dst {id: $id}) RETURN dst", {"id": "t1"})

        assert rows == [{"n": 1}]
        driver.session.assert_called_once_with(database="content")
        session.run.assert_called_once_with("MATCH (dst {id: $id}) RETURN dst", {"id": "t1"})

    def test_nodes_become_plain_dicts(self):
        """Test converting driver nodes into plain dicts with labels."""
        node = make_node({"Topic", "Content"}, {"id": "t2", "kind": "Topic", "name": "Graphs"})
        client, _, _ = connected_client([{"dst": node}])

        rows = client.execute_query("MATCH (dst {id: $id}) RETURN dst", {"id": "t2"})

        assert rows == [{
            "dst": {
                "id": "t2",
                "kind": "Topic",
                "name": "Graphs",
                "labels": ["Content", "Topic"],
            }
        }]

    def test_query_failure(self):
        """Test that query errors raise a backend error."""
        client, _, session = connected_client([])
        session.run.side_effect = Neo4jError("syntax error")

        with pytest.raises(BackendError, match="Query execution failed"):
            client.execute_query("MATCH", {})

    def test_driver_failure(self):
        """Test that driver errors raise a backend error."""
        client, _, session = connected_client([])
        session.run.side_effect = DriverError("session expired")

        with pytest.raises(BackendError):
            client.execute_query("MATCH", {})

    def test_service_unavailable_during_query(self):
        """Test that losing the server raises a connection error."""
        client, _, session = connected_client([])
        session.run.side_effect = ServiceUnavailable("gone")

        with pytest.raises(ConnectionError):
            client.execute_query("MATCH", {})
