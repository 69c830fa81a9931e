"""Neo4j client implementation of the graph backend."""

import logging
from typing import Any, Dict, List, Optional

from neo4j import Driver, GraphDatabase
from neo4j.exceptions import AuthError, DriverError, Neo4jError, ServiceUnavailable
from neo4j.graph import Node

from kg_accessor.graph.base import GraphClient
from kg_accessor.graph.exceptions import BackendError
from kg_accessor.graph.exceptions import ConnectionError as GraphConnectionError

logger = logging.getLogger(__name__)


class Neo4jClient(GraphClient):
    """Neo4j implementation of GraphClient.

    Manages the driver (and its connection pool) and runs read queries in
    short-lived sessions.
    """

    def __init__(
        self,
        uri: str,
        username: str,
        password: str,
        database: str = "neo4j",
        labels_key: str = "labels"
    ):
        """Initialize Neo4j client.

        Args:
            uri: Neo4j connection URI (e.g., bolt://localhost:7687)
            username: Database username
            password: Database password
            database: Database name (default: neo4j)
            labels_key: Key under which node labels are reported in rows
        """
        self.uri = uri
        self.username = username
        self.password = password
        self.database = database
        self.labels_key = labels_key
        self._driver: Optional[Driver] = None

    def connect(self) -> bool:
        """Connect to Neo4j database.

        Returns:
            bool: True if connection successful

        Raises:
            GraphConnectionError: If connection fails
        """
        try:
            self._driver = GraphDatabase.driver(
                self.uri,
                auth=(self.username, self.password)
            )
            self._driver.verify_connectivity()
            logger.info(f"Connected to Neo4j at {self.uri}")
            return True
        except AuthError as e:
            raise GraphConnectionError(f"Authentication failed: {e}") from e
        except ServiceUnavailable as e:
            raise GraphConnectionError(f"Neo4j service unavailable: {e}") from e
        except Exception as e:
            raise GraphConnectionError(f"Failed to connect to Neo4j: {e}") from e

    def close(self) -> None:
        """Close the database connection.

        Idempotent - safe to call multiple times.
        """
        if self._driver:
            self._driver.close()
            self._driver = None
            logger.info("Closed Neo4j connection")

    def verify_connectivity(self) -> bool:
        """Verify that the database is accessible.

        Returns:
            bool: True if database responds, False otherwise
        """
        if not self._driver:
            return False

        try:
            self._driver.verify_connectivity()
            return True
        except Exception as e:
            logger.error(f"Connectivity verification failed: {e}")
            return False

    def execute_query(
        self,
        query: str,
        parameters: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Execute a read query and return results.

        Node values are converted to plain dicts of their properties, with
        their labels under ``labels_key``.

        Args:
            query: Cypher query string
            parameters: Query parameters

        Returns:
            list: List of result records as dictionaries

        Raises:
            GraphConnectionError: If not connected
            BackendError: If the query fails
        """
        if not self._driver:
            raise GraphConnectionError("Not connected to database")

        parameters = parameters or {}

        try:
            with self._driver.session(database=self.database) as session:
                result = session.run(query, parameters)
                return [
                    {key: self._to_plain(value) for key, value in record.items()}
                    for record in result
                ]
        except ServiceUnavailable as e:
            logger.error(f"Neo4j unavailable during query: {e}")
            raise GraphConnectionError(f"Neo4j service unavailable: {e}") from e
        except (Neo4jError, DriverError) as e:
            logger.error(f"Query execution failed: {e}")
            logger.error(f"Query: {query}")
            logger.error(f"Parameters: {parameters}")
            raise BackendError(f"Query execution failed: {e}") from e

    def _to_plain(self, value: Any) -> Any:
        if isinstance(value, Node):
            data = dict(value.items())
            data[self.labels_key] = sorted(value.labels)
            return data
        return value

    @property
    def driver(self) -> Optional[Driver]:
        """Get the underlying Neo4j driver.

        Returns:
            Driver: Neo4j driver instance, or None if not connected
        """
        return self._driver
