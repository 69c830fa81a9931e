"""Abstract base classes for graph database access.

This module defines the backend-agnostic interface the traversal layer
depends on. Concrete backends (Neo4j, test doubles) implement it.

NO database-specific imports should be in this file.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

# A single result record: column name -> value
RawRow = Mapping[str, Any]


class GraphBackend(ABC):
    """Parameterized query interface of a graph database.

    Implementations own their connection pooling. Each call acquires a
    connection, runs the query, and releases it before returning.
    """

    @abstractmethod
    def execute_query(
        self,
        query: str,
        parameters: Optional[Dict[str, Any]] = None
    ) -> List[RawRow]:
        """Execute a read query and return its records.

        Args:
            query: Query text
            parameters: Bound query parameters

        Returns:
            list: Result records as mappings

        Raises:
            BackendError: If the query cannot be executed
        """
        pass


class GraphClient(GraphBackend):
    """Graph backend with an explicit connection lifecycle."""

    @abstractmethod
    def connect(self) -> bool:
        """Connect to the graph database.

        Returns:
            bool: True if connection successful
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the database connection.

        Should be idempotent - safe to call multiple times.
        """
        pass

    @abstractmethod
    def verify_connectivity(self) -> bool:
        """Verify that the database is accessible.

        Returns:
            bool: True if database responds, False otherwise
        """
        pass

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
