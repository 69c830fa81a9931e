"""Custom exceptions for schema and graph traversal errors."""

from typing import Iterable, Optional


class GraphError(Exception):
    """Base exception for kg-accessor errors."""
    pass


# ============= SCHEMA-TIME ERRORS =============

class SchemaError(GraphError):
    """Error in the declared schema.

    Raised while building or finalizing the registry, before any query runs.
    """
    pass


class UnknownKindError(SchemaError):
    """Entity kind is not registered."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Unknown entity kind: '{kind}'")


class UnknownRelationError(SchemaError, AttributeError):
    """Relation is not declared on the entity kind.

    Also an AttributeError so that ``getattr(entity, name, default)`` and
    ``hasattr`` behave normally on entities.
    """

    def __init__(self, kind: str, relation: str):
        self.kind = kind
        self.relation = relation
        super().__init__(f"Kind '{kind}' has no relation '{relation}'")


class DuplicateKindError(SchemaError):
    """Entity kind already registered."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Entity kind already registered: '{kind}'")


class InvalidSpecError(SchemaError):
    """Schema declaration is malformed or refers to unknown kinds."""
    pass


# ============= QUERY-TIME ERRORS =============

class QueryError(GraphError):
    """Error while resolving a relationship for a single call."""
    pass


class KindMismatchError(QueryError):
    """Returned row does not belong to any of the expected kinds."""

    def __init__(self, discriminators: Iterable[str], expected: Iterable[str]):
        self.discriminators = tuple(discriminators)
        self.expected = tuple(expected)
        found = ", ".join(self.discriminators) or "<none>"
        super().__init__(
            f"Row kind [{found}] does not match expected kinds "
            f"[{', '.join(self.expected)}]"
        )


class AmbiguousKindError(QueryError):
    """Returned row matches more than one expected kind."""

    def __init__(self, node_id: str, candidates: Iterable[str]):
        self.node_id = node_id
        self.candidates = tuple(candidates)
        super().__init__(
            f"Node '{node_id}' matches several kinds: {', '.join(self.candidates)}"
        )


class EmptyRelationError(QueryError):
    """Mandatory relation returned no nodes."""

    def __init__(self, kind: str, relation: str, node_id: str):
        self.kind = kind
        self.relation = relation
        self.node_id = node_id
        super().__init__(
            f"Mandatory relation '{relation}' of {kind}='{node_id}' returned no nodes"
        )


class InvalidRowError(QueryError):
    """Returned row cannot be turned into an entity."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


# ============= BACKEND ERRORS =============

class BackendError(GraphError):
    """Failure reported by the graph backend.

    Passed through to callers as is; never retried here.
    """
    pass


class ConnectionError(BackendError):
    """Error connecting to graph database."""
    pass
