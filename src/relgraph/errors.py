"""Exceptions raised by relgraph operations."""

from __future__ import annotations

from typing import Any, List, Sequence


class GraphError(Exception):
    """Base exception for graph operations."""
    pass


class NotFoundError(GraphError, LookupError):
    """Raised when a node, edge or relation does not exist."""
    def __init__(self, what: str, ref: Any):
        self.what = what
        self.ref = ref
        super().__init__(f"{what} not found: {ref}")


class AlreadyExistsError(GraphError):
    """Raised when adding a node or edge that is already present."""
    def __init__(self, what: str, ref: Any):
        self.what = what
        self.ref = ref
        super().__init__(f"{what} already exists: {ref}")


class ValidationError(GraphError, ValueError):
    """Raised when a query, input or descriptor has the wrong shape."""
    def __init__(
        self,
        message: str,
        path: Sequence[str] = (),
        expected: str | List[str] = "",
        received: Any = None,
    ):
        self.path = list(path)
        self.expected = expected
        self.received = received
        where = ".".join(self.path)
        super().__init__(f"{where}: {message}" if where else message)


class UnsupportedOperatorError(GraphError, NotImplementedError):
    """Raised when an operator key is not recognized."""
    def __init__(self, key: str, path: Sequence[str] = ()):
        self.key = key
        self.path = list(path)
        super().__init__(f"Unsupported operator '{key}'")
