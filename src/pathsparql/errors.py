"""Exceptions raised while building and compiling path queries."""

from __future__ import annotations


class PathQueryError(Exception):
    """Base exception for path compilation errors."""

    pass


class MissingPathExpressionError(PathQueryError):
    """Raised when a read query is requested for a path without expression."""

    pass


class PathStructureError(PathQueryError):
    """Raised when a path or mutation expression has an unusable shape."""

    pass


class TermKindError(PathQueryError):
    """Raised when a term cannot be written into query text."""

    pass


class UnknownPropertyError(PathQueryError):
    """Raised when a property name cannot be resolved to a predicate."""

    pass
