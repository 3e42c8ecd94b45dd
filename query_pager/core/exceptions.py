"""Pagination exceptions.

Custom exceptions for configuration and cursor problems. Errors raised by
SQLAlchemy while executing a page or a count are never wrapped: they reach
the caller unchanged.
"""
from __future__ import annotations

from typing import Any


class PaginationError(Exception):
    """Base exception for pagination operations.

    Raised when a traversal or count cannot be set up or continued because
    of the arguments it was given, as opposed to a database failure.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize pagination error.

        Args:
            message: Error description
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Format error message with details."""
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class SortSpecificationError(PaginationError):
    """Sort specification is empty or holds an unusable value source."""

    def __init__(self, message: str, expression: str | None = None):
        """Initialize sort specification error.

        Args:
            message: Error description
            expression: ORDER BY expression the error refers to, if any
        """
        details = {"expression": expression} if expression is not None else {}
        super().__init__(message, details=details)


class PageSizeError(PaginationError):
    """Page number or page size outside of the accepted range.

    Attributes:
        name: Argument that was rejected ("page_size", "page", ...)
        value: The rejected value
    """

    def __init__(self, name: str, value: int, *, minimum: int = 1, maximum: int | None = None):
        """Initialize page size error.

        Args:
            name: Rejected argument name
            value: Rejected value
            minimum: Smallest accepted value
            maximum: Largest accepted value, None when unbounded
        """
        self.name = name
        self.value = value

        if maximum is None:
            message = f"{name} must be at least {minimum}"
        else:
            message = f"{name} must be between {minimum} and {maximum}"
        super().__init__(message, details={name: value})


class CursorError(PaginationError):
    """Cursor does not fit the sort specification it is used with."""


class CursorExtractionError(CursorError):
    """A value source references a column the row does not carry.

    Raised while capturing the cursor from the last row of a page. The
    traversal stops; nothing is retried.
    """

    def __init__(self, column: str, row: Any):
        self.column = column
        super().__init__(
            f"Column {column!r} is not available on the row",
            details={"column": column, "row_type": type(row).__name__},
        )

    def __repr__(self) -> str:
        """Repr for debugging."""
        return f"CursorExtractionError(column={self.column!r})"


__all__ = [
    "CursorError",
    "CursorExtractionError",
    "PageSizeError",
    "PaginationError",
    "SortSpecificationError",
]
