"""Cursor capture for keyset pagination.

The cursor is the tuple of sort values of the last row of a page, one value
per sort key. It is read off whatever the traversal yields: a SQLAlchemy
``Row`` (Core or multi-column ORM selects), an ORM instance (when iterating
scalars) or a plain mapping.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from query_pager.core.exceptions import CursorExtractionError
from query_pager.core.pagination.sorting import Column, Computed, SortSpecification, ValueSource

type Cursor = tuple[Any, ...]

_MISSING = object()


def _lookup(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        value = row.get(name, _MISSING)
    elif (mapping := getattr(row, "_mapping", None)) is not None:
        value = mapping.get(name, _MISSING)
    else:
        value = getattr(row, name, _MISSING)
    if value is _MISSING:
        raise CursorExtractionError(name, row)
    return value


def resolve_value(row: Any, source: ValueSource) -> Any:
    """Resolve the value of one sort key on a row.

    Raises:
        CursorExtractionError: If a Column source names a field the row lacks
    """
    if isinstance(source, Computed):
        return source.func(row)
    if isinstance(source, Column):
        return _lookup(row, source.name)
    raise TypeError(f"Unsupported value source: {source!r}")


def extract_cursor(row: Any, spec: SortSpecification) -> Cursor:
    """Capture the cursor from a row, one value per key in key order."""
    return tuple(resolve_value(row, key.source) for key in spec)


__all__ = ["Cursor", "extract_cursor", "resolve_value"]
