"""Sort specifications for keyset pagination.

A sort specification is the ordered list of ORDER BY terms a traversal is
driven by. Each term is a raw SQL expression, optionally suffixed with
ASC/DESC, paired with the place its value is read from on a fetched row:

    spec = SortSpecification.from_mapping({
        "created_at DESC": "created_at",
        "CASE WHEN archived_at IS NULL THEN 0 ELSE 1 END": lambda row: int(row.archived_at is not None),
        "id": "id",
    })

The first term is the primary key of the ordering; later terms only break
ties. The tuple of values across all terms must identify each row
uniquely, otherwise rows sharing a tuple at a page boundary are skipped.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any, overload

from sqlalchemy import literal_column

from query_pager.core.exceptions import SortSpecificationError

if TYPE_CHECKING:
    from sqlalchemy import ColumnClause

_DIRECTION_SUFFIX = re.compile(r"\s+(desc|asc)\s*$", re.IGNORECASE)


class SortDirection(StrEnum):
    """Direction of a single ORDER BY term."""

    ASC = "asc"
    DESC = "desc"

    @property
    def operator(self) -> str:
        """Comparison operator selecting rows after a value in this direction."""
        return "<" if self is SortDirection.DESC else ">"


@dataclass(slots=True, frozen=True)
class Column:
    """Value source reading a named field off the row."""

    name: str


@dataclass(slots=True, frozen=True)
class Computed:
    """Value source computing the value from the whole row.

    Used when the ORDER BY term is an expression that is not projected as a
    column, e.g. ``COALESCE(updated_at, created_at)``.
    """

    func: Callable[[Any], Any]


type ValueSource = Column | Computed


def parse_direction(expression: str) -> tuple[str, SortDirection]:
    """Split a trailing ASC/DESC token off an ORDER BY expression.

    Args:
        expression: Raw ORDER BY term, e.g. ``"id DESC"``

    Returns:
        Tuple of (clean expression, direction). Expressions without a
        direction token are ascending and returned unchanged.

    Example:
        parse_direction("created_at  Desc")  # ("created_at", SortDirection.DESC)
        parse_direction("id")                # ("id", SortDirection.ASC)
    """
    match = _DIRECTION_SUFFIX.search(expression)
    if match is None:
        return expression, SortDirection.ASC

    direction = SortDirection.DESC if match.group(1).lower() == "desc" else SortDirection.ASC
    return expression[: match.start()], direction


def as_value_source(source: Any, expression: str) -> ValueSource:
    """Normalize a user supplied value source to Column or Computed."""
    if isinstance(source, Column | Computed):
        return source
    if isinstance(source, str):
        return Column(source)
    if callable(source):
        return Computed(source)
    raise SortSpecificationError(
        f"Value source must be a column name or a callable, got {type(source).__name__}",
        expression=expression,
    )


@dataclass(slots=True, frozen=True)
class SortKey:
    """One ORDER BY term of a sort specification.

    Attributes:
        expression: Original expression, including any direction token
        clean_expression: Expression with the direction token removed
        direction: Parsed sort direction
        source: Where the cursor value for this term is read from
    """

    expression: str
    clean_expression: str
    direction: SortDirection
    source: ValueSource

    @classmethod
    def parse(cls, expression: str, source: Any) -> SortKey:
        clean, direction = parse_direction(expression)
        return cls(
            expression=expression,
            clean_expression=clean,
            direction=direction,
            source=as_value_source(source, expression),
        )


class SortSpecification:
    """Immutable, ordered, non-empty collection of sort keys.

    Two specifications with the same keys compare equal. Hashing requires
    every computed value source to be hashable.
    """

    __slots__ = ("_keys",)

    def __init__(self, keys: Iterable[SortKey]) -> None:
        self._keys = tuple(keys)
        if not self._keys:
            raise SortSpecificationError("Sort specification must contain at least one key")

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[str, Any] | Iterable[tuple[str, Any]],
    ) -> SortSpecification:
        """Build a specification from expression -> value source pairs.

        Args:
            mapping: Ordered mapping (or iterable of pairs) of ORDER BY
                expression to a column name or a callable taking the row

        Raises:
            SortSpecificationError: If the mapping is empty or a value source
                is neither a string nor a callable
        """
        if isinstance(mapping, SortSpecification):
            return mapping
        items = mapping.items() if isinstance(mapping, Mapping) else mapping
        return cls(SortKey.parse(expression, source) for expression, source in items)

    @property
    def keys(self) -> tuple[SortKey, ...]:
        return self._keys

    def order_by_clauses(self) -> list[ColumnClause[Any]]:
        """ORDER BY clauses for every key, original expressions in priority order.

        Expressions are rendered verbatim, so colons in literals or JSON paths
        are not mistaken for bind parameters.
        """
        return [literal_column(key.expression) for key in self._keys]

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[SortKey]:
        return iter(self._keys)

    @overload
    def __getitem__(self, index: int) -> SortKey: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[SortKey, ...]: ...

    def __getitem__(self, index: int | slice) -> SortKey | tuple[SortKey, ...]:
        return self._keys[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SortSpecification):
            return NotImplemented
        return self._keys == other._keys

    def __hash__(self) -> int:
        return hash(self._keys)

    def __repr__(self) -> str:
        terms = ", ".join(key.expression for key in self._keys)
        return f"SortSpecification({terms})"


__all__ = [
    "Column",
    "Computed",
    "SortDirection",
    "SortKey",
    "SortSpecification",
    "ValueSource",
    "as_value_source",
    "parse_direction",
]
