"""Resume predicate for keyset pagination.

The resume predicate selects the rows that come strictly after a cursor
under the ordering of a sort specification. For ORDER BY a DESC, b, c with
cursor (v1, v2, v3) it is the lexicographic comparison:

    a < :seek_1 OR a = :seek_2 AND (b > :seek_3 OR b = :seek_4 AND c > :seek_5)

Every value but the last is bound twice: once for its strict comparison and
once for the equality guard that descends to the next key. A predicate for n
keys therefore takes 2n - 1 values, ordered v1, v1, v2, v2, ..., vn.

Sort expressions are raw SQL and are rendered verbatim through
``literal_column``; only the cursor values are bound.

The template only depends on the clean expressions and directions, so it is
built once and reused for every page with fresh values.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, bindparam, literal_column, or_

from query_pager.core.exceptions import CursorError
from query_pager.core.pagination.sorting import SortDirection, SortSpecification

if TYPE_CHECKING:
    from sqlalchemy import BindParameter, ColumnClause, ColumnElement

DEFAULT_BIND_PREFIX = "seek"

type Term = tuple[str, SortDirection]


def _compare(column: ColumnClause[Any], direction: SortDirection, bind: BindParameter[Any]) -> ColumnElement[bool]:
    if direction is SortDirection.DESC:
        return column < bind
    return column > bind


@dataclass(slots=True, frozen=True)
class ResumePredicate:
    """Predicate template: the compared terms plus placeholder names in bind order.

    Attributes:
        terms: (clean expression, direction) per sort key
        bind_names: Placeholder names, one per bound value (2n - 1 of them)
    """

    terms: tuple[Term, ...]
    bind_names: tuple[str, ...]

    @property
    def key_count(self) -> int:
        """Number of sort keys the predicate compares."""
        return len(self.terms)

    @property
    def sql(self) -> str:
        """Template rendered with ``:name`` placeholders, for logs and debugging."""
        return str(self._condition([bindparam(name) for name in self.bind_names]))

    def bind_values(self, cursor: Sequence[Any]) -> list[Any]:
        """Expand a cursor into the positional values of the template.

        Args:
            cursor: One value per sort key, in key order

        Returns:
            Values v1, v1, v2, v2, ..., v(n-1), v(n-1), vn

        Raises:
            CursorError: If the cursor does not have one value per key
        """
        if len(cursor) != self.key_count:
            raise CursorError(
                "Cursor does not match the sort specification",
                details={"expected": self.key_count, "received": len(cursor)},
            )

        values: list[Any] = []
        last = len(cursor) - 1
        for index, value in enumerate(cursor):
            values.append(value)
            if index < last:
                values.append(value)
        return values

    def clause(self, cursor: Sequence[Any]) -> ColumnElement[bool]:
        """Condition with the cursor values bound, ready for ``.where()``."""
        values = self.bind_values(cursor)
        return self._condition(
            [bindparam(name, value) for name, value in zip(self.bind_names, values, strict=True)]
        )

    def _condition(self, binds: Sequence[BindParameter[Any]]) -> ColumnElement[bool]:
        # Built inside out, from the last key to the first
        last = len(self.terms) - 1
        expression, direction = self.terms[last]
        condition = _compare(literal_column(expression), direction, binds[2 * last])

        for index in range(last - 1, -1, -1):
            expression, direction = self.terms[index]
            column = literal_column(expression)
            condition = or_(
                _compare(column, direction, binds[2 * index]),
                and_(column == binds[2 * index + 1], condition),
            )
        return condition


@lru_cache(maxsize=128)
def _build(terms: tuple[Term, ...], bind_prefix: str) -> ResumePredicate:
    bind_count = 2 * len(terms) - 1
    bind_names = tuple(f"{bind_prefix}_{number}" for number in range(1, bind_count + 1))
    return ResumePredicate(terms=terms, bind_names=bind_names)


def build_resume_predicate(
    spec: SortSpecification,
    *,
    bind_prefix: str = DEFAULT_BIND_PREFIX,
) -> ResumePredicate:
    """Build (or fetch from cache) the resume predicate for a specification.

    Value sources play no part in the template, so specifications that only
    differ in their callables share one predicate.

    Args:
        spec: Sort specification driving the traversal
        bind_prefix: Prefix for placeholder names; change it when the base
            statement already uses ``seek_N`` bind parameters

    Returns:
        ResumePredicate shared by every page of the traversal

    Example:
        spec = SortSpecification.from_mapping({"id DESC": "id"})
        predicate = build_resume_predicate(spec)
        predicate.sql                 # "id < :seek_1"
        stmt.where(predicate.clause((4,)))
    """
    terms = tuple((key.clean_expression, key.direction) for key in spec)
    return _build(terms, bind_prefix)


__all__ = [
    "DEFAULT_BIND_PREFIX",
    "ResumePredicate",
    "build_resume_predicate",
]
