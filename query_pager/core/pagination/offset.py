"""Page-number (OFFSET) traversal.

A simpler alternative to keyset traversal: requests page 1, 2, 3, ... of a
fixed size until the last page. It imposes no ordering, so the caller must
order the statement. Rows inserted or deleted in already visited pages shift
later page boundaries and cause rows to be skipped or emitted twice; prefer
:func:`~query_pager.core.pagination.keyset.iterate_keyset` when the data can
change during the traversal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from query_pager.core.database.execution import afetch_all, fetch_all
from query_pager.core.exceptions import PageSizeError
from query_pager.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator, Sequence

    from sqlalchemy import Select

    from query_pager.core.database.execution import AsyncExecutor, Executor

_lazy = get_lazy_logger(__name__)


@dataclass(slots=True, frozen=True)
class SimplePage[T]:
    """One page of an offset traversal, without a total count.

    Attributes:
        items: Rows of the page
        page: Page number (1-indexed)
        per_page: Requested page size
        has_more: Whether at least one row exists after this page

    Example:
        page = fetch_page(session, stmt, page=3, per_page=20)
        if page.has_more:
            following = fetch_page(session, stmt, page=4, per_page=20)
    """

    items: Sequence[T]
    page: int
    per_page: int
    has_more: bool

    @property
    def offset(self) -> int:
        """Rows skipped before this page."""
        return (self.page - 1) * self.per_page


def _page_statement(statement: Select[Any], page: int, per_page: int) -> Select[Any]:
    if page < 1:
        raise PageSizeError("page", page)
    if per_page < 1:
        raise PageSizeError("per_page", per_page)
    # One extra row tells whether another page exists
    return statement.limit(per_page + 1).offset((page - 1) * per_page)


def _to_page(rows: Sequence[Any], page: int, per_page: int) -> SimplePage[Any]:
    has_more = len(rows) > per_page
    return SimplePage(items=rows[:per_page], page=page, per_page=per_page, has_more=has_more)


def fetch_page(
    executor: Executor,
    statement: Select[Any],
    page: int,
    per_page: int,
    *,
    scalars: bool = False,
) -> SimplePage[Any]:
    """Fetch a single page of a statement.

    Args:
        executor: Session or Connection
        statement: Ordered select statement
        page: Page number (1-indexed)
        per_page: Rows per page
        scalars: Return first-column scalars (ORM entities) instead of rows

    Raises:
        PageSizeError: If page or per_page is below 1
    """
    paginated = _page_statement(statement, page, per_page)
    result = _to_page(fetch_all(executor, paginated, scalars=scalars), page, per_page)
    _lazy.debug(
        lambda: f"offset.page: {page} (per_page={per_page}) -> {len(result.items)} rows, has_more={result.has_more}"
    )
    return result


async def afetch_page(
    executor: AsyncExecutor,
    statement: Select[Any],
    page: int,
    per_page: int,
    *,
    scalars: bool = False,
) -> SimplePage[Any]:
    """Async twin of :func:`fetch_page`."""
    paginated = _page_statement(statement, page, per_page)
    result = _to_page(await afetch_all(executor, paginated, scalars=scalars), page, per_page)
    _lazy.debug(
        lambda: f"offset.page: {page} (per_page={per_page}) -> {len(result.items)} rows, has_more={result.has_more}"
    )
    return result


def _iterate(executor: Executor, statement: Select[Any], per_page: int, scalars: bool) -> Iterator[Any]:
    page_number = 0
    while True:
        page_number += 1
        page = fetch_page(executor, statement, page_number, per_page, scalars=scalars)
        yield from page.items
        if not page.has_more:
            return


async def _aiterate(
    executor: AsyncExecutor,
    statement: Select[Any],
    per_page: int,
    scalars: bool,
) -> AsyncIterator[Any]:
    page_number = 0
    while True:
        page_number += 1
        page = await afetch_page(executor, statement, page_number, per_page, scalars=scalars)
        for row in page.items:
            yield row
        if not page.has_more:
            return


def paginate_lazily(
    executor: Executor,
    statement: Select[Any],
    per_page: int,
    *,
    scalars: bool = False,
) -> Iterator[Any]:
    """Lazily iterate every row of a statement, one OFFSET page at a time.

    Raises:
        PageSizeError: If per_page is below 1 (raised immediately)
    """
    if per_page < 1:
        raise PageSizeError("per_page", per_page)
    return _iterate(executor, statement, per_page, scalars)


def apaginate_lazily(
    executor: AsyncExecutor,
    statement: Select[Any],
    per_page: int,
    *,
    scalars: bool = False,
) -> AsyncIterator[Any]:
    """Async twin of :func:`paginate_lazily`."""
    if per_page < 1:
        raise PageSizeError("per_page", per_page)
    return _aiterate(executor, statement, per_page, scalars)


__all__ = [
    "SimplePage",
    "afetch_page",
    "apaginate_lazily",
    "fetch_page",
    "paginate_lazily",
]
