"""Keyset (seek) traversal of a SQLAlchemy select.

The traversal walks every row a statement matches, one bounded page at a
time, resuming each page strictly after the sort values of the previous
page's last row instead of skipping an OFFSET. Rows inserted, updated or
deleted between pages therefore never shift a page boundary: no row is
emitted twice and no row that existed for the whole traversal is skipped,
provided the sort values identify rows uniquely.

Usage:
    stmt = select(users.c.id, users.c.email).where(users.c.active.is_(True))

    for row in iterate_keyset(session, stmt, {"id DESC": "id"}, page_size=500):
        handle(row)

    # asyncio
    async for row in aiterate_keyset(async_session, stmt, {"id": "id"}, page_size=500):
        await handle(row)

Each page is one independent SELECT ... ORDER BY ... LIMIT; consistency across
pages is only as strong as the isolation of the session's transaction.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any

from query_pager.core.database.execution import afetch_all, fetch_all
from query_pager.core.exceptions import PageSizeError
from query_pager.core.pagination.cursor import Cursor, extract_cursor
from query_pager.core.pagination.predicate import DEFAULT_BIND_PREFIX, build_resume_predicate
from query_pager.core.pagination.sorting import SortSpecification
from query_pager.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable, Iterator, Mapping, Sequence

    from sqlalchemy import Select

    from query_pager.core.database.execution import AsyncExecutor, Executor

    type SortMap = SortSpecification | Mapping[str, Any] | Iterable[tuple[str, Any]]

_lazy = get_lazy_logger(__name__)


class TraversalState(StrEnum):
    """Lifecycle of a keyset traversal."""

    INIT = "init"
    FETCHING = "fetching"
    EMITTING = "emitting"
    DONE = "done"


class KeysetPager:
    """State machine producing the page statements of a keyset traversal.

    The pager performs no I/O: callers ask it for the next statement,
    execute it, hand the rows back with ``receive()``, emit them, then call
    ``advance()``. The sync and async drivers below are thin loops around it.

        INIT -> FETCHING -> EMITTING -> FETCHING ... -> DONE

    The ordering is applied to the base statement once, at construction. A
    page shorter than ``page_size`` ends the traversal.

    Attributes:
        spec: Parsed sort specification
        page_size: Maximum rows per page
        predicate: Resume predicate shared by all pages
        cursor: Sort values of the last emitted row, None before the first page
        state: Current traversal state
        pages_fetched: Number of pages received so far
    """

    __slots__ = (
        "_base",
        "_page",
        "cursor",
        "page_size",
        "pages_fetched",
        "predicate",
        "spec",
        "state",
    )

    def __init__(
        self,
        statement: Select[Any],
        sort_map: SortMap,
        page_size: int,
        *,
        bind_prefix: str = DEFAULT_BIND_PREFIX,
    ) -> None:
        """Validate the arguments and order the base statement.

        Args:
            statement: Select to traverse (filters applied, no LIMIT needed)
            sort_map: Sort specification, or expression -> value source pairs
            page_size: Rows fetched per page
            bind_prefix: Placeholder prefix for the resume predicate

        Raises:
            PageSizeError: If page_size is below 1
            SortSpecificationError: If the sort map is empty or malformed
        """
        if page_size < 1:
            raise PageSizeError("page_size", page_size)

        self.spec = SortSpecification.from_mapping(sort_map)
        self.page_size = page_size
        self.predicate = build_resume_predicate(self.spec, bind_prefix=bind_prefix)
        self.cursor: Cursor | None = None
        self.pages_fetched = 0
        self.state = TraversalState.INIT
        self._base = statement.order_by(*self.spec.order_by_clauses())
        self._page: Sequence[Any] = ()

    def next_statement(self) -> Select[Any] | None:
        """Statement fetching the next page, or None once the traversal is done."""
        if self.state is TraversalState.DONE:
            return None
        if self.state is TraversalState.EMITTING:
            raise RuntimeError("advance() must be called before requesting the next page")

        statement = self._base
        if self.cursor is not None:
            statement = statement.where(self.predicate.clause(self.cursor))

        self.state = TraversalState.FETCHING
        return statement.limit(self.page_size)

    def receive(self, rows: Sequence[Any]) -> None:
        """Record the rows of the page fetched with the last statement."""
        if self.state is not TraversalState.FETCHING:
            raise RuntimeError(f"Cannot receive a page while {self.state}")

        self._page = rows
        self.pages_fetched += 1
        self.state = TraversalState.EMITTING

    def advance(self) -> None:
        """Capture the cursor from the last emitted row and pick the next state.

        Raises:
            CursorExtractionError: If a column value source is absent on the row
        """
        if self.state is not TraversalState.EMITTING:
            raise RuntimeError(f"Cannot advance while {self.state}")

        rows, self._page = self._page, ()
        if rows:
            self.cursor = extract_cursor(rows[-1], self.spec)

        if len(rows) == self.page_size:
            self.state = TraversalState.FETCHING
        else:
            self.state = TraversalState.DONE

    @property
    def done(self) -> bool:
        return self.state is TraversalState.DONE


def _log_page(pager: KeysetPager, rows: Sequence[Any]) -> None:
    _lazy.debug(
        lambda: f"keyset.page: {pager.pages_fetched} -> {len(rows)}/{pager.page_size} rows, "
        f"resumed={'yes' if pager.pages_fetched > 1 else 'no'}"
    )


def _iterate(executor: Executor, pager: KeysetPager, scalars: bool) -> Iterator[Any]:
    while (statement := pager.next_statement()) is not None:
        rows = fetch_all(executor, statement, scalars=scalars)
        pager.receive(rows)
        _log_page(pager, rows)
        yield from rows
        pager.advance()

    _lazy.debug(lambda: f"keyset.done: {pager.pages_fetched} pages, spec={pager.spec!r}")


async def _aiterate(executor: AsyncExecutor, pager: KeysetPager, scalars: bool) -> AsyncIterator[Any]:
    while (statement := pager.next_statement()) is not None:
        rows = await afetch_all(executor, statement, scalars=scalars)
        pager.receive(rows)
        _log_page(pager, rows)
        for row in rows:
            yield row
        pager.advance()

    _lazy.debug(lambda: f"keyset.done: {pager.pages_fetched} pages, spec={pager.spec!r}")


def iterate_keyset(
    executor: Executor,
    statement: Select[Any],
    sort_map: SortMap,
    page_size: int,
    *,
    scalars: bool = False,
    bind_prefix: str = DEFAULT_BIND_PREFIX,
) -> Iterator[Any]:
    """Lazily iterate every row of a statement using keyset pagination.

    The statement is ordered by the sort map's expressions (appended after
    any ORDER BY it already has) and fetched ``page_size`` rows at a time.
    Arguments are validated immediately, before the first row is requested.

    Args:
        executor: Session or Connection executing the pages
        statement: Select to traverse
        sort_map: ORDER BY expression -> column name or callable(row), in
            priority order; expressions may end with ASC/DESC
        page_size: Rows fetched per page
        scalars: Yield first-column scalars (ORM entities) instead of rows
        bind_prefix: Placeholder prefix for the resume predicate

    Returns:
        Iterator over the rows, pulling a new page when the previous one is
        exhausted. It cannot be restarted; call again for a new traversal.

    Raises:
        PageSizeError: If page_size is below 1
        SortSpecificationError: If the sort map is empty or malformed

    Example:
        rows = iterate_keyset(
            session,
            select(Order.id, Order.placed_at),
            {"placed_at DESC": "placed_at", "id DESC": "id"},
            page_size=1000,
        )
        for row in rows:
            ...
    """
    pager = KeysetPager(statement, sort_map, page_size, bind_prefix=bind_prefix)
    return _iterate(executor, pager, scalars)


def aiterate_keyset(
    executor: AsyncExecutor,
    statement: Select[Any],
    sort_map: SortMap,
    page_size: int,
    *,
    scalars: bool = False,
    bind_prefix: str = DEFAULT_BIND_PREFIX,
) -> AsyncIterator[Any]:
    """Async twin of :func:`iterate_keyset` for AsyncSession/AsyncConnection."""
    pager = KeysetPager(statement, sort_map, page_size, bind_prefix=bind_prefix)
    return _aiterate(executor, pager, scalars)


__all__ = [
    "KeysetPager",
    "TraversalState",
    "aiterate_keyset",
    "iterate_keyset",
]
