"""Pagination repository: the traversals and the safe count behind one object.

Binds keyset traversal, offset traversal and safe counting to an explicit
session, filling page sizes and SQL naming from ``PaginationSettings``.
Session is always explicit - no hidden state.

Example:
    from query_pager.core.repositories import PaginationRepository

    repo = PaginationRepository()

    stmt = select(Order.id, Order.total).where(Order.status == "paid")
    print(repo.count(session, stmt))
    for row in repo.iterate(session, stmt, {"id": "id"}):
        ...

    # asyncio
    total = await repo.acount(async_session, stmt)
    async for row in repo.aiterate(async_session, stmt, {"id": "id"}, page_size=200):
        ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from query_pager.core.database.counting import acount_rows, count_rows
from query_pager.core.exceptions import PageSizeError
from query_pager.core.pagination.keyset import aiterate_keyset, iterate_keyset
from query_pager.core.pagination.offset import apaginate_lazily, paginate_lazily
from query_pager.core.settings import get_pagination_settings
from query_pager.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from sqlalchemy import CompoundSelect, Select

    from query_pager.core.database.execution import AsyncExecutor, Executor
    from query_pager.core.pagination.keyset import SortMap
    from query_pager.core.settings import PaginationSettings


class PaginationRepository:
    """Pagination operations with explicit session passing.

    Provides:
        - iterate(session, statement, sort_map, page_size) -> Iterator
        - iterate_pages(session, statement, page_size) -> Iterator
        - count(session, statement) -> int
        - aiterate / aiterate_pages / acount for async sessions

    Attributes:
        settings: Defaults for page sizes, bind prefix and count alias
    """

    __slots__ = ("_lazy", "settings")

    def __init__(self, settings: PaginationSettings | None = None) -> None:
        """Initialize repository.

        Args:
            settings: Explicit settings; the cached environment settings
                are used when omitted
        """
        self.settings = settings or get_pagination_settings()
        self._lazy = get_lazy_logger(__name__)

    def _page_size(self, page_size: int | None) -> int:
        if page_size is None:
            return self.settings.default_page_size
        if not 1 <= page_size <= self.settings.max_page_size:
            raise PageSizeError("page_size", page_size, maximum=self.settings.max_page_size)
        return page_size

    def iterate(
        self,
        session: Executor,
        statement: Select[Any],
        sort_map: SortMap,
        page_size: int | None = None,
        *,
        scalars: bool = False,
    ) -> Iterator[Any]:
        """Iterate every row with keyset pagination.

        Args:
            session: Session or Connection
            statement: Select to traverse
            sort_map: ORDER BY expression -> column name or callable(row)
            page_size: Rows per page (defaults to settings.default_page_size)
            scalars: Yield ORM entities instead of rows

        Raises:
            PageSizeError: If page_size is outside 1..settings.max_page_size
            SortSpecificationError: If the sort map is empty or malformed
        """
        size = self._page_size(page_size)
        self._lazy.debug(lambda: f"db.iterate: keyset traversal, page_size={size}")
        return iterate_keyset(
            session,
            statement,
            sort_map,
            size,
            scalars=scalars,
            bind_prefix=self.settings.bind_prefix,
        )

    def aiterate(
        self,
        session: AsyncExecutor,
        statement: Select[Any],
        sort_map: SortMap,
        page_size: int | None = None,
        *,
        scalars: bool = False,
    ) -> AsyncIterator[Any]:
        """Async twin of :meth:`iterate`."""
        size = self._page_size(page_size)
        self._lazy.debug(lambda: f"db.aiterate: keyset traversal, page_size={size}")
        return aiterate_keyset(
            session,
            statement,
            sort_map,
            size,
            scalars=scalars,
            bind_prefix=self.settings.bind_prefix,
        )

    def iterate_pages(
        self,
        session: Executor,
        statement: Select[Any],
        page_size: int | None = None,
        *,
        scalars: bool = False,
    ) -> Iterator[Any]:
        """Iterate every row with OFFSET pagination.

        The statement must already be ordered. Concurrent writes can make
        this skip or repeat rows; use :meth:`iterate` when they matter.
        """
        size = self._page_size(page_size)
        self._lazy.debug(lambda: f"db.iterate_pages: offset traversal, per_page={size}")
        return paginate_lazily(session, statement, size, scalars=scalars)

    def aiterate_pages(
        self,
        session: AsyncExecutor,
        statement: Select[Any],
        page_size: int | None = None,
        *,
        scalars: bool = False,
    ) -> AsyncIterator[Any]:
        """Async twin of :meth:`iterate_pages`."""
        size = self._page_size(page_size)
        self._lazy.debug(lambda: f"db.aiterate_pages: offset traversal, per_page={size}")
        return apaginate_lazily(session, statement, size, scalars=scalars)

    def count(
        self,
        session: Executor,
        statement: Select[Any] | CompoundSelect,
        *,
        optimize: bool | None = None,
    ) -> int:
        """Count the rows a statement produces, GROUP BY and UNION included.

        Args:
            session: Session or Connection
            statement: Statement to count
            optimize: Override settings.count_optimize
        """
        total = count_rows(
            session,
            statement,
            optimize=self.settings.count_optimize if optimize is None else optimize,
            alias=self.settings.count_alias,
        )
        self._lazy.debug(lambda: f"db.count -> {total}")
        return total

    async def acount(
        self,
        session: AsyncExecutor,
        statement: Select[Any] | CompoundSelect,
        *,
        optimize: bool | None = None,
    ) -> int:
        """Async twin of :meth:`count`."""
        total = await acount_rows(
            session,
            statement,
            optimize=self.settings.count_optimize if optimize is None else optimize,
            alias=self.settings.count_alias,
        )
        self._lazy.debug(lambda: f"db.acount -> {total}")
        return total


__all__ = ["PaginationRepository"]
