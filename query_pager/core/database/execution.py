"""Statement execution helpers shared by the traversals and counts.

Executors are whatever exposes ``execute(statement)``: a sync ``Session`` or
``Connection``, or their asyncio counterparts for the ``a``-prefixed twins.
Results are fully buffered so that a page can be measured before it is
emitted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import Connection, Executable
    from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession
    from sqlalchemy.orm import Session

type Executor = Session | Connection
type AsyncExecutor = AsyncSession | AsyncConnection


def fetch_all(executor: Executor, statement: Executable, *, scalars: bool = False) -> Sequence[Any]:
    """Execute a statement and buffer its rows (or first-column scalars)."""
    result = executor.execute(statement)
    return result.scalars().all() if scalars else result.all()


async def afetch_all(
    executor: AsyncExecutor,
    statement: Executable,
    *,
    scalars: bool = False,
) -> Sequence[Any]:
    """Async twin of :func:`fetch_all`."""
    result = await executor.execute(statement)
    return result.scalars().all() if scalars else result.all()


def fetch_scalar(executor: Executor, statement: Executable) -> Any:
    """Execute a statement returning exactly one scalar value."""
    return executor.execute(statement).scalar_one()


async def afetch_scalar(executor: AsyncExecutor, statement: Executable) -> Any:
    """Async twin of :func:`fetch_scalar`."""
    result = await executor.execute(statement)
    return result.scalar_one()


def fetch_scalar_isolated(executor: Executor, statement: Executable) -> Any:
    """Execute a scalar statement inside a SAVEPOINT when a transaction is open.

    A failing statement then only rolls back to the savepoint, and the
    enclosing transaction stays usable on engines that abort a transaction
    on error (PostgreSQL). Outside a transaction it behaves like
    :func:`fetch_scalar`.
    """
    if not executor.in_transaction():
        return fetch_scalar(executor, statement)
    with executor.begin_nested():
        return fetch_scalar(executor, statement)


async def afetch_scalar_isolated(executor: AsyncExecutor, statement: Executable) -> Any:
    """Async twin of :func:`fetch_scalar_isolated`."""
    if not executor.in_transaction():
        return await afetch_scalar(executor, statement)
    async with executor.begin_nested():
        return await afetch_scalar(executor, statement)


__all__ = [
    "AsyncExecutor",
    "Executor",
    "afetch_all",
    "afetch_scalar",
    "afetch_scalar_isolated",
    "fetch_all",
    "fetch_scalar",
    "fetch_scalar_isolated",
]
