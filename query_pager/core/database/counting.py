"""Row counting that survives GROUP BY and ORDER BY.

``select(func.count()).select_from(table)`` style counts, or a count column
added to a grouped statement, report one value per group instead of the
number of rows the statement produces. The safe count wraps the statement
as a derived table instead:

    SELECT count(1) FROM (SELECT 0 FROM orders GROUP BY customer_id) AS query

ORDER BY is dropped (it does not change cardinality and some engines reject
it in a subquery without LIMIT). For plain selects the projection is also
replaced with a constant, so the inner query does not compute column values
it throws away. Replacing the projection breaks statements referencing a
projected alias elsewhere (``GROUP BY day`` where ``day`` is a label); when
the engine rejects the optimized form, the count is retried once with the
projection kept. Inside a transaction the optimized attempt runs in a
SAVEPOINT, so its failure does not poison the transaction for the retry.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import Select, func, literal_column, select
from sqlalchemy.exc import DBAPIError

from query_pager.core.database.execution import (
    afetch_scalar,
    afetch_scalar_isolated,
    fetch_scalar,
    fetch_scalar_isolated,
)
from query_pager.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from sqlalchemy import CompoundSelect

    from query_pager.core.database.execution import AsyncExecutor, Executor

logger = logging.getLogger(__name__)
_lazy = get_lazy_logger(__name__)

DEFAULT_COUNT_ALIAS = "query"


def can_optimize(statement: Select[Any] | CompoundSelect) -> bool:
    """Whether the projection of a statement can be dropped before counting.

    UNION-style compound selects need their projection to combine rows, and
    DISTINCT needs it to decide which rows are duplicates.
    """
    if not isinstance(statement, Select):
        return False
    return not (getattr(statement, "_distinct", False) or getattr(statement, "_distinct_on", ()))


def build_count_statement(
    statement: Select[Any] | CompoundSelect,
    *,
    optimize: bool = True,
    alias: str = DEFAULT_COUNT_ALIAS,
) -> Select[tuple[int]]:
    """Build the derived-table count of a statement.

    Args:
        statement: Statement whose rows are counted
        optimize: Replace the projection with a constant when possible
        alias: Name of the derived table

    Returns:
        ``SELECT count(1) FROM (<statement>) AS <alias>``; bound parameters
        of the statement are carried along.
    """
    inner = statement.order_by(None)
    if optimize and can_optimize(statement):
        inner = inner.with_only_columns(literal_column("0"), maintain_column_froms=True)
    return select(func.count(literal_column("1"))).select_from(inner.subquery(alias))


def count_rows(
    executor: Executor,
    statement: Select[Any] | CompoundSelect,
    *,
    optimize: bool = True,
    alias: str = DEFAULT_COUNT_ALIAS,
) -> int:
    """Count the rows a statement produces.

    Args:
        executor: Session or Connection
        statement: Statement to count; may use GROUP BY, ORDER BY or UNION
        optimize: Try the constant-projection form first
        alias: Name of the derived table

    Returns:
        Number of rows the statement would return

    Raises:
        DBAPIError: If the unoptimized count fails. A failure of the
            optimized form is only logged and triggers the fallback.

    Note:
        When the executor is inside a transaction, the optimized attempt
        runs in a SAVEPOINT that is rolled back on failure. Outside one, an
        engine that aborts the transaction on error (PostgreSQL) fails the
        fallback too; pass ``optimize=False`` for statements known to
        reference projected aliases.
    """
    if optimize and can_optimize(statement):
        try:
            total = fetch_scalar_isolated(executor, build_count_statement(statement, alias=alias))
        except DBAPIError as e:
            _log_fallback(e)
        else:
            _lazy.debug(lambda: f"count.optimized -> {total}")
            return total

    total = fetch_scalar(executor, build_count_statement(statement, optimize=False, alias=alias))
    _lazy.debug(lambda: f"count.plain -> {total}")
    return total


async def acount_rows(
    executor: AsyncExecutor,
    statement: Select[Any] | CompoundSelect,
    *,
    optimize: bool = True,
    alias: str = DEFAULT_COUNT_ALIAS,
) -> int:
    """Async twin of :func:`count_rows`."""
    if optimize and can_optimize(statement):
        try:
            total = await afetch_scalar_isolated(executor, build_count_statement(statement, alias=alias))
        except DBAPIError as e:
            _log_fallback(e)
        else:
            _lazy.debug(lambda: f"count.optimized -> {total}")
            return total

    total = await afetch_scalar(executor, build_count_statement(statement, optimize=False, alias=alias))
    _lazy.debug(lambda: f"count.plain -> {total}")
    return total


def _log_fallback(error: DBAPIError) -> None:
    logger.warning(
        "Optimized count rejected, retrying with the original projection",
        extra={"error": str(error.orig), "operation": "db.count_rows"},
    )


__all__ = [
    "DEFAULT_COUNT_ALIAS",
    "acount_rows",
    "build_count_statement",
    "can_optimize",
    "count_rows",
]
