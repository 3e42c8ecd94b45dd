"""Database-facing helpers: statement execution and safe counting.

Execution:
    - fetch_all / fetch_scalar (and async twins): run a statement on a Session or Connection
    - fetch_scalar_isolated: the same inside a SAVEPOINT when a transaction is open

Counting:
    - count_rows / acount_rows: row count robust to GROUP BY, ORDER BY and UNION
    - build_count_statement: the derived-table count statement itself
"""

from query_pager.core.database.counting import (
    DEFAULT_COUNT_ALIAS,
    acount_rows,
    build_count_statement,
    can_optimize,
    count_rows,
)
from query_pager.core.database.execution import (
    AsyncExecutor,
    Executor,
    afetch_all,
    afetch_scalar,
    afetch_scalar_isolated,
    fetch_all,
    fetch_scalar,
    fetch_scalar_isolated,
)

__all__ = [
    "DEFAULT_COUNT_ALIAS",
    "AsyncExecutor",
    "Executor",
    "acount_rows",
    "afetch_all",
    "afetch_scalar",
    "afetch_scalar_isolated",
    "build_count_statement",
    "can_optimize",
    "count_rows",
    "fetch_all",
    "fetch_scalar",
    "fetch_scalar_isolated",
]
