"""Keyset (seek) and offset pagination over SQLAlchemy selects.

Keyset traversal is:
- Stable: rows written between pages never shift page boundaries
- Performant: every page seeks past the previous one instead of scanning an OFFSET
- Flexible: any number of sort terms, each ASC or DESC, read from a column or computed

Usage:
    from query_pager.core.pagination import iterate_keyset

    stmt = select(events.c.id, events.c.occurred_at)
    for row in iterate_keyset(
        session,
        stmt,
        {"occurred_at DESC": "occurred_at", "id DESC": "id"},
        page_size=1000,
    ):
        ...

The sort terms must identify rows uniquely (end with a primary key) or rows
sharing sort values across a page boundary are skipped.
"""

from query_pager.core.pagination.cursor import Cursor, extract_cursor, resolve_value
from query_pager.core.pagination.keyset import (
    KeysetPager,
    TraversalState,
    aiterate_keyset,
    iterate_keyset,
)
from query_pager.core.pagination.offset import (
    SimplePage,
    afetch_page,
    apaginate_lazily,
    fetch_page,
    paginate_lazily,
)
from query_pager.core.pagination.predicate import (
    DEFAULT_BIND_PREFIX,
    ResumePredicate,
    build_resume_predicate,
)
from query_pager.core.pagination.sorting import (
    Column,
    Computed,
    SortDirection,
    SortKey,
    SortSpecification,
    parse_direction,
)

__all__ = [
    "DEFAULT_BIND_PREFIX",
    # Sort specification
    "Column",
    "Computed",
    # Cursor
    "Cursor",
    # Keyset traversal
    "KeysetPager",
    "ResumePredicate",
    # Offset traversal
    "SimplePage",
    "SortDirection",
    "SortKey",
    "SortSpecification",
    "TraversalState",
    "afetch_page",
    "aiterate_keyset",
    "apaginate_lazily",
    "build_resume_predicate",
    "extract_cursor",
    "fetch_page",
    "iterate_keyset",
    "paginate_lazily",
    "parse_direction",
    "resolve_value",
]
