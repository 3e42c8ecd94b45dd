"""Repository package.

Available Repositories:
    - PaginationRepository: keyset/offset traversal and safe count with explicit session

Example:
    ```python
    from query_pager.core.repositories import PaginationRepository

    repo = PaginationRepository()
    total = repo.count(session, stmt)
    ```
"""
from __future__ import annotations

from query_pager.core.repositories.pagination import PaginationRepository

__all__ = [
    "PaginationRepository",
]
