"""Pydantic Settings v2 configuration.

Settings come from environment variables (``PAGINATION_`` prefix) or a
``.env`` file, and are frozen once loaded:

    from query_pager.core.settings import get_pagination_settings

    settings = get_pagination_settings()
    print(settings.default_page_size)
"""

from __future__ import annotations

from .loader import get_pagination_settings
from .pagination import PaginationSettings

__all__ = [
    "PaginationSettings",
    "get_pagination_settings",
]
