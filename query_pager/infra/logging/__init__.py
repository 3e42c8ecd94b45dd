"""Logging helpers.

The package only emits records through ``logging``; handlers, formatters and
levels belong to the host application:

    import logging

    logging.getLogger("query_pager").setLevel(logging.DEBUG)
"""

from query_pager.infra.logging.lazy import LazyLoggerAdapter, get_lazy_logger

__all__ = ["LazyLoggerAdapter", "get_lazy_logger"]
