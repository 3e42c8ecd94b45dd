"""Lazy evaluation support for logging.

Page-level debug lines describe statements and cursors, which are costly to
render. The adapter below accepts callables for the message and its
arguments and only calls them when the level is enabled, so a traversal
with DEBUG disabled never formats them.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any


class LazyLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter evaluating callable messages and arguments on demand.

    The stdlib level methods (debug, info, ...) all route through ``log``,
    so overriding it is enough to make every level lazy.

    Example:
        ```python
        logger = get_lazy_logger(__name__)
        logger.debug(lambda: f"page statement: {stmt.compile()}")
        logger.debug("cursor=%s", lambda: describe(cursor))
        ```
    """

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None:
        """Log message, evaluating callables only when the level is enabled.

        Args:
            level: Numeric log level (e.g., logging.DEBUG).
            msg: Log message or callable returning message.
            *args: Format arguments (may include callables).
            **kwargs: Additional kwargs for logging.
        """
        if not self.isEnabledFor(level):
            return

        if callable(msg):
            msg = msg()
        evaluated = tuple(arg() if callable(arg) else arg for arg in args)
        super().log(level, msg, *evaluated, **kwargs)

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        """Merge bound context into the record's ``extra`` without overriding it."""
        if self.extra:
            kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_lazy_logger(name: str, **context: Any) -> LazyLoggerAdapter:
    """Get logger with lazy evaluation support.

    Args:
        name: Logger name (usually __name__).
        **context: Optional context bound to every record as ``extra``.

    Returns:
        Logger adapter with lazy evaluation support.
    """
    return LazyLoggerAdapter(logging.getLogger(name), context or {})

