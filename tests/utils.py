"""Test utilities: the shared schema, seed rows and helpers.

Usage:
    from tests.utils import ITEM_ROWS, Item, items, sorted_ids

    expected = sorted_ids(key=lambda row: (row["category"], -row["score"], row["id"]))
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import Any

import sqlalchemy as sa
from sqlalchemy.orm import DeclarativeBase

metadata = sa.MetaData()

items = sa.Table(
    "items",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
    sa.Column("category", sa.String(10), nullable=False),
    sa.Column("score", sa.Integer, nullable=False),
    sa.Column("created_on", sa.Date, nullable=True),
)


class Base(DeclarativeBase):
    metadata = metadata


class Item(Base):
    __table__ = items


ITEM_COUNT = 10

# ids 1..10; categories cycle b, c, a; odd ids have a created_on date
ITEM_ROWS: list[dict[str, Any]] = [
    {
        "id": i,
        "category": "abc"[i % 3],
        "score": i % 4,
        "created_on": date(2024, 1, i) if i % 2 else None,
    }
    for i in range(1, ITEM_COUNT + 1)
]


def sorted_ids(key: Callable[[dict[str, Any]], Any], *, reverse: bool = False) -> list[int]:
    """Ids of ITEM_ROWS sorted in Python, to compare against SQL ordering."""
    return [row["id"] for row in sorted(ITEM_ROWS, key=key, reverse=reverse)]


class StatementLog:
    """Records every SQL statement sent to the driver.

    Each entry is (statement, parameters, bind names); bind names come from
    the compiled statement, since positional drivers only see values.
    """

    def __init__(self) -> None:
        self.entries: list[tuple[str, Any, frozenset[str]]] = []

    def __call__(self, conn, cursor, statement, parameters, context, executemany) -> None:
        compiled = getattr(context, "compiled", None)
        bind_names = frozenset(compiled.binds) if compiled is not None else frozenset()
        self.entries.append((statement, parameters, bind_names))

    @property
    def statements(self) -> list[str]:
        return [entry[0] for entry in self.entries]

    @property
    def selects(self) -> list[tuple[str, Any, frozenset[str]]]:
        """Only the SELECT statements, ignoring seed inserts and DDL."""
        return [entry for entry in self.entries if entry[0].lstrip().upper().startswith("SELECT")]
