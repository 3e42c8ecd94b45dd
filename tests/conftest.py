"""Pytest configuration and shared fixtures.

Organization:
    - Database Fixtures: sync and async SQLite engines and seeded sessions
    - Utility Fixtures: statement capture and settings isolation

Every database fixture uses a fresh in-memory SQLite database, so tests can
insert and delete rows freely.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Generator

import pytest
import sqlalchemy as sa
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session

from tests.utils import ITEM_ROWS, StatementLog, items, metadata

# Ensure tests never read a developer's pagination overrides
for _name in list(os.environ):
    if _name.startswith("PAGINATION_"):
        del os.environ[_name]


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def engine() -> Generator[sa.Engine]:
    """Sync SQLAlchemy engine on an in-memory SQLite database with the schema created."""
    engine = sa.create_engine("sqlite://", echo=False)
    metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session(engine: sa.Engine) -> Generator[Session]:
    """Sync session seeded with ITEM_ROWS; rolled back after the test.

    Example:
        def test_count(session):
            assert count_rows(session, select(items.c.id)) == 10
    """
    with Session(engine) as session:
        session.execute(sa.insert(items), ITEM_ROWS)
        try:
            yield session
        finally:
            session.rollback()


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Async SQLAlchemy engine (aiosqlite) with the schema created."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def async_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Async session seeded with ITEM_ROWS; rolled back after the test."""
    session_maker = async_sessionmaker(async_engine, expire_on_commit=False)
    async with session_maker() as session:
        await session.execute(sa.insert(items), ITEM_ROWS)
        try:
            yield session
        finally:
            await session.rollback()


# ============================================================================
# Utility Fixtures
# ============================================================================


@pytest.fixture
def statement_log(engine: sa.Engine) -> Generator[StatementLog]:
    """Capture statements executed on the sync engine."""
    log = StatementLog()
    event.listen(engine, "before_cursor_execute", log)
    try:
        yield log
    finally:
        event.remove(engine, "before_cursor_execute", log)


@pytest.fixture
def async_statement_log(async_engine: AsyncEngine) -> Generator[StatementLog]:
    """Capture statements executed on the async engine."""
    log = StatementLog()
    event.listen(async_engine.sync_engine, "before_cursor_execute", log)
    try:
        yield log
    finally:
        event.remove(async_engine.sync_engine, "before_cursor_execute", log)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None]:
    """Drop cached settings so environment changes in one test do not leak."""
    from query_pager.core.settings import get_pagination_settings

    get_pagination_settings.cache_clear()
    yield
    get_pagination_settings.cache_clear()
