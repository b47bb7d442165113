"""Async engines and session factories, cached per database URL."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from winetours.core.config import get_settings

SQLITE_BUSY_TIMEOUT_SECONDS = 30

_engines: dict[str, AsyncEngine] = {}
_factories: dict[str, async_sessionmaker[AsyncSession]] = {}


def _url_for(database_url: str | None) -> str:
    return database_url or get_settings().database_url


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_for(url: str) -> AsyncEngine:
    """Build an engine for ``url``.

    SQLite connections wait on locks instead of failing immediately and
    enforce foreign keys; server databases get connection liveness checks.
    """
    if make_url(url).get_backend_name() == "sqlite":
        engine = create_async_engine(
            url, connect_args={"timeout": SQLITE_BUSY_TIMEOUT_SECONDS}
        )
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_async_engine(url, pool_pre_ping=True)


def get_sessionmaker(
    database_url: str | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Return the session factory for ``database_url`` (default: configured URL)."""
    url = _url_for(database_url)
    factory = _factories.get(url)
    if factory is None:
        engine = _engines.get(url)
        if engine is None:
            engine = _engines[url] = create_engine_for(url)
        factory = async_sessionmaker(engine, expire_on_commit=False)
        _factories[url] = factory
    return factory


async def get_session() -> AsyncIterator[AsyncSession]:
    async with get_sessionmaker()() as session:
        yield session


async def dispose_engine(database_url: str | None = None) -> None:
    """Close pooled connections and forget the cached factory for the URL."""
    url = _url_for(database_url)
    _factories.pop(url, None)
    engine = _engines.pop(url, None)
    if engine is not None:
        await engine.dispose()
