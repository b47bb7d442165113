"""Alembic environment for the tour availability schema."""

from __future__ import annotations

from logging.config import fileConfig
from os import environ

from alembic import context
from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import URL, make_url

from winetours.core.config import get_settings
from winetours.db.base import Base
from winetours.models import *  # noqa: F401,F403

# Async drivers used by the app mapped to the sync drivers migrations run on.
_SYNC_DRIVERS = {
    "postgresql": "postgresql+psycopg",
    "postgresql+asyncpg": "postgresql+psycopg",
    "sqlite+aiosqlite": "sqlite",
}

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _migration_url() -> URL:
    raw = environ.get("SYNC_DATABASE_URL") or environ.get("DATABASE_URL")
    if not raw:
        settings = get_settings()
        raw = settings.sync_database_url or settings.database_url
    url = make_url(raw)
    driver = _SYNC_DRIVERS.get(url.drivername)
    return url.set(drivername=driver) if driver else url


def _is_sqlite(url: URL) -> bool:
    return url.get_backend_name() == "sqlite"


def run_migrations_offline(url: URL) -> None:
    context.configure(
        url=url.render_as_string(hide_password=False),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=_is_sqlite(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online(url: URL) -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = url.render_as_string(hide_password=False)
    connectable = engine_from_config(
        section, prefix="sqlalchemy.", poolclass=pool.NullPool
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=_is_sqlite(url),
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline(_migration_url())
else:
    run_migrations_online(_migration_url())
