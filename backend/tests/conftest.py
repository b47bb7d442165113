"""Test fixtures for the wine tour availability backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.pop("REDIS_URL", None)

from winetours.core.config import get_settings
from winetours.db.base import Base
from winetours.db.session import dispose_engine, get_sessionmaker
from winetours.main import app
from winetours.models import AvailabilityRule, AvailabilityRuleType, Vehicle


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest_asyncio.fixture()
async def app_context(
    reset_database: AsyncIterator[None], db_url: str
) -> AsyncIterator[dict[str, object]]:
    """Yield an async client over a database holding a small sprinter fleet."""
    sessionmaker = get_sessionmaker(db_url)

    async with sessionmaker() as session:
        small = Vehicle(name="Sprinter A", vehicle_type="sprinter", capacity=12)
        large = Vehicle(name="Sprinter B", vehicle_type="sprinter", capacity=14)
        session.add_all([small, large])
        session.add_all(
            [
                AvailabilityRule(
                    name="Buffer",
                    rule_type=AvailabilityRuleType.BUFFER_TIME,
                    buffer_minutes=120,
                ),
                AvailabilityRule(
                    name="Capacity",
                    rule_type=AvailabilityRuleType.CAPACITY_LIMIT,
                    max_concurrent_bookings=3,
                    max_daily_bookings=5,
                ),
            ]
        )
        await session.commit()

        context: dict[str, object] = {
            "small_vehicle_id": small.id,
            "large_vehicle_id": large.id,
        }

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        yield context
