"""Pytest configuration and shared fixtures: in-memory SQLite per test, mocked weather provider."""

import os
from datetime import datetime, timezone

# Set test config before diary imports so settings/engine use it
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DIARY_TIMEZONE", "UTC")
os.environ.setdefault("DEFAULT_RATE_LIMIT", "10000/minute")

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import diary.models  # noqa: F401 - so all models are registered
from diary.db.base import Base
from diary.db.session import engine_options, get_db
from diary.main import app
from diary.services.event_store import EventStore
from diary.services.http_client import close_http_client, init_http_client

pytest_plugins = ["pytest_asyncio"]

WEATHER_DAY = "2026-10-19"


def ms(iso: str) -> int:
    """Epoch ms for an ISO timestamp (naive values are UTC)."""
    dt = datetime.fromisoformat(iso)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def open_meteo_day(day: str = WEATHER_DAY) -> dict:
    """Open-Meteo style payload: 24 hours, temp 15.0 + 0.5/h, humidity 80 - 1/h, UTC."""
    return {
        "latitude": -23.55,
        "longitude": -46.625,
        "utc_offset_seconds": 0,
        "timezone": "GMT",
        "hourly": {
            "time": [f"{day}T{h:02d}:00" for h in range(24)],
            "temperature_2m": [15.0 + 0.5 * h for h in range(24)],
            "relative_humidity_2m": [80 - h for h in range(24)],
        },
    }


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database with all tables."""
    engine = create_async_engine("sqlite+aiosqlite://", **engine_options("sqlite+aiosqlite://"))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session


@pytest_asyncio.fixture
async def store(session):
    """EventStore without weather enrichment."""
    return EventStore(session)


@pytest_asyncio.fixture
async def weather_requests():
    """Install a shared HTTP client whose transport answers like Open-Meteo; yields the request log."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        day = request.url.params.get("start_date", WEATHER_DAY)
        return httpx.Response(200, json=open_meteo_day(day))

    await close_http_client()
    init_http_client(transport=httpx.MockTransport(handler))
    yield seen
    await close_http_client()


@pytest_asyncio.fixture
async def client(engine):
    """AsyncClient against the app with get_db bound to the per-test database."""
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _get_db():
        async with maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def now():
    return ms("2026-10-19T12:00:00")
