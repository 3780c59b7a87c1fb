from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from diary.config import settings
from diary.db.base import Base


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def engine_options(url: str) -> dict[str, Any]:
    """Pool settings per backend: in-memory SQLite must share one connection."""
    if not _is_sqlite(url):
        return {"pool_pre_ping": True}
    if url.rstrip("/").endswith(":memory:") or url.endswith("://"):
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {"connect_args": {"check_same_thread": False}}


def _set_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


_options = engine_options(settings.database_url)
engine = create_async_engine(settings.database_url, echo=settings.debug, **_options)
# File-backed SQLite only
if _is_sqlite(settings.database_url) and "poolclass" not in _options:
    event.listen(engine.sync_engine, "connect", _set_sqlite_pragmas)

async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db() -> None:
    """Create missing tables. Alembic owns schema changes; this only bootstraps a fresh diary file."""
    import diary.models  # noqa: F401 - so all models are registered

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
