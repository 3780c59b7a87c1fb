"""
Export/import of the whole diary (events, settings, weather_cache).
Import is an upsert by primary key: existing rows with the same key are overwritten, others kept.
"""
import logging

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from diary.core.errors import InvalidInputError
from diary.models.setting import Setting
from diary.models.weather_cache import WeatherCache as WeatherCacheRow
from diary.schemas.event import event_to_dict, parse_event
from diary.schemas.snapshot import ImportResult, SettingItem, Snapshot
from diary.schemas.weather import WeatherCacheRecord
from diary.services.event_store import EventStore

logger = logging.getLogger(__name__)


async def export_snapshot(session: AsyncSession) -> Snapshot:
    events = await EventStore(session).list_all()
    r_settings = await session.execute(select(Setting).order_by(Setting.key.asc()))
    r_weather = await session.execute(select(WeatherCacheRow).order_by(WeatherCacheRow.key.asc()))
    return Snapshot(
        events=[event_to_dict(e) for e in events],
        settings=[SettingItem(key=row.key, value=row.value) for row in r_settings.scalars().all()],
        weather_cache=[
            WeatherCacheRecord.model_validate(row).model_dump() for row in r_weather.scalars().all()
        ],
    )


async def import_snapshot(session: AsyncSession, snapshot: Snapshot) -> ImportResult:
    """Upsert every record verbatim. Invalid records raise InvalidInputError and nothing is flushed."""
    events = [parse_event(item) for item in snapshot.events]
    try:
        weather = [WeatherCacheRecord.model_validate(item) for item in snapshot.weather_cache]
    except ValidationError as e:
        raise InvalidInputError(f"Invalid weather_cache record: {e.error_count()} error(s)") from e
    missing_ids = [e for e in events if not e.id]
    if missing_ids:
        raise InvalidInputError(f"{len(missing_ids)} imported event(s) have no id")

    # Weather is already attached to imported events; never refetch on import
    store = EventStore(session)
    for event in events:
        await store.append(event)
    for item in snapshot.settings:
        await session.merge(Setting(key=item.key, value=item.value))
    for record in weather:
        await session.merge(WeatherCacheRow(**record.model_dump()))
    await session.flush()
    logger.info(
        "Imported snapshot: %d events, %d settings, %d weather days",
        len(events),
        len(snapshot.settings),
        len(weather),
    )
    return ImportResult(events=len(events), settings=len(snapshot.settings), weather_cache=len(weather))
