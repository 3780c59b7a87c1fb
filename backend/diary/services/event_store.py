"""
Event store: persistence of diary events in the `events` table.

Records go in and come out as frozen schema variants (EventRecord); ORM rows never leave
this module. Writes of sleep_start / sleep_end / wake try to attach a weather reading first.
That lookup is best-effort: a missing location or a failed upstream call is logged and the
event is stored without weather. Storage errors propagate to the caller.
"""
import logging
import uuid
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from diary.core.clock import date_key_for
from diary.core.errors import NotFoundError, WeatherFetchError
from diary.models.event import Event
from diary.schemas.event import VARIANT_FIELDS, WEATHER_TYPES, EventRecord, WeatherReading, parse_event
from diary.services.weather_cache import WeatherCache

logger = logging.getLogger(__name__)


def _row_to_record(row: Event) -> EventRecord:
    data: dict[str, Any] = {
        "id": row.id,
        "type": row.type,
        "ts": row.ts,
        "date_key": row.date_key,
    }
    for field in VARIANT_FIELDS:
        value = getattr(row, field)
        if value is not None:
            data[field] = value
    if row.weather:
        data["weather"] = row.weather
    return parse_event(data)


def _apply_record(row: Event, record: EventRecord) -> None:
    """Full replace of row columns from record; fields the variant lacks are cleared."""
    row.type = record.type
    row.ts = record.ts
    row.date_key = record.date_key
    for field in VARIANT_FIELDS:
        setattr(row, field, getattr(record, field, None))
    row.weather = record.weather.model_dump() if record.weather is not None else None


class EventStore:
    """Event CRUD and range queries over one session.

    Example usage:
        store = EventStore(session, weather=WeatherCache(session, provider))
        saved = await store.append(SleepStartEvent(ts=now_ms()))
    """

    def __init__(self, session: AsyncSession, weather: WeatherCache | None = None):
        self.session = session
        self.weather = weather

    async def _with_weather(self, event: EventRecord) -> EventRecord:
        if event.type not in WEATHER_TYPES or self.weather is None:
            return event
        try:
            reading = await self.weather.reading_for_timestamp(event.ts)
        except SQLAlchemyError:
            raise
        except WeatherFetchError as e:
            logger.warning("Weather lookup failed for %s at %s: %s", event.type, event.ts, e)
            return event
        except Exception:
            logger.exception("Unexpected error in weather lookup for %s at %s", event.type, event.ts)
            return event
        if reading is None:
            return event
        return event.model_copy(update={"weather": reading})

    async def append(self, event: EventRecord) -> EventRecord:
        """Assign id (if absent) and date_key, attach weather, persist. Existing id is overwritten."""
        event = await self._with_weather(event)
        record = event.model_copy(
            update={"id": event.id or str(uuid.uuid4()), "date_key": date_key_for(event.ts)}
        )
        row = await self.session.get(Event, record.id)
        if row is None:
            row = Event(id=record.id)
            self.session.add(row)
        _apply_record(row, record)
        await self.session.flush()
        logger.debug("Appended %s event %s", record.type, record.id)
        return record

    async def update(self, event: EventRecord) -> EventRecord:
        """Full replace keyed by id. Raises NotFoundError if id is unknown.

        A sleep/wake event that gets no fresh weather keeps the reading already stored.
        """
        if not event.id:
            raise NotFoundError("")
        row = await self.session.get(Event, event.id)
        if row is None:
            raise NotFoundError(event.id)
        event = await self._with_weather(event)
        update: dict[str, Any] = {"date_key": date_key_for(event.ts)}
        # Keep the stored reading when no new one could be taken
        if event.weather is None and event.type in WEATHER_TYPES and row.weather:
            update["weather"] = WeatherReading.model_validate(row.weather)
        record = event.model_copy(update=update)
        _apply_record(row, record)
        await self.session.flush()
        return record

    async def delete(self, event_id: str) -> None:
        """Remove the event; no-op if absent."""
        await self.session.execute(delete(Event).where(Event.id == event_id))
        await self.session.flush()

    async def get(self, event_id: str) -> EventRecord | None:
        row = await self.session.get(Event, event_id)
        return _row_to_record(row) if row is not None else None

    async def list_all(self) -> list[EventRecord]:
        """All events, ts ascending; equal timestamps in id order."""
        r = await self.session.execute(select(Event).order_by(Event.ts.asc(), Event.id.asc()))
        return [_row_to_record(row) for row in r.scalars().all()]

    async def list_between(self, start_ts: int, end_ts: int) -> list[EventRecord]:
        """Events with start_ts <= ts <= end_ts, ts ascending."""
        r = await self.session.execute(
            select(Event)
            .where(Event.ts >= start_ts, Event.ts <= end_ts)
            .order_by(Event.ts.asc(), Event.id.asc())
        )
        return [_row_to_record(row) for row in r.scalars().all()]
