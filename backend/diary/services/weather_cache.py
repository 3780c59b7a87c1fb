"""
Per-day, per-location weather cache and nearest-sample lookup.
A day is fetched once from Open-Meteo and stored in weather_cache; later lookups for any
timestamp of that day are served from the row.
"""
import logging
from datetime import date

from prometheus_client import Counter
from sqlalchemy.ext.asyncio import AsyncSession

from diary.core.clock import date_key_for, now_ms
from diary.core.errors import WeatherFetchError
from diary.models.weather_cache import WeatherCache as WeatherCacheRow
from diary.schemas.event import WeatherReading
from diary.schemas.weather import WeatherCacheRecord
from diary.services.location import LocationProvider, resolve_location, round_coord
from diary.services.weather_client import fetch_hourly_day, parse_hourly

logger = logging.getLogger(__name__)

WEATHER_CACHE_LOOKUPS = Counter(
    "diary_weather_cache_lookups_total",
    "Daily weather series lookups by outcome",
    ["outcome"],
)


def _fmt_coord(value: float) -> str:
    return f"{value:g}"


def cache_key(date_key: str, lat: float, lon: float) -> str:
    return f"{date_key}:{_fmt_coord(lat)}:{_fmt_coord(lon)}"


def _extrema(values: list[float | None]) -> tuple[float | None, float | None]:
    present = [v for v in values if v is not None]
    if not present:
        return None, None
    return min(present), max(present)


def nearest_reading(record: WeatherCacheRecord | None, ts: int) -> WeatherReading | None:
    """Sample whose hour is closest to ts (first one on ties). None if no hours or temp/hum missing."""
    if record is None or not record.hours:
        return None
    best_idx = 0
    best_diff = abs(record.hours[0] - ts)
    for i in range(1, len(record.hours)):
        diff = abs(record.hours[i] - ts)
        if diff < best_diff:
            best_diff = diff
            best_idx = i
    temp = record.temps[best_idx] if best_idx < len(record.temps) else None
    hum = record.hums[best_idx] if best_idx < len(record.hums) else None
    if not isinstance(temp, (int, float)) or not isinstance(hum, (int, float)):
        return None
    return WeatherReading(temp=temp, hum=hum)


class WeatherCache:
    """Weather lookups backed by the weather_cache table.

    Example usage:
        cache = WeatherCache(session, StaticLocationProvider(-23.55, -46.63))
        reading = await cache.reading_for_timestamp(ts)
    """

    def __init__(self, session: AsyncSession, location: LocationProvider | None = None):
        self.session = session
        self.location = location

    async def get_cached(self, key: str) -> WeatherCacheRecord | None:
        row = await self.session.get(WeatherCacheRow, key)
        if row is None:
            return None
        return WeatherCacheRecord.model_validate(row)

    async def daily_series(self, day: date | str, lat: float, lon: float) -> WeatherCacheRecord:
        """Cached day for (lat, lon), fetching and storing it when missing or empty.

        Raises WeatherFetchError when the upstream call fails.
        """
        date_key = day.isoformat() if isinstance(day, date) else day
        lat, lon = round_coord(lat), round_coord(lon)
        key = cache_key(date_key, lat, lon)
        cached = await self.get_cached(key)
        if cached is not None and cached.is_complete:
            WEATHER_CACHE_LOOKUPS.labels(outcome="hit").inc()
            return cached

        WEATHER_CACHE_LOOKUPS.labels(outcome="miss").inc()
        try:
            data = await fetch_hourly_day(lat, lon, date_key)
            hours, temps, hums = parse_hourly(data)
        except WeatherFetchError:
            WEATHER_CACHE_LOOKUPS.labels(outcome="error").inc()
            raise
        min_temp, max_temp = _extrema(temps)
        min_hum, max_hum = _extrema(hums)
        record = WeatherCacheRecord(
            key=key,
            date_key=date_key,
            lat=lat,
            lon=lon,
            hours=hours,
            temps=temps,
            hums=hums,
            min_temp=min_temp,
            max_temp=max_temp,
            min_hum=min_hum,
            max_hum=max_hum,
            fetched_at=now_ms(),
        )
        await self.session.merge(WeatherCacheRow(**record.model_dump()))
        await self.session.flush()
        logger.debug("Cached weather %s (%d hours)", key, len(hours))
        return record

    async def reading_for_timestamp(self, ts: int) -> WeatherReading | None:
        """Location -> day containing ts -> nearest hourly sample. None when location or data is missing."""
        loc = await resolve_location(self.location)
        if loc is None:
            return None
        record = await self.daily_series(date_key_for(ts), loc.lat, loc.lon)
        hit = nearest_reading(record, ts)
        if hit is None:
            return None
        return hit.model_copy(update={"lat": record.lat, "lon": record.lon})
