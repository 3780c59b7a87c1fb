"""
Open-Meteo client: one calendar day of hourly temperature and relative humidity.
No API key. Times come back in the location's local zone (timezone=auto) and are
converted to epoch milliseconds using the returned utc_offset_seconds.
"""
import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from diary.config import settings
from diary.core.errors import WeatherFetchError
from diary.services.http_client import get_http_client

logger = logging.getLogger(__name__)

HOURLY_FIELDS = "temperature_2m,relative_humidity_2m"


def _log_response_error(method: str, url: str, response: httpx.Response) -> None:
    """Log HTTP error with a truncated body."""
    body = (response.text or "")[:500]
    logger.warning(
        "Open-Meteo %s %s -> %s body=%s",
        method,
        url,
        response.status_code,
        body,
    )


def _to_epoch_ms(local_iso: str, utc_offset_seconds: int) -> int | None:
    """Convert "2026-10-19T07:00" (location-local wall time) to epoch ms."""
    try:
        naive = datetime.fromisoformat(local_iso)
    except (TypeError, ValueError):
        return None
    if naive.tzinfo is not None:
        return int(naive.timestamp() * 1000)
    as_utc = naive.replace(tzinfo=timezone.utc)
    return int(as_utc.timestamp() * 1000) - utc_offset_seconds * 1000


def _numeric_or_none(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def parse_hourly(data: dict[str, Any]) -> tuple[list[int], list[float | None], list[float | None]]:
    """Return parallel (hours, temps, hums). Hours that cannot be parsed are dropped with their samples.

    Raises WeatherFetchError when the payload is not shaped like an Open-Meteo hourly response.
    """
    if not isinstance(data, dict):
        raise WeatherFetchError("Weather payload is not an object")
    hourly = data.get("hourly") or {}
    if not isinstance(hourly, dict):
        raise WeatherFetchError("Weather payload has a malformed \"hourly\" block")
    offset = data.get("utc_offset_seconds") or 0
    if isinstance(offset, bool) or not isinstance(offset, (int, float)):
        offset = 0
    times = hourly.get("time") or []
    temps_raw = hourly.get("temperature_2m") or []
    hums_raw = hourly.get("relative_humidity_2m") or []
    for name, series in (("time", times), ("temperature_2m", temps_raw), ("relative_humidity_2m", hums_raw)):
        if not isinstance(series, list):
            raise WeatherFetchError(f"Weather payload field hourly.{name} is not a list")
    hours: list[int] = []
    temps: list[float | None] = []
    hums: list[float | None] = []
    for i, t in enumerate(times):
        ms = _to_epoch_ms(t, int(offset)) if isinstance(t, str) else None
        if ms is None:
            continue
        hours.append(ms)
        temps.append(_numeric_or_none(temps_raw[i]) if i < len(temps_raw) else None)
        hums.append(_numeric_or_none(hums_raw[i]) if i < len(hums_raw) else None)
    return hours, temps, hums


async def fetch_hourly_day(lat: float, lon: float, date_key: str) -> dict[str, Any]:
    """GET hourly temperature/humidity for a single day. Raises WeatherFetchError on any failure."""
    client = get_http_client()
    url = settings.weather_api_url
    params = {
        "latitude": str(lat),
        "longitude": str(lon),
        "hourly": HOURLY_FIELDS,
        "timezone": "auto",
        "start_date": date_key,
        "end_date": date_key,
    }
    try:
        r = await client.get(url, params=params, timeout=settings.weather_request_timeout_seconds)
    except httpx.HTTPError as e:
        logger.warning("Open-Meteo GET %s failed: %s", url, e)
        raise WeatherFetchError(f"Weather request failed: {e}") from e
    if not r.is_success:
        _log_response_error("GET", url, r)
        raise WeatherFetchError(f"Weather API returned {r.status_code}")
    try:
        data = r.json() if r.content else {}
    except ValueError as e:
        raise WeatherFetchError("Weather API returned an unreadable body") from e
    if not isinstance(data, dict):
        raise WeatherFetchError("Weather API returned an unexpected payload")
    return data
