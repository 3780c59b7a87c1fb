"""Epoch-millisecond helpers and the local calendar day used for date_key."""

import time
from datetime import date, datetime, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo

from diary.config import settings


def now_ms() -> int:
    return int(time.time() * 1000)


@lru_cache(maxsize=8)
def _zone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def local_datetime(ts: int) -> datetime:
    """Aware datetime for ts in DIARY_TIMEZONE, or in the process local zone when unset."""
    if settings.diary_timezone:
        return datetime.fromtimestamp(ts / 1000, tz=_zone(settings.diary_timezone))
    return datetime.fromtimestamp(ts / 1000).astimezone()


def local_date(ts: int) -> date:
    return local_datetime(ts).date()


def date_key_for(ts: int) -> str:
    """YYYY-MM-DD of ts in local time."""
    return local_date(ts).isoformat()
