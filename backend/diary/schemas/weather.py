"""Pydantic schemas for the per-day weather cache and resolved locations."""

from pydantic import BaseModel, ConfigDict


class Location(BaseModel):
    """Device position, rounded to 3 decimals (~100 m) so nearby fixes share a cache key."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float


class WeatherCacheRecord(BaseModel):
    """One calendar day of hourly temperature/humidity for one location."""

    model_config = ConfigDict(from_attributes=True)

    key: str
    date_key: str
    lat: float
    lon: float
    hours: list[int]  # epoch ms, ascending
    temps: list[float | None]
    hums: list[float | None]
    min_temp: float | None = None
    max_temp: float | None = None
    min_hum: float | None = None
    max_hum: float | None = None
    fetched_at: int

    @property
    def is_complete(self) -> bool:
        """A record with data in all three series is never refetched."""
        return bool(self.hours and self.temps and self.hums)
