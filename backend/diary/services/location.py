"""
Device location for weather lookups.
A provider yields (lat, lon) or raises LocationUnavailable; resolve_location bounds the wait
and turns every failure into None so callers simply skip weather.
"""
import asyncio
import logging

from diary.config import settings
from diary.core.errors import LocationUnavailable
from diary.schemas.weather import Location

logger = logging.getLogger(__name__)

COORD_DECIMALS = 3


class LocationProvider:
    async def current_position(self) -> tuple[float, float]:
        raise NotImplementedError


class StaticLocationProvider(LocationProvider):
    """Position reported by the client (or configured default)."""

    def __init__(self, lat: float, lon: float):
        self.lat = lat
        self.lon = lon

    async def current_position(self) -> tuple[float, float]:
        return self.lat, self.lon


class UnavailableLocationProvider(LocationProvider):
    """No position: permission denied or nothing reported."""

    async def current_position(self) -> tuple[float, float]:
        raise LocationUnavailable("No location available")


def round_coord(value: float) -> float:
    return round(float(value), COORD_DECIMALS)


async def resolve_location(
    provider: LocationProvider | None,
    timeout: float | None = None,
) -> Location | None:
    """Return the rounded position, or None on denial, timeout or a missing provider. Never raises."""
    if provider is None:
        return None
    timeout = settings.location_timeout_seconds if timeout is None else timeout
    try:
        lat, lon = await asyncio.wait_for(provider.current_position(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.info("Location request timed out after %.1fs", timeout)
        return None
    except LocationUnavailable as e:
        logger.info("Location unavailable: %s", e)
        return None
    return Location(lat=round_coord(lat), lon=round_coord(lon))
