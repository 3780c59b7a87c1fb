"""FastAPI dependencies: client-reported location and the request-scoped event store."""

import logging
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from diary.config import settings
from diary.db.session import get_db
from diary.services.event_store import EventStore
from diary.services.location import LocationProvider, StaticLocationProvider, UnavailableLocationProvider
from diary.services.weather_cache import WeatherCache

logger = logging.getLogger(__name__)


def get_location_provider(request: Request) -> LocationProvider:
    """Position from X-Latitude / X-Longitude headers, else the configured default, else none."""
    lat_raw = request.headers.get("X-Latitude")
    lon_raw = request.headers.get("X-Longitude")
    if lat_raw and lon_raw:
        try:
            return StaticLocationProvider(float(lat_raw), float(lon_raw))
        except ValueError:
            logger.info("Ignoring malformed location headers lat=%r lon=%r", lat_raw, lon_raw)
    default = settings.default_location
    if default is not None:
        return StaticLocationProvider(*default)
    return UnavailableLocationProvider()


async def get_event_store(
    session: Annotated[AsyncSession, Depends(get_db)],
    location: Annotated[LocationProvider, Depends(get_location_provider)],
) -> EventStore:
    return EventStore(session, weather=WeatherCache(session, location))
