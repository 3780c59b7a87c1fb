"""Tests for the weather cache, the Open-Meteo client and location resolution."""

import asyncio

import httpx
import pytest

from conftest import WEATHER_DAY, ms, open_meteo_day
from diary.core.errors import WeatherFetchError
from diary.schemas.weather import WeatherCacheRecord
from diary.services.http_client import close_http_client, init_http_client
from diary.services.location import (
    LocationProvider,
    StaticLocationProvider,
    UnavailableLocationProvider,
    resolve_location,
)
from diary.services.weather_cache import WeatherCache, cache_key, nearest_reading
from diary.services.weather_client import parse_hourly


def _record(hours, temps, hums):
    return WeatherCacheRecord(
        key="k", date_key=WEATHER_DAY, lat=0, lon=0, hours=hours, temps=temps, hums=hums, fetched_at=0
    )


def test_nearest_reading_picks_closest_hour():
    record = _record([0, 3_600_000, 7_200_000], [10.0, 11.0, 12.0], [50.0, 60.0, 70.0])
    hit = nearest_reading(record, 4_000_000)
    assert (hit.temp, hit.hum) == (11.0, 60.0)


def test_nearest_reading_first_wins_on_tie():
    record = _record([0, 3_600_000], [10.0, 11.0], [50.0, 60.0])
    assert nearest_reading(record, 1_800_000).temp == 10.0


def test_nearest_reading_missing_data():
    assert nearest_reading(None, 0) is None
    assert nearest_reading(_record([], [], []), 0) is None
    assert nearest_reading(_record([0], [None], [50.0]), 0) is None


def test_parse_hourly_applies_utc_offset():
    data = open_meteo_day()
    data["utc_offset_seconds"] = -10800
    hours, temps, hums = parse_hourly(data)
    assert len(hours) == 24
    assert hours[0] == ms(f"{WEATHER_DAY}T03:00:00")
    assert temps[0] == 15.0
    assert hums[23] == 57.0


def test_parse_hourly_drops_bad_times():
    data = {"hourly": {"time": ["garbage", f"{WEATHER_DAY}T01:00"], "temperature_2m": [1, 2], "relative_humidity_2m": [3, "x"]}}
    hours, temps, hums = parse_hourly(data)
    assert hours == [ms(f"{WEATHER_DAY}T01:00:00")]
    assert temps == [2.0]
    assert hums == [None]


def test_cache_key_format():
    assert cache_key("2026-10-19", -23.551, -46.633) == "2026-10-19:-23.551:-46.633"


@pytest.mark.asyncio
async def test_daily_series_served_from_cache(session, weather_requests):
    cache = WeatherCache(session)
    first = await cache.daily_series(WEATHER_DAY, -23.55, -46.63)
    second = await cache.daily_series(WEATHER_DAY, -23.55, -46.63)
    assert len(weather_requests) == 1
    assert first.hours == second.hours
    assert second.min_temp == 15.0
    assert second.max_temp == 26.5
    assert second.min_hum == 57.0
    assert second.max_hum == 80.0
    params = weather_requests[0].url.params
    assert params["start_date"] == WEATHER_DAY
    assert params["end_date"] == WEATHER_DAY
    assert params["timezone"] == "auto"


@pytest.mark.asyncio
async def test_nearby_positions_share_a_cache_row(session, weather_requests):
    cache = WeatherCache(session)
    await cache.daily_series(WEATHER_DAY, -23.55012, -46.63004)
    await cache.daily_series(WEATHER_DAY, -23.54998, -46.62996)
    assert len(weather_requests) == 1


@pytest.mark.asyncio
async def test_empty_cached_day_is_refetched(session, weather_requests):
    cache = WeatherCache(session)
    empty = {"hourly": {"time": [], "temperature_2m": [], "relative_humidity_2m": []}}
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=empty if len(calls) == 1 else open_meteo_day())

    await close_http_client()
    init_http_client(transport=httpx.MockTransport(handler))
    first = await cache.daily_series(WEATHER_DAY, 1.0, 2.0)
    assert not first.is_complete
    second = await cache.daily_series(WEATHER_DAY, 1.0, 2.0)
    assert second.is_complete
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_upstream_error_raises(session):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    await close_http_client()
    init_http_client(transport=httpx.MockTransport(handler))
    try:
        with pytest.raises(WeatherFetchError):
            await WeatherCache(session).daily_series(WEATHER_DAY, 1.0, 2.0)
    finally:
        await close_http_client()


@pytest.mark.asyncio
async def test_transport_error_raises(session):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    await close_http_client()
    init_http_client(transport=httpx.MockTransport(handler))
    try:
        with pytest.raises(WeatherFetchError):
            await WeatherCache(session).daily_series(WEATHER_DAY, 1.0, 2.0)
    finally:
        await close_http_client()


@pytest.mark.asyncio
async def test_reading_without_location(session, weather_requests):
    cache = WeatherCache(session, UnavailableLocationProvider())
    assert await cache.reading_for_timestamp(ms(f"{WEATHER_DAY}T03:00:00")) is None
    assert weather_requests == []


@pytest.mark.asyncio
async def test_reading_for_timestamp(session, weather_requests):
    cache = WeatherCache(session, StaticLocationProvider(-23.55, -46.63))
    hit = await cache.reading_for_timestamp(ms(f"{WEATHER_DAY}T22:40:00"))
    assert (hit.temp, hit.hum) == (26.5, 57.0)
    assert (hit.lat, hit.lon) == (-23.55, -46.63)


class _SlowProvider(LocationProvider):
    async def current_position(self):
        await asyncio.sleep(5)
        return 0.0, 0.0


@pytest.mark.asyncio
async def test_resolve_location():
    loc = await resolve_location(StaticLocationProvider(-23.55049, -46.63351))
    assert (loc.lat, loc.lon) == (-23.55, -46.634)
    assert await resolve_location(None) is None
    assert await resolve_location(UnavailableLocationProvider()) is None
    assert await resolve_location(_SlowProvider(), timeout=0.01) is None


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"hourly": "nope"},
        {"hourly": {"time": 5}},
        {"hourly": {"time": [f"{WEATHER_DAY}T00:00"], "temperature_2m": {"a": 1}}},
    ],
)
def test_parse_hourly_rejects_malformed_payload(data):
    with pytest.raises(WeatherFetchError):
        parse_hourly(data)


@pytest.mark.asyncio
async def test_malformed_body_raises_and_is_not_cached(session):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"hourly": {"time": 5}})

    await close_http_client()
    init_http_client(transport=httpx.MockTransport(handler))
    try:
        cache = WeatherCache(session)
        with pytest.raises(WeatherFetchError):
            await cache.daily_series(WEATHER_DAY, 1.0, 2.0)
        assert await cache.get_cached(cache_key(WEATHER_DAY, 1.0, 2.0)) is None
    finally:
        await close_http_client()
