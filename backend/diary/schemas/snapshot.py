"""Pydantic schema for full-diary export/import."""

from typing import Any

from pydantic import BaseModel


class SettingItem(BaseModel):
    key: str
    value: Any = None


class Snapshot(BaseModel):
    """All three collections; import upserts each item by primary key."""

    events: list[dict[str, Any]] = []
    settings: list[SettingItem] = []
    weather_cache: list[dict[str, Any]] = []


class ImportResult(BaseModel):
    events: int
    settings: int
    weather_cache: int
