from diary.models.event import Event
from diary.models.weather_cache import WeatherCache
from diary.models.setting import Setting

__all__ = [
    "Event",
    "WeatherCache",
    "Setting",
]
