from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./health_diary.db"
    weather_api_url: str = "https://api.open-meteo.com/v1/forecast"
    weather_request_timeout_seconds: float = 15.0
    location_timeout_seconds: float = 8.0
    # Fallback position when the client does not report one (X-Latitude / X-Longitude headers)
    default_latitude: float | None = None
    default_longitude: float | None = None
    # IANA zone used for date_key; empty means the process local time
    diary_timezone: str = ""
    cors_origins: str = "http://localhost:5173,http://localhost:4173"
    enable_hsts: bool = False  # Set True in production behind HTTPS
    debug: bool = False
    default_rate_limit: str = "200/minute"

    @property
    def sync_database_url(self) -> str:
        """Database URL for sync drivers (Alembic)."""
        return self.database_url.replace("+asyncpg", "", 1).replace("+aiosqlite", "", 1)

    @property
    def default_location(self) -> tuple[float, float] | None:
        """Configured fallback (lat, lon), or None when either coordinate is unset."""
        if self.default_latitude is None or self.default_longitude is None:
            return None
        return self.default_latitude, self.default_longitude


settings = Settings()
