from sqlalchemy import JSON, BigInteger, Float, String
from sqlalchemy.orm import Mapped, mapped_column
from diary.db.base import Base


class WeatherCache(Base):
    __tablename__ = "weather_cache"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)  # "{date_key}:{lat}:{lon}"
    date_key: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lon: Mapped[float] = mapped_column(Float, nullable=False)
    hours: Mapped[list] = mapped_column(JSON, nullable=False)  # epoch ms, ascending
    temps: Mapped[list] = mapped_column(JSON, nullable=False)  # °C
    hums: Mapped[list] = mapped_column(JSON, nullable=False)  # %
    min_temp: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_temp: Mapped[float | None] = mapped_column(Float, nullable=True)
    min_hum: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_hum: Mapped[float | None] = mapped_column(Float, nullable=True)
    fetched_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
