from sqlalchemy import JSON, BigInteger, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from diary.db.base import Base


class Event(Base):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    ts: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)  # epoch ms
    date_key: Mapped[str] = mapped_column(String(10), nullable=False, index=True)  # YYYY-MM-DD, local
    amount: Mapped[int | None] = mapped_column(Integer, nullable=True)  # ml (water, isotonic)
    subtype: Mapped[str | None] = mapped_column(String(32), nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    level: Mapped[int | None] = mapped_column(Integer, nullable=True)  # mg/dL
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)  # minutes in the sun
    weather: Mapped[dict | None] = mapped_column(JSON, nullable=True)
