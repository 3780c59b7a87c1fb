"""Initial schema: events, settings, weather_cache

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("ts", sa.BigInteger(), nullable=False),
        sa.Column("date_key", sa.String(10), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=True),
        sa.Column("subtype", sa.String(32), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("level", sa.Integer(), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("weather", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_events_ts", "events", ["ts"], unique=False)
    op.create_index("ix_events_date_key", "events", ["date_key"], unique=False)

    op.create_table(
        "settings",
        sa.Column("key", sa.String(128), nullable=False),
        sa.Column("value", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("key"),
    )

    op.create_table(
        "weather_cache",
        sa.Column("key", sa.String(64), nullable=False),
        sa.Column("date_key", sa.String(10), nullable=False),
        sa.Column("lat", sa.Float(), nullable=False),
        sa.Column("lon", sa.Float(), nullable=False),
        sa.Column("hours", sa.JSON(), nullable=False),
        sa.Column("temps", sa.JSON(), nullable=False),
        sa.Column("hums", sa.JSON(), nullable=False),
        sa.Column("min_temp", sa.Float(), nullable=True),
        sa.Column("max_temp", sa.Float(), nullable=True),
        sa.Column("min_hum", sa.Float(), nullable=True),
        sa.Column("max_hum", sa.Float(), nullable=True),
        sa.Column("fetched_at", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("key"),
    )
    op.create_index("ix_weather_cache_date_key", "weather_cache", ["date_key"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_weather_cache_date_key", table_name="weather_cache")
    op.drop_table("weather_cache")
    op.drop_table("settings")
    op.drop_index("ix_events_date_key", table_name="events")
    op.drop_index("ix_events_ts", table_name="events")
    op.drop_table("events")
