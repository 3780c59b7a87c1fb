"""Pydantic schemas for derived DAY/NIGHT cycles and their statistics."""

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Id of the single synthetic cycle returned for an empty log
VIRTUAL_CYCLE_ID = "virtual-now"


class CyclePhase(str, enum.Enum):
    DAY = "DAY"
    NIGHT = "NIGHT"


class Cycle(BaseModel):
    """Span between two boundary events. end_ts None means the cycle is still open.

    Boundary events are referenced by id only; cycles are rebuilt from the store on every read.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    type: CyclePhase
    start_ts: int
    end_ts: int | None = None
    start_event_id: str | None = None
    end_event_id: str | None = None


class CycleStats(BaseModel):
    """Summary of the events inside one cycle. Phase-specific counters are None for the other phase."""

    water_ml: int = 0
    urinate_count: int = 0
    glicemia_count: int = 0
    glicemia_levels: list[int] = []
    sol_count: int = 0
    sol_minutes: int = 0
    wake_count: int | None = None  # NIGHT only
    food_count: int | None = None  # DAY only
    exercised: bool | None = None  # DAY only


class CycleBoundaryUpdate(BaseModel):
    """New timestamps for the cycle's boundary events. Omitted fields are left as they are."""

    start_ts: int | None = Field(default=None, ge=0)
    end_ts: int | None = Field(default=None, ge=0)


class CycleView(BaseModel):
    """Selected cycle with its stats, boundary events and the events inside it."""

    index: int
    total: int
    has_previous: bool
    has_next: bool
    cycle: Cycle
    stats: CycleStats
    start_event: dict[str, Any] | None = None
    end_event: dict[str, Any] | None = None
    events: list[dict[str, Any]] = []
