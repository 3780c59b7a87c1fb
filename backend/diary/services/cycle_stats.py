"""Per-cycle summary metrics: hydration, counts, glucose readings, sun exposure."""

from collections.abc import Sequence

from diary.core.clock import now_ms as _now_ms
from diary.schemas.cycle import Cycle, CyclePhase, CycleStats
from diary.schemas.event import EventRecord
from diary.services.event_store import EventStore


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def compute_cycle_stats(cycle: Cycle, events: Sequence[EventRecord]) -> CycleStats:
    """Aggregate events already bounded to the cycle span."""
    water_ml = sum(e.amount for e in events if e.type == "water" and _is_number(e.amount))
    urinate_count = sum(1 for e in events if e.type == "urinate")
    wake_count = sum(1 for e in events if e.type == "wake")
    food_count = sum(1 for e in events if e.type == "food")
    exercised = any(e.type == "exercise" for e in events)
    glicemia = [e for e in events if e.type == "glicemia"]
    sol = [e for e in events if e.type == "sol"]

    is_night = cycle.type == CyclePhase.NIGHT
    return CycleStats(
        water_ml=water_ml,
        urinate_count=urinate_count,
        glicemia_count=len(glicemia),
        glicemia_levels=[e.level for e in glicemia if e.level],
        sol_count=len(sol),
        sol_minutes=sum(int(e.duration) for e in sol if e.duration),
        wake_count=wake_count if is_night else None,
        food_count=None if is_night else food_count,
        exercised=None if is_night else exercised,
    )


async def cycle_events(store: EventStore, cycle: Cycle, now_ms: int | None = None) -> list[EventRecord]:
    """Fresh range query for [start_ts, end_ts or now]."""
    end_ts = cycle.end_ts if cycle.end_ts is not None else (now_ms if now_ms is not None else _now_ms())
    return await store.list_between(cycle.start_ts, end_ts)


async def cycle_stats(store: EventStore, cycle: Cycle, now_ms: int | None = None) -> CycleStats:
    """Stats for a cycle, recomputed from the store on every call."""
    return compute_cycle_stats(cycle, await cycle_events(store, cycle, now_ms))
