"""
Quick actions: the one-tap buttons of the diary and cycle-level edits.

Keeps the phase guards of the sleep buttons (no sleep_start while asleep, no sleep_end while
awake) and logs an implicit wake when the user gets up at night to urinate.
"""
import logging
from collections.abc import Sequence

from diary.core.clock import now_ms as _now_ms
from diary.core.errors import InvalidInputError, PhaseConflictError
from diary.schemas.cycle import Cycle, CyclePhase
from diary.schemas.event import (
    EventRecord,
    SleepEndEvent,
    SleepStartEvent,
    UrinateEvent,
    WakeEvent,
    WaterEvent,
)
from diary.services.cycles import build_cycles
from diary.services.event_store import EventStore

logger = logging.getLogger(__name__)

WATER_PRESETS: dict[str, int] = {
    "510ml": 510,
    "700ml": 700,
}
RECENT_WAKE_MINUTES = 10
# Implicit wake is logged this long before the urinate event
IMPLICIT_WAKE_OFFSET_MS = 1000


def is_night(cycles: Sequence[Cycle], now_ms: int) -> bool:
    """True when the most recent cycle is NIGHT and still open (or spans now)."""
    if not cycles:
        return False
    current = cycles[-1]
    if current.type != CyclePhase.NIGHT:
        return False
    if current.end_ts is None:
        return True
    return current.start_ts <= now_ms <= current.end_ts


async def currently_night(store: EventStore, now_ms: int) -> bool:
    return is_night(build_cycles(await store.list_all(), now_ms=now_ms), now_ms)


async def has_recent_wake(store: EventStore, now_ms: int, within_minutes: int = RECENT_WAKE_MINUTES) -> bool:
    cutoff = now_ms - within_minutes * 60 * 1000
    events = await store.list_between(cutoff, now_ms)
    return any(e.type == "wake" for e in events)


async def start_sleep(store: EventStore, now_ms: int | None = None) -> EventRecord:
    """Log sleep_start now. Raises PhaseConflictError when a NIGHT cycle is already running."""
    ts = now_ms if now_ms is not None else _now_ms()
    if await currently_night(store, ts):
        raise PhaseConflictError("Already in a NIGHT cycle; end the current sleep first")
    return await store.append(SleepStartEvent(ts=ts))


async def end_sleep(store: EventStore, now_ms: int | None = None) -> EventRecord:
    """Log sleep_end now. Raises PhaseConflictError when no NIGHT cycle is running."""
    ts = now_ms if now_ms is not None else _now_ms()
    if not await currently_night(store, ts):
        raise PhaseConflictError("Already in a DAY cycle; start a sleep first")
    return await store.append(SleepEndEvent(ts=ts))


async def log_urinate(store: EventStore, now_ms: int | None = None) -> list[EventRecord]:
    """Log urinate; at night, without a wake in the last 10 minutes, log a wake 1 s before it."""
    ts = now_ms if now_ms is not None else _now_ms()
    saved: list[EventRecord] = []
    if await currently_night(store, ts) and not await has_recent_wake(store, ts):
        logger.debug("Night-time urinate without recent wake; logging implicit wake")
        saved.append(await store.append(WakeEvent(ts=ts - IMPLICIT_WAKE_OFFSET_MS)))
    saved.append(await store.append(UrinateEvent(ts=ts)))
    return saved


async def log_water(store: EventStore, preset: str, now_ms: int | None = None) -> EventRecord:
    amount = WATER_PRESETS.get(preset)
    if amount is None:
        raise InvalidInputError(f"Unknown water preset: {preset}")
    ts = now_ms if now_ms is not None else _now_ms()
    return await store.append(WaterEvent(ts=ts, amount=amount, subtype=preset))


async def edit_cycle_boundaries(
    store: EventStore,
    cycle: Cycle,
    start_ts: int | None = None,
    end_ts: int | None = None,
) -> list[EventRecord]:
    """Move the cycle's boundary events. Synthetic boundaries (no event) are left alone."""
    updated: list[EventRecord] = []
    if start_ts is not None and cycle.start_event_id:
        event = await store.get(cycle.start_event_id)
        if event is not None:
            updated.append(await store.update(event.model_copy(update={"ts": start_ts})))
    if end_ts is not None and cycle.end_event_id:
        event = await store.get(cycle.end_event_id)
        if event is not None:
            updated.append(await store.update(event.model_copy(update={"ts": end_ts})))
    return updated


async def delete_cycle(store: EventStore, cycle: Cycle) -> list[str]:
    """Delete the boundary events of a cycle; returns the ids removed."""
    removed: list[str] = []
    for event_id in (cycle.start_event_id, cycle.end_event_id):
        if event_id:
            await store.delete(event_id)
            removed.append(event_id)
    return removed
