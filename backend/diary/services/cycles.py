"""
DAY/NIGHT cycle derivation.

Rules:
- NIGHT runs from sleep_start to sleep_end; DAY from sleep_end to the next sleep_start.
- Exactly one cycle is open at any time (the last one, end_ts None).
- With no events at all the current cycle is a synthetic DAY starting now.
- A second sleep_start without a sleep_end closes the running NIGHT with no end event
  and opens a new NIGHT.
- A sleep_end while already in DAY restarts the DAY segment at that event without
  emitting a closed cycle.
- wake and every other type never change the phase.
"""
import uuid
from collections.abc import Sequence

from diary.core.clock import now_ms as _now_ms
from diary.schemas.cycle import VIRTUAL_CYCLE_ID, Cycle, CyclePhase
from diary.schemas.event import BOUNDARY_TYPES, EventRecord


def _new_id() -> str:
    return str(uuid.uuid4())


def _seed(events: Sequence[EventRecord]) -> tuple[CyclePhase, int, str | None, int | None]:
    """Initial (phase, start_ts, start_event_id, seed_index) for a non-empty event list.

    seed_index is set only for a seeding sleep_start, which the scan must skip so it does not
    close a zero-length NIGHT on itself. A seeding sleep_end is rescanned harmlessly.
    Ties on ts follow input order.
    """
    first_start = next(((i, e) for i, e in enumerate(events) if e.type == "sleep_start"), None)
    first_end = next(((i, e) for i, e in enumerate(events) if e.type == "sleep_end"), None)
    if first_start is not None and (first_end is None or first_start[0] < first_end[0]):
        i, e = first_start
        return CyclePhase.NIGHT, e.ts, e.id, i
    if first_end is not None:
        e = first_end[1]
        return CyclePhase.DAY, e.ts, e.id, None
    return CyclePhase.DAY, events[0].ts, None, None


def build_cycles(events: Sequence[EventRecord], now_ms: int | None = None) -> list[Cycle]:
    """Derive cycles from events already ordered by ts (ties keep input order)."""
    if not events:
        return [
            Cycle(
                id=VIRTUAL_CYCLE_ID,
                type=CyclePhase.DAY,
                start_ts=now_ms if now_ms is not None else _now_ms(),
            )
        ]

    cycles: list[Cycle] = []
    phase, start_ts, start_event_id, seed_index = _seed(events)

    for i, e in enumerate(events):
        if i == seed_index or e.type not in BOUNDARY_TYPES:
            continue
        if e.type == "sleep_start":
            if phase == CyclePhase.DAY:
                if start_ts is not None:
                    cycles.append(
                        Cycle(
                            id=_new_id(),
                            type=CyclePhase.DAY,
                            start_ts=start_ts,
                            end_ts=e.ts,
                            start_event_id=start_event_id,
                            end_event_id=e.id,
                        )
                    )
            else:
                # Sleep restarted without waking up: close with no end event
                cycles.append(
                    Cycle(
                        id=_new_id(),
                        type=CyclePhase.NIGHT,
                        start_ts=start_ts,
                        end_ts=e.ts,
                        start_event_id=start_event_id,
                        end_event_id=None,
                    )
                )
            phase, start_ts, start_event_id = CyclePhase.NIGHT, e.ts, e.id
        elif e.type == "sleep_end":
            if phase == CyclePhase.NIGHT:
                cycles.append(
                    Cycle(
                        id=_new_id(),
                        type=CyclePhase.NIGHT,
                        start_ts=start_ts,
                        end_ts=e.ts,
                        start_event_id=start_event_id,
                        end_event_id=e.id,
                    )
                )
            phase, start_ts, start_event_id = CyclePhase.DAY, e.ts, e.id

    cycles.append(
        Cycle(
            id=_new_id(),
            type=phase,
            start_ts=start_ts,
            end_ts=None,
            start_event_id=start_event_id,
            end_event_id=None,
        )
    )
    return cycles
