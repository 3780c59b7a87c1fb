"""Tests for DAY/NIGHT cycle derivation."""

from diary.schemas.cycle import VIRTUAL_CYCLE_ID, CyclePhase
from diary.schemas.event import (
    FoodEvent,
    SleepEndEvent,
    SleepStartEvent,
    UrinateEvent,
    WakeEvent,
    WaterEvent,
)
from diary.services.cycles import build_cycles

T1 = 1_760_000_000_000
HOUR = 3_600_000


def _boundaries(cycles):
    return [(c.type, c.start_ts, c.end_ts) for c in cycles]


def _assert_contiguous(cycles):
    for prev, nxt in zip(cycles, cycles[1:]):
        assert prev.end_ts == nxt.start_ts
    assert cycles[-1].end_ts is None


def test_empty_log_yields_single_virtual_day():
    cycles = build_cycles([], now_ms=T1)
    assert len(cycles) == 1
    c = cycles[0]
    assert c.id == VIRTUAL_CYCLE_ID
    assert c.type == CyclePhase.DAY
    assert c.start_ts == T1
    assert c.end_ts is None
    assert c.start_event_id is None and c.end_event_id is None


def test_empty_log_starts_now_by_default():
    import time

    before = int(time.time() * 1000)
    cycles = build_cycles([])
    after = int(time.time() * 1000)
    assert before <= cycles[0].start_ts <= after


def test_night_day_night():
    t2, t3 = T1 + 8 * HOUR, T1 + 24 * HOUR
    events = [
        SleepStartEvent(id="s1", ts=T1),
        SleepEndEvent(id="e1", ts=t2),
        SleepStartEvent(id="s2", ts=t3),
    ]
    cycles = build_cycles(events)
    assert _boundaries(cycles) == [
        (CyclePhase.NIGHT, T1, t2),
        (CyclePhase.DAY, t2, t3),
        (CyclePhase.NIGHT, t3, None),
    ]
    assert (cycles[0].start_event_id, cycles[0].end_event_id) == ("s1", "e1")
    assert (cycles[1].start_event_id, cycles[1].end_event_id) == ("e1", "s2")
    assert (cycles[2].start_event_id, cycles[2].end_event_id) == ("s2", None)


def test_repeated_sleep_start_closes_night_without_end_event():
    t2 = T1 + HOUR
    events = [SleepStartEvent(id="s1", ts=T1), SleepStartEvent(id="s2", ts=t2)]
    cycles = build_cycles(events)
    assert _boundaries(cycles) == [
        (CyclePhase.NIGHT, T1, t2),
        (CyclePhase.NIGHT, t2, None),
    ]
    assert cycles[0].end_event_id is None
    assert cycles[1].start_event_id == "s2"


def test_sleep_end_first_seeds_day():
    t2 = T1 + 14 * HOUR
    events = [SleepEndEvent(id="e1", ts=T1), SleepStartEvent(id="s1", ts=t2)]
    cycles = build_cycles(events)
    assert _boundaries(cycles) == [
        (CyclePhase.DAY, T1, t2),
        (CyclePhase.NIGHT, t2, None),
    ]
    assert cycles[0].start_event_id == "e1"


def test_no_boundary_events_day_from_first_event():
    events = [WaterEvent(id="w", ts=T1, amount=510), FoodEvent(id="f", ts=T1 + HOUR)]
    cycles = build_cycles(events)
    assert _boundaries(cycles) == [(CyclePhase.DAY, T1, None)]
    assert cycles[0].start_event_id is None
    assert cycles[0].id != VIRTUAL_CYCLE_ID


def test_non_boundary_events_do_not_change_phase():
    events = [
        SleepStartEvent(id="s1", ts=T1),
        WakeEvent(id="k", ts=T1 + HOUR),
        UrinateEvent(id="u", ts=T1 + HOUR + 1000),
        SleepEndEvent(id="e1", ts=T1 + 7 * HOUR),
        FoodEvent(id="f", ts=T1 + 9 * HOUR),
    ]
    cycles = build_cycles(events)
    assert _boundaries(cycles) == [
        (CyclePhase.NIGHT, T1, T1 + 7 * HOUR),
        (CyclePhase.DAY, T1 + 7 * HOUR, None),
    ]


def test_stray_sleep_end_during_day_restarts_segment():
    t2, t3 = T1 + 2 * HOUR, T1 + 14 * HOUR
    events = [
        SleepEndEvent(id="e1", ts=T1),
        SleepEndEvent(id="e2", ts=t2),
        SleepStartEvent(id="s1", ts=t3),
    ]
    cycles = build_cycles(events)
    assert _boundaries(cycles) == [
        (CyclePhase.DAY, t2, t3),
        (CyclePhase.NIGHT, t3, None),
    ]
    assert cycles[0].start_event_id == "e2"


def test_events_before_first_boundary_are_outside_cycles():
    events = [
        WaterEvent(id="w", ts=T1, amount=700),
        SleepStartEvent(id="s1", ts=T1 + HOUR),
    ]
    cycles = build_cycles(events)
    assert _boundaries(cycles) == [(CyclePhase.NIGHT, T1 + HOUR, None)]


def test_long_history_is_contiguous():
    events = []
    ts = T1
    for day in range(5):
        events.append(SleepStartEvent(id=f"s{day}", ts=ts))
        events.append(WakeEvent(id=f"k{day}", ts=ts + 2 * HOUR))
        if day == 2:
            events.append(SleepStartEvent(id=f"r{day}", ts=ts + 3 * HOUR))
        events.append(SleepEndEvent(id=f"e{day}", ts=ts + 8 * HOUR))
        events.append(WaterEvent(id=f"w{day}", ts=ts + 10 * HOUR, amount=510))
        ts += 24 * HOUR
    cycles = build_cycles(events)
    _assert_contiguous(cycles)
    assert cycles[0].start_ts == T1
    types = [c.type for c in cycles]
    assert types.count(CyclePhase.NIGHT) == 6
    assert types[-1] == CyclePhase.DAY


def test_rebuild_is_structurally_identical():
    events = [
        SleepStartEvent(id="s1", ts=T1),
        SleepEndEvent(id="e1", ts=T1 + 8 * HOUR),
        SleepStartEvent(id="s2", ts=T1 + 24 * HOUR),
    ]
    first = build_cycles(events)
    second = build_cycles(events)
    assert _boundaries(first) == _boundaries(second)
    assert [c.id for c in first] != [c.id for c in second]


def test_sleep_start_and_end_at_same_ts_end_awake():
    events = [SleepStartEvent(id="s", ts=T1), SleepEndEvent(id="e", ts=T1)]
    cycles = build_cycles(events)
    assert _boundaries(cycles) == [
        (CyclePhase.NIGHT, T1, T1),
        (CyclePhase.DAY, T1, None),
    ]
    assert (cycles[0].start_event_id, cycles[0].end_event_id) == ("s", "e")
    assert cycles[1].start_event_id == "e"


def test_sleep_end_and_start_at_same_ts_end_asleep():
    events = [SleepEndEvent(id="e", ts=T1), SleepStartEvent(id="s", ts=T1)]
    cycles = build_cycles(events)
    assert _boundaries(cycles) == [
        (CyclePhase.DAY, T1, T1),
        (CyclePhase.NIGHT, T1, None),
    ]
    assert cycles[1].start_event_id == "s"
