"""Cycles API: derived DAY/NIGHT cycles, navigation, and cycle-level edits."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from diary.api.deps import get_event_store
from diary.core.clock import now_ms
from diary.schemas.cycle import Cycle, CycleBoundaryUpdate, CycleView
from diary.schemas.event import event_to_dict
from diary.services import actions
from diary.services.cycle_stats import compute_cycle_stats, cycle_events
from diary.services.cycles import build_cycles
from diary.services.event_store import EventStore
from diary.services.navigation import NavigationMove, load_navigation

router = APIRouter(prefix="/cycles", tags=["cycles"])


async def _cycle_at(store: EventStore, index: int) -> Cycle:
    cycles = build_cycles(await store.list_all())
    if index < 0 or index >= len(cycles):
        raise HTTPException(status_code=404, detail="Cycle not found")
    return cycles[index]


@router.get("", response_model=list[Cycle], summary="List cycles")
async def list_cycles(
    store: Annotated[EventStore, Depends(get_event_store)],
) -> list[Cycle]:
    """All cycles in chronological order; the last one is open."""
    return build_cycles(await store.list_all())


@router.get("/current", response_model=CycleView, summary="Selected cycle with stats")
async def current_cycle(
    store: Annotated[EventStore, Depends(get_event_store)],
    index: int | None = Query(default=None, description="Selected index; omitted means latest"),
    move: NavigationMove = NavigationMove.stay,
) -> CycleView:
    """Recompute cycles, clamp `index`, apply `move`, and return the selected cycle."""
    now = now_ms()
    state = await load_navigation(store, index=index, move=move, now_ms=now)
    cycle = state.current
    events = await cycle_events(store, cycle, now_ms=now)
    by_id = {e.id: e for e in events}
    start_event = by_id.get(cycle.start_event_id) if cycle.start_event_id else None
    if cycle.start_event_id and start_event is None:
        start_event = await store.get(cycle.start_event_id)
    end_event = by_id.get(cycle.end_event_id) if cycle.end_event_id else None
    if cycle.end_event_id and end_event is None:
        end_event = await store.get(cycle.end_event_id)
    return CycleView(
        index=state.index,
        total=len(state.cycles),
        has_previous=state.has_previous,
        has_next=state.has_next,
        cycle=cycle,
        stats=compute_cycle_stats(cycle, events),
        start_event=event_to_dict(start_event) if start_event else None,
        end_event=event_to_dict(end_event) if end_event else None,
        events=[event_to_dict(e) for e in events],
    )


@router.patch(
    "/{index}",
    response_model=list[dict],
    summary="Move cycle boundaries",
    responses={404: {"description": "Cycle not found"}},
)
async def edit_cycle(
    store: Annotated[EventStore, Depends(get_event_store)],
    index: int,
    body: CycleBoundaryUpdate,
) -> list[dict]:
    """Update the ts of the cycle's start/end events; synthetic boundaries are skipped."""
    cycle = await _cycle_at(store, index)
    updated = await actions.edit_cycle_boundaries(store, cycle, start_ts=body.start_ts, end_ts=body.end_ts)
    await store.session.commit()
    return [event_to_dict(e) for e in updated]


@router.delete(
    "/{index}",
    response_model=dict,
    summary="Delete a cycle",
    responses={404: {"description": "Cycle not found"}},
)
async def delete_cycle(
    store: Annotated[EventStore, Depends(get_event_store)],
    index: int,
) -> dict:
    """Delete the cycle's boundary events; the neighbouring cycles merge on the next read."""
    cycle = await _cycle_at(store, index)
    removed = await actions.delete_cycle(store, cycle)
    await store.session.commit()
    return {"deleted": removed}
