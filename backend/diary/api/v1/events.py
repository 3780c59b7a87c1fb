"""Events API: append, edit, delete and list diary events."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response

from diary.api.deps import get_event_store
from diary.core.clock import now_ms
from diary.core.errors import InvalidInputError, NotFoundError
from diary.schemas.event import event_to_dict, parse_event
from diary.services.event_store import EventStore

router = APIRouter(prefix="/events", tags=["events"])


@router.post(
    "",
    status_code=201,
    response_model=dict,
    summary="Log an event",
    responses={422: {"description": "Invalid event"}},
)
async def create_event(
    store: Annotated[EventStore, Depends(get_event_store)],
    body: Annotated[dict[str, Any], Body()],
) -> dict:
    """Create an event. `ts` defaults to now; sleep_start/sleep_end/wake get weather when a location is known."""
    payload = dict(body)
    payload.setdefault("ts", now_ms())
    try:
        event = parse_event(payload)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    saved = await store.append(event)
    await store.session.commit()
    return event_to_dict(saved)


@router.get("", response_model=list[dict], summary="List events")
async def list_events(
    store: Annotated[EventStore, Depends(get_event_store)],
    from_ts: int | None = Query(default=None, ge=0),
    to_ts: int | None = Query(default=None, ge=0),
) -> list[dict]:
    """All events ordered by ts, or those within [from_ts, to_ts] when either bound is given."""
    if from_ts is None and to_ts is None:
        events = await store.list_all()
    else:
        events = await store.list_between(from_ts or 0, to_ts if to_ts is not None else now_ms())
    return [event_to_dict(e) for e in events]


@router.get("/{event_id}", response_model=dict, responses={404: {"description": "Event not found"}})
async def get_event(
    store: Annotated[EventStore, Depends(get_event_store)],
    event_id: str,
) -> dict:
    event = await store.get(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event_to_dict(event)


@router.put(
    "/{event_id}",
    response_model=dict,
    summary="Replace an event",
    responses={404: {"description": "Event not found"}, 422: {"description": "Invalid event"}},
)
async def replace_event(
    store: Annotated[EventStore, Depends(get_event_store)],
    event_id: str,
    body: Annotated[dict[str, Any], Body()],
) -> dict:
    """Full replace keyed by the path id; date_key is recomputed from ts."""
    try:
        event = parse_event({**body, "id": event_id})
        saved = await store.update(event)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Event not found")
    await store.session.commit()
    return event_to_dict(saved)


@router.delete("/{event_id}", status_code=204)
async def delete_event(
    store: Annotated[EventStore, Depends(get_event_store)],
    event_id: str,
) -> Response:
    """Delete an event. Unknown ids are a no-op."""
    await store.delete(event_id)
    await store.session.commit()
    return Response(status_code=204)
