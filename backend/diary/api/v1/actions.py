"""Quick actions API: sleep buttons, night-time urinate, water presets."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from diary.api.deps import get_event_store
from diary.core.errors import InvalidInputError, PhaseConflictError
from diary.schemas.event import event_to_dict
from diary.services import actions
from diary.services.event_store import EventStore

router = APIRouter(prefix="/actions", tags=["actions"])


@router.post(
    "/sleep-start",
    status_code=201,
    response_model=dict,
    responses={409: {"description": "Already in a NIGHT cycle"}},
)
async def sleep_start(
    store: Annotated[EventStore, Depends(get_event_store)],
) -> dict:
    try:
        saved = await actions.start_sleep(store)
    except PhaseConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    await store.session.commit()
    return event_to_dict(saved)


@router.post(
    "/sleep-end",
    status_code=201,
    response_model=dict,
    responses={409: {"description": "Already in a DAY cycle"}},
)
async def sleep_end(
    store: Annotated[EventStore, Depends(get_event_store)],
) -> dict:
    try:
        saved = await actions.end_sleep(store)
    except PhaseConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    await store.session.commit()
    return event_to_dict(saved)


@router.post("/urinate", status_code=201, response_model=list[dict])
async def urinate(
    store: Annotated[EventStore, Depends(get_event_store)],
) -> list[dict]:
    """Log urinate; returns the implicit wake too when one was added."""
    saved = await actions.log_urinate(store)
    await store.session.commit()
    return [event_to_dict(e) for e in saved]


@router.post(
    "/water/{preset}",
    status_code=201,
    response_model=dict,
    responses={422: {"description": "Unknown preset"}},
)
async def water(
    store: Annotated[EventStore, Depends(get_event_store)],
    preset: str,
) -> dict:
    try:
        saved = await actions.log_water(store, preset)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    await store.session.commit()
    return event_to_dict(saved)
