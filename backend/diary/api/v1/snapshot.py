"""Snapshot API: export the whole diary as JSON and import it back (upsert)."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from diary.core.errors import InvalidInputError
from diary.db.session import get_db
from diary.schemas.snapshot import ImportResult, Snapshot
from diary.services.snapshot import export_snapshot, import_snapshot

router = APIRouter(prefix="/snapshot", tags=["snapshot"])


@router.get("", response_model=Snapshot, summary="Export events, settings and weather cache")
async def export_diary(
    session: Annotated[AsyncSession, Depends(get_db)],
) -> Snapshot:
    return await export_snapshot(session)


@router.post(
    "",
    response_model=ImportResult,
    summary="Import a snapshot",
    responses={422: {"description": "Invalid snapshot"}},
)
async def import_diary(
    session: Annotated[AsyncSession, Depends(get_db)],
    body: Snapshot,
) -> ImportResult:
    """Upsert every record by primary key; records not in the snapshot are kept."""
    try:
        result = await import_snapshot(session, body)
    except InvalidInputError as e:
        await session.rollback()
        raise HTTPException(status_code=422, detail=str(e))
    await session.commit()
    return result
