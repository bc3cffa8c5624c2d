from __future__ import annotations

from datetime import date, datetime, time

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.auth import require_user_id
from backend import repositories
from backend.schemas import CalendarEventCreate, CalendarEventPatch

router = APIRouter()


@router.get("/v1/calendar/events")
async def list_events(
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    user_id: str = Depends(require_user_id),
):
    if start and end and end < start:
        raise HTTPException(status_code=400, detail="End date must be after start date")
    start_iso = datetime.combine(start, time.min).isoformat() if start else None
    end_iso = datetime.combine(end, time.max).isoformat() if end else None
    items = await repositories.list_events(user_id, start_iso, end_iso)
    return {"items": items}


@router.post("/v1/calendar/events")
async def create_event(payload: CalendarEventCreate, user_id: str = Depends(require_user_id)):
    return await repositories.create_event(user_id, payload.model_dump())


@router.get("/v1/calendar/events/{event_id}")
async def get_event(event_id: str, user_id: str = Depends(require_user_id)):
    return await repositories.get_event(user_id, event_id)


@router.patch("/v1/calendar/events/{event_id}")
async def update_event(event_id: str, payload: CalendarEventPatch, user_id: str = Depends(require_user_id)):
    return await repositories.update_event(user_id, event_id, payload.model_dump(exclude_unset=True))


@router.delete("/v1/calendar/events/{event_id}")
async def delete_event(event_id: str, user_id: str = Depends(require_user_id)):
    await repositories.delete_event(user_id, event_id)
    return {"ok": True}
