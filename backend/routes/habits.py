from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from backend.auth import require_user_id
from backend import repositories
from backend.schemas import CompletionPayload, HabitCreate, HabitPatch

router = APIRouter()


@router.get("/v1/habits")
async def list_habits(
    limit: int | None = Query(default=None, ge=1, le=500),
    user_id: str = Depends(require_user_id),
):
    return {"items": await repositories.list_habits(user_id, limit=limit)}


@router.post("/v1/habits")
async def create_habit(payload: HabitCreate, user_id: str = Depends(require_user_id)):
    return await repositories.create_habit(user_id, payload.model_dump())


@router.get("/v1/habits/{habit_id}")
async def get_habit(habit_id: str, user_id: str = Depends(require_user_id)):
    return await repositories.get_habit(user_id, habit_id)


@router.patch("/v1/habits/{habit_id}")
async def update_habit(habit_id: str, payload: HabitPatch, user_id: str = Depends(require_user_id)):
    return await repositories.update_habit(user_id, habit_id, payload.model_dump(exclude_unset=True))


@router.delete("/v1/habits/{habit_id}")
async def delete_habit(habit_id: str, user_id: str = Depends(require_user_id)):
    await repositories.delete_habit(user_id, habit_id)
    return {"ok": True}


@router.get("/v1/habits/{habit_id}/completions")
async def list_completions(habit_id: str, user_id: str = Depends(require_user_id)):
    habit = await repositories.get_habit(user_id, habit_id)
    return {"habit_id": habit_id, "items": habit["completed_dates"]}


@router.put("/v1/habits/{habit_id}/completions/{day}")
async def set_completion(
    habit_id: str,
    day: date,
    payload: CompletionPayload,
    user_id: str = Depends(require_user_id),
):
    items = await repositories.set_habit_completion(user_id, habit_id, day, payload.completed)
    return {"habit_id": habit_id, "date": day.isoformat(), "completed": payload.completed, "items": items}
