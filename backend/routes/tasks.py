from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from backend.auth import require_user_id
from backend.schemas import TaskCreate, TaskPatch
from backend import repositories

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/v1/tasks")
async def list_tasks(
    limit: int | None = Query(default=None, ge=1, le=500),
    completed: bool | None = Query(default=None),
    user_id: str = Depends(require_user_id),
):
    items = await repositories.list_tasks(user_id, limit=limit, completed=completed)
    return {"items": items}


@router.post("/v1/tasks")
async def create_task(payload: TaskCreate, user_id: str = Depends(require_user_id)):
    record = await repositories.create_task(user_id, payload.model_dump())
    logger.debug("Created task %s", record["id"])
    return record


@router.get("/v1/tasks/{task_id}")
async def get_task(task_id: str, user_id: str = Depends(require_user_id)):
    return await repositories.get_task(user_id, task_id)


@router.patch("/v1/tasks/{task_id}")
async def patch_task(task_id: str, payload: TaskPatch, user_id: str = Depends(require_user_id)):
    return await repositories.update_task(user_id, task_id, payload.model_dump(exclude_unset=True))


@router.post("/v1/tasks/{task_id}/toggle")
async def toggle_task(task_id: str, user_id: str = Depends(require_user_id)):
    return await repositories.toggle_task(user_id, task_id)


@router.delete("/v1/tasks/{task_id}")
async def delete_task(task_id: str, user_id: str = Depends(require_user_id)):
    await repositories.delete_task(user_id, task_id)
    return {"ok": True}
