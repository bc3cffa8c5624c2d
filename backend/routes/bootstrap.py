from __future__ import annotations

from datetime import date, datetime, time, timedelta

from fastapi import APIRouter, Depends, Query

from backend.auth import require_user
from backend import repositories
from backend.services.auth_service import public_user

router = APIRouter()


@router.get("/v1/bootstrap")
async def bootstrap(
    today: date | None = Query(default=None),
    user: dict = Depends(require_user),
):
    # The client sends its local day; the server date is only a fallback.
    user_id = user["id"]
    today = today or date.today()
    habits = await repositories.list_habits(user_id)
    latest_journal = await repositories.list_journal_entries(user_id, limit=1)
    open_tasks = await repositories.list_tasks(user_id, limit=5, completed=False)
    upcoming_events = await repositories.list_events(
        user_id,
        datetime.combine(today, time.min).isoformat(),
        datetime.combine(today + timedelta(days=7), time.max).isoformat(),
    )
    return {
        "user": public_user(user),
        "today": today.isoformat(),
        "habits": habits,
        "latest_journal": latest_journal,
        "open_tasks": open_tasks,
        "open_task_count": await repositories.count_open_tasks(user_id),
        "upcoming_events": upcoming_events[:5],
    }
