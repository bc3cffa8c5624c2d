from __future__ import annotations

import json
from datetime import date, datetime, timezone
from uuid import uuid4

from sqlalchemy import text as sql_text, bindparam

from backend.db import get_sessionmaker
from backend.errors import ConflictError, RecordNotFound

USERS_TABLE = "users"
AUTH_SESSIONS_TABLE = "auth_sessions"
HABITS_TABLE = "habits"
COMPLETIONS_TABLE = "habit_completions"
JOURNAL_TABLE = "journal_entries"
TASKS_TABLE = "tasks"
EVENTS_TABLE = "calendar_events"

PRIORITIES = ("low", "medium", "high")
FREQUENCIES = ("daily", "weekly", "custom")
HABIT_NAME_MAX = 60
MAX_TAGS = 20

USER_COLUMNS = "id, name, email, password_hash, auth_provider, email_confirmed, confirmation_token, avatar_url, created_at"
HABIT_COLUMNS = "id, user_id, name, description, category, color, reminder_time, frequency, created_at, updated_at"
JOURNAL_COLUMNS = "id, user_id, title, content, mood, tags_json, entry_date, created_at, updated_at"
TASK_COLUMNS = "id, user_id, title, description, due_date, priority, category, completed, created_at, updated_at"
EVENT_COLUMNS = "id, user_id, title, description, start_at, end_at, all_day, color, category, created_at, updated_at"


def _new_id() -> str:
    return uuid4().hex


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _iso_day(value) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(str(value)[:10]).isoformat()


def _iso_datetime(value) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time()).isoformat()
    return datetime.fromisoformat(str(value)).isoformat()


def _normalize_time_value(value):
    if value is None:
        return None
    if hasattr(value, "strftime"):
        return value.strftime("%H:%M")
    value_str = str(value).strip()
    return value_str[:5] if value_str else None


def clean_text(value, max_length: int | None = None) -> str:
    clean = " ".join(str(value or "").split()).strip()
    if max_length is not None:
        clean = clean[:max_length]
    return clean


def normalize_priority(value) -> str:
    value = str(value or "").strip().lower()
    if value in PRIORITIES:
        return value
    return "medium"


def normalize_frequency(value) -> str:
    value = str(value or "").strip().lower()
    if value in FREQUENCIES:
        return value
    return "daily"


def normalize_tags(tags) -> list[str]:
    clean = []
    seen = set()
    for tag in tags or []:
        label = clean_text(tag, 40).lstrip("#")
        if not label or label.lower() in seen:
            continue
        seen.add(label.lower())
        clean.append(label)
    return clean[:MAX_TAGS]


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _decode_tags(raw) -> list[str]:
    if not raw:
        return []
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError):
        return []
    if not isinstance(payload, list):
        return []
    return [str(item) for item in payload]


def _normalize_journal_row(row) -> dict:
    payload = dict(row)
    payload["tags"] = _decode_tags(payload.pop("tags_json", None))
    return payload


def _normalize_task_row(row) -> dict:
    payload = dict(row)
    payload["completed"] = bool(int(payload.get("completed") or 0))
    return payload


def _normalize_event_row(row) -> dict:
    payload = dict(row)
    payload["start"] = payload.pop("start_at")
    payload["end"] = payload.pop("end_at")
    payload["all_day"] = bool(int(payload.get("all_day") or 0))
    return payload


def _normalize_user_row(row) -> dict:
    payload = dict(row)
    payload["email_confirmed"] = bool(int(payload.get("email_confirmed") or 0))
    return payload


# --- users & sessions -------------------------------------------------------


async def get_user_by_email(email: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT {USER_COLUMNS} FROM {USERS_TABLE} WHERE email = :email"),
            {"email": email.strip().lower()},
        )).mappings().fetchone()
    return _normalize_user_row(row) if row else None


async def get_user(user_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT {USER_COLUMNS} FROM {USERS_TABLE} WHERE id = :id"),
            {"id": user_id},
        )).mappings().fetchone()
    return _normalize_user_row(row) if row else None


async def create_user(
    name: str,
    email: str,
    password_hash: str | None,
    auth_provider: str = "password",
    email_confirmed: bool = False,
    confirmation_token: str | None = None,
    avatar_url: str | None = None,
) -> dict:
    email = email.strip().lower()
    if await get_user_by_email(email):
        raise ConflictError("An account with this email already exists")
    record = {
        "id": _new_id(),
        "name": clean_text(name, 80) or email.split("@")[0].title(),
        "email": email,
        "password_hash": password_hash,
        "auth_provider": auth_provider,
        "email_confirmed": int(bool(email_confirmed)),
        "confirmation_token": confirmation_token,
        "avatar_url": avatar_url,
        "created_at": _now_iso(),
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {USERS_TABLE}
                ({USER_COLUMNS})
                VALUES
                (:id, :name, :email, :password_hash, :auth_provider, :email_confirmed,
                 :confirmation_token, :avatar_url, :created_at)
                """
            ),
            record,
        )
        await session.commit()
    return _normalize_user_row(record)


async def confirm_user(confirmation_token: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT id FROM {USERS_TABLE} WHERE confirmation_token = :token"),
            {"token": confirmation_token},
        )).fetchone()
        if not row:
            return None
        await session.execute(
            sql_text(
                f"UPDATE {USERS_TABLE} SET email_confirmed = 1, confirmation_token = NULL WHERE id = :id"
            ),
            {"id": row[0]},
        )
        await session.commit()
    return await get_user(row[0])


async def store_session(token_hash: str, user_id: str, expires_at: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {AUTH_SESSIONS_TABLE} (token_hash, user_id, created_at, expires_at, revoked_at)
                VALUES (:token_hash, :user_id, :created_at, :expires_at, NULL)
                """
            ),
            {
                "token_hash": token_hash,
                "user_id": user_id,
                "created_at": _now_iso(),
                "expires_at": expires_at,
            },
        )
        await session.commit()


async def get_session(token_hash: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"""
                SELECT token_hash, user_id, created_at, expires_at, revoked_at
                FROM {AUTH_SESSIONS_TABLE}
                WHERE token_hash = :token_hash
                """
            ),
            {"token_hash": token_hash},
        )).mappings().fetchone()
    return dict(row) if row else None


async def revoke_session(token_hash: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"UPDATE {AUTH_SESSIONS_TABLE} SET revoked_at = :revoked_at "
                "WHERE token_hash = :token_hash AND revoked_at IS NULL"
            ),
            {"token_hash": token_hash, "revoked_at": _now_iso()},
        )
        await session.commit()


# --- habits -----------------------------------------------------------------


async def list_completions(user_id: str, habit_ids: list[str]) -> dict[str, list[str]]:
    if not habit_ids:
        return {}
    session_factory = get_sessionmaker()
    stmt = sql_text(
        f"""
        SELECT habit_id, completed_on
        FROM {COMPLETIONS_TABLE}
        WHERE user_id = :user_id AND habit_id IN :habit_ids
        ORDER BY completed_on DESC
        """
    ).bindparams(bindparam("habit_ids", expanding=True))
    async with session_factory() as session:
        rows = (await session.execute(stmt, {"user_id": user_id, "habit_ids": habit_ids})).mappings().all()
    payload: dict[str, list[str]] = {habit_id: [] for habit_id in habit_ids}
    for row in rows:
        payload.setdefault(row["habit_id"], []).append(row["completed_on"])
    return payload


async def list_habits(user_id: str, limit: int | None = None) -> list[dict]:
    session_factory = get_sessionmaker()
    query = f"SELECT {HABIT_COLUMNS} FROM {HABITS_TABLE} WHERE user_id = :user_id ORDER BY created_at DESC"
    params: dict = {"user_id": user_id}
    if limit:
        query += " LIMIT :limit"
        params["limit"] = int(limit)
    async with session_factory() as session:
        rows = (await session.execute(sql_text(query), params)).mappings().all()
    habits = [dict(row) for row in rows]
    completions = await list_completions(user_id, [habit["id"] for habit in habits])
    for habit in habits:
        habit["completed_dates"] = completions.get(habit["id"], [])
    return habits


async def get_habit(user_id: str, habit_id: str) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT {HABIT_COLUMNS} FROM {HABITS_TABLE} WHERE id = :id AND user_id = :user_id"),
            {"id": habit_id, "user_id": user_id},
        )).mappings().fetchone()
    if not row:
        raise RecordNotFound("Habit not found")
    habit = dict(row)
    completions = await list_completions(user_id, [habit_id])
    habit["completed_dates"] = completions.get(habit_id, [])
    return habit


async def _habit_name_taken(user_id: str, name: str, exclude_id: str | None = None) -> bool:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(f"SELECT id, name FROM {HABITS_TABLE} WHERE user_id = :user_id"),
            {"user_id": user_id},
        )).mappings().all()
    return any(row["name"].lower() == name.lower() and row["id"] != exclude_id for row in rows)


async def create_habit(user_id: str, payload: dict) -> dict:
    name = clean_text(payload.get("name"), HABIT_NAME_MAX)
    if not name:
        raise ValueError("Habit name cannot be empty")
    if await _habit_name_taken(user_id, name):
        raise ConflictError("Habit already exists")
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_id": user_id,
        "name": name,
        "description": clean_text(payload.get("description"), 280) or None,
        "category": clean_text(payload.get("category"), 40) or None,
        "color": payload.get("color"),
        "reminder_time": _normalize_time_value(payload.get("reminder_time")),
        "frequency": normalize_frequency(payload.get("frequency")),
        "created_at": now,
        "updated_at": now,
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {HABITS_TABLE}
                ({HABIT_COLUMNS})
                VALUES
                (:id, :user_id, :name, :description, :category, :color, :reminder_time,
                 :frequency, :created_at, :updated_at)
                """
            ),
            record,
        )
        await session.commit()
    return {**record, "completed_dates": []}


async def update_habit(user_id: str, habit_id: str, patch: dict) -> dict:
    await get_habit(user_id, habit_id)
    allowed = {"name", "description", "category", "color", "reminder_time", "frequency"}
    updates = []
    params = {"id": habit_id, "user_id": user_id}
    for key, value in patch.items():
        if key not in allowed:
            continue
        if key == "name":
            value = clean_text(value, HABIT_NAME_MAX)
            if not value:
                raise ValueError("Habit name cannot be empty")
            if await _habit_name_taken(user_id, value, exclude_id=habit_id):
                raise ConflictError("Habit already exists")
        elif key == "reminder_time":
            value = _normalize_time_value(value)
        elif key == "frequency":
            value = normalize_frequency(value)
        elif key in {"description", "category"}:
            value = clean_text(value, 280 if key == "description" else 40) or None
        updates.append(f"{key} = :{key}")
        params[key] = value
    if updates:
        updates.append("updated_at = :updated_at")
        params["updated_at"] = _now_iso()
        session_factory = get_sessionmaker()
        async with session_factory() as session:
            await session.execute(
                sql_text(
                    f"UPDATE {HABITS_TABLE} SET {', '.join(updates)} WHERE id = :id AND user_id = :user_id"
                ),
                params,
            )
            await session.commit()
    return await get_habit(user_id, habit_id)


async def delete_habit(user_id: str, habit_id: str) -> None:
    await get_habit(user_id, habit_id)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"DELETE FROM {COMPLETIONS_TABLE} WHERE user_id = :user_id AND habit_id = :habit_id"),
            {"user_id": user_id, "habit_id": habit_id},
        )
        await session.execute(
            sql_text(f"DELETE FROM {HABITS_TABLE} WHERE user_id = :user_id AND id = :habit_id"),
            {"user_id": user_id, "habit_id": habit_id},
        )
        await session.commit()


async def set_habit_completion(user_id: str, habit_id: str, day, completed: bool) -> list[str]:
    await get_habit(user_id, habit_id)
    day_iso = _iso_day(day)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        if completed:
            await session.execute(
                sql_text(
                    f"""
                    INSERT INTO {COMPLETIONS_TABLE} (habit_id, user_id, completed_on, created_at)
                    VALUES (:habit_id, :user_id, :completed_on, :created_at)
                    ON CONFLICT (habit_id, completed_on) DO NOTHING
                    """
                ),
                {"habit_id": habit_id, "user_id": user_id, "completed_on": day_iso, "created_at": _now_iso()},
            )
        else:
            await session.execute(
                sql_text(
                    f"""
                    DELETE FROM {COMPLETIONS_TABLE}
                    WHERE habit_id = :habit_id AND user_id = :user_id AND completed_on = :completed_on
                    """
                ),
                {"habit_id": habit_id, "user_id": user_id, "completed_on": day_iso},
            )
        await session.commit()
    completions = await list_completions(user_id, [habit_id])
    return completions.get(habit_id, [])


# --- journal ----------------------------------------------------------------


async def list_journal_entries(
    user_id: str,
    limit: int | None = None,
    mood: str | None = None,
    tag: str | None = None,
    search: str | None = None,
) -> list[dict]:
    conditions = ["user_id = :user_id"]
    params: dict = {"user_id": user_id}
    if mood:
        conditions.append("mood = :mood")
        params["mood"] = mood
    if search:
        conditions.append(
            "(LOWER(title) LIKE :search ESCAPE '\\' OR LOWER(content) LIKE :search ESCAPE '\\')"
        )
        params["search"] = f"%{_escape_like(search.strip().lower())}%"
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {JOURNAL_COLUMNS}
                FROM {JOURNAL_TABLE}
                WHERE {' AND '.join(conditions)}
                ORDER BY entry_date DESC, created_at DESC
                """
            ),
            params,
        )).mappings().all()
    entries = [_normalize_journal_row(row) for row in rows]
    if tag:
        wanted = tag.strip().lstrip("#").lower()
        entries = [entry for entry in entries if wanted in {item.lower() for item in entry["tags"]}]
    if limit:
        entries = entries[: int(limit)]
    return entries


async def get_journal_entry(user_id: str, entry_id: str) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT {JOURNAL_COLUMNS} FROM {JOURNAL_TABLE} WHERE id = :id AND user_id = :user_id"),
            {"id": entry_id, "user_id": user_id},
        )).mappings().fetchone()
    if not row:
        raise RecordNotFound("Journal entry not found")
    return _normalize_journal_row(row)


async def create_journal_entry(user_id: str, payload: dict) -> dict:
    title = clean_text(payload.get("title"), 120)
    if not title:
        raise ValueError("Journal title cannot be empty")
    now = _now_iso()
    tags = normalize_tags(payload.get("tags"))
    record = {
        "id": _new_id(),
        "user_id": user_id,
        "title": title,
        "content": str(payload.get("content") or "").strip(),
        "mood": clean_text(payload.get("mood"), 30).lower() or None,
        "tags_json": json.dumps(tags, ensure_ascii=False),
        "entry_date": _iso_day(payload.get("entry_date")) or date.today().isoformat(),
        "created_at": now,
        "updated_at": now,
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {JOURNAL_TABLE}
                ({JOURNAL_COLUMNS})
                VALUES
                (:id, :user_id, :title, :content, :mood, :tags_json, :entry_date, :created_at, :updated_at)
                """
            ),
            record,
        )
        await session.commit()
    return _normalize_journal_row(record)


async def update_journal_entry(user_id: str, entry_id: str, patch: dict) -> dict:
    await get_journal_entry(user_id, entry_id)
    updates = []
    params = {"id": entry_id, "user_id": user_id}
    for key, value in patch.items():
        if key == "title":
            value = clean_text(value, 120)
            if not value:
                raise ValueError("Journal title cannot be empty")
            updates.append("title = :title")
            params["title"] = value
        elif key == "content":
            updates.append("content = :content")
            params["content"] = str(value or "").strip()
        elif key == "mood":
            updates.append("mood = :mood")
            params["mood"] = clean_text(value, 30).lower() or None
        elif key == "tags":
            updates.append("tags_json = :tags_json")
            params["tags_json"] = json.dumps(normalize_tags(value), ensure_ascii=False)
        elif key == "entry_date" and value is not None:
            updates.append("entry_date = :entry_date")
            params["entry_date"] = _iso_day(value)
    if updates:
        updates.append("updated_at = :updated_at")
        params["updated_at"] = _now_iso()
        session_factory = get_sessionmaker()
        async with session_factory() as session:
            await session.execute(
                sql_text(
                    f"UPDATE {JOURNAL_TABLE} SET {', '.join(updates)} WHERE id = :id AND user_id = :user_id"
                ),
                params,
            )
            await session.commit()
    return await get_journal_entry(user_id, entry_id)


async def delete_journal_entry(user_id: str, entry_id: str) -> None:
    await get_journal_entry(user_id, entry_id)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"DELETE FROM {JOURNAL_TABLE} WHERE id = :id AND user_id = :user_id"),
            {"id": entry_id, "user_id": user_id},
        )
        await session.commit()


# --- tasks ------------------------------------------------------------------


async def list_tasks(user_id: str, limit: int | None = None, completed: bool | None = None) -> list[dict]:
    conditions = ["user_id = :user_id"]
    params: dict = {"user_id": user_id}
    if completed is not None:
        conditions.append("COALESCE(completed, 0) = :completed")
        params["completed"] = int(bool(completed))
    query = (
        f"SELECT {TASK_COLUMNS} FROM {TASKS_TABLE} WHERE {' AND '.join(conditions)} "
        "ORDER BY created_at DESC"
    )
    if limit:
        query += " LIMIT :limit"
        params["limit"] = int(limit)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(sql_text(query), params)).mappings().all()
    return [_normalize_task_row(row) for row in rows]


async def get_task(user_id: str, task_id: str) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT {TASK_COLUMNS} FROM {TASKS_TABLE} WHERE id = :id AND user_id = :user_id"),
            {"id": task_id, "user_id": user_id},
        )).mappings().fetchone()
    if not row:
        raise RecordNotFound("Task not found")
    return _normalize_task_row(row)


async def create_task(user_id: str, payload: dict) -> dict:
    title = clean_text(payload.get("title"), 160)
    if not title:
        raise ValueError("Task title cannot be empty")
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_id": user_id,
        "title": title,
        "description": str(payload.get("description") or "").strip() or None,
        "due_date": _iso_day(payload.get("due_date")),
        "priority": normalize_priority(payload.get("priority")),
        "category": clean_text(payload.get("category"), 40) or None,
        "completed": int(bool(payload.get("completed", False))),
        "created_at": now,
        "updated_at": now,
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {TASKS_TABLE}
                ({TASK_COLUMNS})
                VALUES
                (:id, :user_id, :title, :description, :due_date, :priority, :category,
                 :completed, :created_at, :updated_at)
                """
            ),
            record,
        )
        await session.commit()
    return _normalize_task_row(record)


async def update_task(user_id: str, task_id: str, patch: dict) -> dict:
    await get_task(user_id, task_id)
    allowed = {"title", "description", "due_date", "priority", "category", "completed"}
    updates = []
    params = {"id": task_id, "user_id": user_id}
    for key, value in patch.items():
        if key not in allowed:
            continue
        if key == "title":
            value = clean_text(value, 160)
            if not value:
                raise ValueError("Task title cannot be empty")
        elif key == "priority":
            value = normalize_priority(value)
        elif key == "completed":
            value = int(bool(value))
        elif key == "due_date":
            value = _iso_day(value)
        elif key == "category":
            value = clean_text(value, 40) or None
        updates.append(f"{key} = :{key}")
        params[key] = value
    if updates:
        updates.append("updated_at = :updated_at")
        params["updated_at"] = _now_iso()
        session_factory = get_sessionmaker()
        async with session_factory() as session:
            await session.execute(
                sql_text(
                    f"UPDATE {TASKS_TABLE} SET {', '.join(updates)} WHERE id = :id AND user_id = :user_id"
                ),
                params,
            )
            await session.commit()
    return await get_task(user_id, task_id)


async def toggle_task(user_id: str, task_id: str) -> dict:
    task = await get_task(user_id, task_id)
    return await update_task(user_id, task_id, {"completed": not task["completed"]})


async def delete_task(user_id: str, task_id: str) -> None:
    await get_task(user_id, task_id)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"DELETE FROM {TASKS_TABLE} WHERE user_id = :user_id AND id = :task_id"),
            {"user_id": user_id, "task_id": task_id},
        )
        await session.commit()


async def count_open_tasks(user_id: str) -> int:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        count = (await session.execute(
            sql_text(
                f"SELECT COUNT(*) FROM {TASKS_TABLE} WHERE user_id = :user_id AND COALESCE(completed, 0) = 0"
            ),
            {"user_id": user_id},
        )).scalar_one()
    return int(count or 0)


# --- calendar ---------------------------------------------------------------


async def list_events(user_id: str, start_iso: str | None = None, end_iso: str | None = None) -> list[dict]:
    conditions = ["user_id = :user_id"]
    params: dict = {"user_id": user_id}
    if start_iso:
        conditions.append("end_at >= :start_iso")
        params["start_iso"] = start_iso
    if end_iso:
        conditions.append("start_at <= :end_iso")
        params["end_iso"] = end_iso
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {EVENT_COLUMNS}
                FROM {EVENTS_TABLE}
                WHERE {' AND '.join(conditions)}
                ORDER BY start_at, title
                """
            ),
            params,
        )).mappings().all()
    return [_normalize_event_row(row) for row in rows]


async def get_event(user_id: str, event_id: str) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT {EVENT_COLUMNS} FROM {EVENTS_TABLE} WHERE id = :id AND user_id = :user_id"),
            {"id": event_id, "user_id": user_id},
        )).mappings().fetchone()
    if not row:
        raise RecordNotFound("Event not found")
    return _normalize_event_row(row)


def _naive_utc(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _check_event_range(start_iso: str, end_iso: str) -> None:
    if _naive_utc(end_iso) < _naive_utc(start_iso):
        raise ValueError("Event end must not be before its start")


async def create_event(user_id: str, payload: dict) -> dict:
    title = clean_text(payload.get("title"), 120)
    if not title:
        raise ValueError("Event title cannot be empty")
    start_iso = _iso_datetime(payload["start"])
    end_iso = _iso_datetime(payload.get("end") or payload["start"])
    _check_event_range(start_iso, end_iso)
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_id": user_id,
        "title": title,
        "description": str(payload.get("description") or "").strip() or None,
        "start_at": start_iso,
        "end_at": end_iso,
        "all_day": int(bool(payload.get("all_day", False))),
        "color": payload.get("color"),
        "category": clean_text(payload.get("category"), 40) or None,
        "created_at": now,
        "updated_at": now,
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {EVENTS_TABLE}
                ({EVENT_COLUMNS})
                VALUES
                (:id, :user_id, :title, :description, :start_at, :end_at, :all_day,
                 :color, :category, :created_at, :updated_at)
                """
            ),
            record,
        )
        await session.commit()
    return _normalize_event_row(record)


async def update_event(user_id: str, event_id: str, patch: dict) -> dict:
    current = await get_event(user_id, event_id)
    updates = []
    params = {"id": event_id, "user_id": user_id}
    start_iso = current["start"]
    end_iso = current["end"]
    for key, value in patch.items():
        if key == "title":
            value = clean_text(value, 120)
            if not value:
                raise ValueError("Event title cannot be empty")
            updates.append("title = :title")
            params["title"] = value
        elif key == "start" and value is not None:
            start_iso = _iso_datetime(value)
            updates.append("start_at = :start_at")
            params["start_at"] = start_iso
        elif key == "end" and value is not None:
            end_iso = _iso_datetime(value)
            updates.append("end_at = :end_at")
            params["end_at"] = end_iso
        elif key == "all_day" and value is not None:
            updates.append("all_day = :all_day")
            params["all_day"] = int(bool(value))
        elif key in {"color", "category", "description"}:
            updates.append(f"{key} = :{key}")
            params[key] = value
    _check_event_range(start_iso, end_iso)
    if updates:
        updates.append("updated_at = :updated_at")
        params["updated_at"] = _now_iso()
        session_factory = get_sessionmaker()
        async with session_factory() as session:
            await session.execute(
                sql_text(
                    f"UPDATE {EVENTS_TABLE} SET {', '.join(updates)} WHERE id = :id AND user_id = :user_id"
                ),
                params,
            )
            await session.commit()
    return await get_event(user_id, event_id)


async def delete_event(user_id: str, event_id: str) -> None:
    await get_event(user_id, event_id)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"DELETE FROM {EVENTS_TABLE} WHERE id = :id AND user_id = :user_id"),
            {"id": event_id, "user_id": user_id},
        )
        await session.commit()
