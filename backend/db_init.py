from __future__ import annotations

from sqlalchemy import text as sql_text

from backend.db import get_engine


USERS_TABLE = "users"
AUTH_SESSIONS_TABLE = "auth_sessions"
HABITS_TABLE = "habits"
COMPLETIONS_TABLE = "habit_completions"
JOURNAL_TABLE = "journal_entries"
TASKS_TABLE = "tasks"
EVENTS_TABLE = "calendar_events"


async def init_db():
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {USERS_TABLE} (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT,
                    auth_provider TEXT NOT NULL DEFAULT 'password',
                    email_confirmed INTEGER DEFAULT 0,
                    confirmation_token TEXT,
                    avatar_url TEXT,
                    created_at TEXT NOT NULL
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {AUTH_SESSIONS_TABLE} (
                    token_hash TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL REFERENCES {USERS_TABLE}(id) ON DELETE CASCADE,
                    created_at TEXT NOT NULL,
                    expires_at TEXT NOT NULL,
                    revoked_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {HABITS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL REFERENCES {USERS_TABLE}(id) ON DELETE CASCADE,
                    name TEXT NOT NULL,
                    description TEXT,
                    category TEXT,
                    color TEXT,
                    reminder_time TEXT,
                    frequency TEXT DEFAULT 'daily',
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {COMPLETIONS_TABLE} (
                    habit_id TEXT NOT NULL REFERENCES {HABITS_TABLE}(id) ON DELETE CASCADE,
                    user_id TEXT NOT NULL,
                    completed_on TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    PRIMARY KEY (habit_id, completed_on)
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {JOURNAL_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL REFERENCES {USERS_TABLE}(id) ON DELETE CASCADE,
                    title TEXT NOT NULL,
                    content TEXT,
                    mood TEXT,
                    tags_json TEXT,
                    entry_date TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {TASKS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL REFERENCES {USERS_TABLE}(id) ON DELETE CASCADE,
                    title TEXT NOT NULL,
                    description TEXT,
                    due_date TEXT,
                    priority TEXT DEFAULT 'medium',
                    category TEXT,
                    completed INTEGER DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {EVENTS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL REFERENCES {USERS_TABLE}(id) ON DELETE CASCADE,
                    title TEXT NOT NULL,
                    description TEXT,
                    start_at TEXT NOT NULL,
                    end_at TEXT NOT NULL,
                    all_day INTEGER DEFAULT 0,
                    color TEXT,
                    category TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )

    async def ensure_index(index_sql: str) -> None:
        async with engine.begin() as conn:
            await conn.execute(sql_text(index_sql))

    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{HABITS_TABLE}_user ON {HABITS_TABLE} (user_id, created_at)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{COMPLETIONS_TABLE}_user_day "
        f"ON {COMPLETIONS_TABLE} (user_id, completed_on)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{JOURNAL_TABLE}_user_date ON {JOURNAL_TABLE} (user_id, entry_date)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{TASKS_TABLE}_user_due ON {TASKS_TABLE} (user_id, completed, due_date)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{EVENTS_TABLE}_user_start ON {EVENTS_TABLE} (user_id, start_at)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{AUTH_SESSIONS_TABLE}_user ON {AUTH_SESSIONS_TABLE} (user_id)"
    )
