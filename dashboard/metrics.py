from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import NamedTuple

import pandas as pd

from dashboard.constants import (
    CATEGORY_COLORS,
    INSIGHTS_WINDOW_DAYS,
    STREAK_DOT_DAYS,
    STREAK_LOOKBACK_DAYS,
    UNCATEGORIZED,
    UNCATEGORIZED_COLOR,
)


class StreakStatus(NamedTuple):
    completed_on_reference_date: bool
    streak: int


def normalize_completion_day(value, tz=None) -> date:
    """Reduce a date, datetime or ISO string to a calendar day.

    Aware datetimes are converted to ``tz`` first so a late-evening
    completion is not attributed to the next UTC day.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None and tz is not None:
            value = value.astimezone(tz)
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        raise ValueError("Empty completion date")
    if len(text) == 10:
        return date.fromisoformat(text)
    return normalize_completion_day(datetime.fromisoformat(text.replace("Z", "+00:00")), tz)


def normalize_completion_set(values, tz=None) -> set[date]:
    return {normalize_completion_day(value, tz) for value in (values or [])}


def resolve_reference_date(reference_date=None, tz=None) -> date:
    if reference_date is None:
        return datetime.now(tz).date()
    return normalize_completion_day(reference_date, tz)


def compute_streak(completed_dates, reference_date=None, max_lookback=STREAK_LOOKBACK_DAYS, tz=None) -> StreakStatus:
    days = normalize_completion_set(completed_dates, tz)
    reference = resolve_reference_date(reference_date, tz)
    if reference not in days:
        return StreakStatus(False, 0)
    streak = 0
    current = reference
    while streak < max_lookback and current in days:
        streak += 1
        current -= timedelta(days=1)
    return StreakStatus(True, streak)


def apply_completion_delta(completed_dates, day, completed, tz=None) -> set[date]:
    days = normalize_completion_set(completed_dates, tz)
    target = normalize_completion_day(day, tz)
    if completed:
        days.add(target)
    else:
        days.discard(target)
    return days


def last_n_days_status(completed_dates, reference_date=None, days=STREAK_DOT_DAYS, tz=None):
    """Oldest-first ``(day, completed)`` pairs ending at the reference date."""
    completed = normalize_completion_set(completed_dates, tz)
    reference = resolve_reference_date(reference_date, tz)
    start = reference - timedelta(days=days - 1)
    return [(start + timedelta(days=offset), (start + timedelta(days=offset)) in completed) for offset in range(days)]


def longest_streak(completed_dates, tz=None) -> int:
    days = sorted(normalize_completion_set(completed_dates, tz))
    best = 0
    run = 0
    previous = None
    for day in days:
        run = run + 1 if previous is not None and day - previous == timedelta(days=1) else 1
        best = max(best, run)
        previous = day
    return best


def habit_streak_summary(habit, reference_date=None, tz=None):
    completed = habit.get("completed_dates") or []
    status = compute_streak(completed, reference_date, tz=tz)
    return {
        "completed_today": status.completed_on_reference_date,
        "streak": status.streak,
        "longest": longest_streak(completed, tz),
        "dots": last_n_days_status(completed, reference_date, tz=tz),
    }


def daily_completion_series(habits, reference_date=None, days=INSIGHTS_WINDOW_DAYS, tz=None) -> pd.DataFrame:
    reference = resolve_reference_date(reference_date, tz)
    window = [reference - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    completion_sets = [normalize_completion_set(habit.get("completed_dates"), tz) for habit in habits]
    rows = []
    for day in window:
        rows.append({
            "date": day,
            "label": day.strftime("%b %d").replace(" 0", " "),
            "completed": sum(1 for completed in completion_sets if day in completed),
        })
    return pd.DataFrame(rows, columns=["date", "label", "completed"])


def completion_rate(habits, reference_date=None, days=7, tz=None) -> int:
    if not habits:
        return 0
    reference = resolve_reference_date(reference_date, tz)
    start = reference - timedelta(days=days - 1)
    completed = 0
    for habit in habits:
        completed += sum(
            1 for day in normalize_completion_set(habit.get("completed_dates"), tz) if start <= day <= reference
        )
    return round(completed / (len(habits) * days) * 100)


def completion_rate_label(rate):
    if rate >= 80:
        return "Excellent!"
    if rate >= 60:
        return "Good progress!"
    return "Keep going!"


def category_distribution(habits) -> pd.DataFrame:
    counts = {}
    for habit in habits:
        category = habit.get("category") or UNCATEGORIZED
        counts[category] = counts.get(category, 0) + 1
    frame = pd.DataFrame(
        [{"category": name, "count": count} for name, count in counts.items()],
        columns=["category", "count"],
    )
    frame["color"] = [CATEGORY_COLORS.get(name, UNCATEGORIZED_COLOR) for name in frame["category"]]
    return frame


def group_habits_by_category(habits):
    grouped = {}
    for habit in habits:
        grouped.setdefault(habit.get("category") or UNCATEGORIZED, []).append(habit)
    return grouped


def _created_local(value, tz=None):
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None and tz is not None:
        parsed = parsed.astimezone(tz)
    return parsed


def compute_achievements(habits, journal_entries, tasks, tz=None):
    best_run = max((longest_streak(habit.get("completed_dates"), tz) for habit in habits), default=0)
    journal_days = {str(entry.get("entry_date")) for entry in journal_entries if entry.get("entry_date")}
    tasks_done = sum(1 for task in tasks if task.get("completed"))
    early_days = set()
    for entry in journal_entries:
        created = _created_local(entry.get("created_at"), tz)
        if created is not None and created.hour < 7:
            early_days.add(created.date())
    active_days = set()
    for habit in habits:
        active_days |= normalize_completion_set(habit.get("completed_dates"), tz)
    active_days |= {date.fromisoformat(day) for day in journal_days}

    definitions = [
        ("streak_7", "7-Day Streak", "Complete a habit for 7 consecutive days", "habit", best_run, 7),
        ("journal_master", "Journal Master", "Write in your journal for 10 days", "journal", len(journal_days), 10),
        ("task_champion", "Task Champion", "Complete 50 tasks", "todo", tasks_done, 50),
        ("early_bird", "Early Bird", "Journal before 7 AM on 5 days", "general", len(early_days), 5),
        ("milestone_30", "30-Day Milestone", "Stay active on 30 different days", "general", len(active_days), 30),
    ]
    return [
        {
            "key": key,
            "name": name,
            "description": description,
            "category": category,
            "progress": min(progress, maximum),
            "max_progress": maximum,
            "earned": progress >= maximum,
        }
        for key, name, description, category, progress, maximum in definitions
    ]
