from __future__ import annotations

from datetime import date, datetime

from dashboard.data import api_client

HABIT_NAME_MAX_LENGTH = 60


def _iso(value):
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def validate_habit_payload(payload, partial=False):
    if not partial or "name" in payload:
        name = " ".join(str(payload.get("name") or "").split())
        if not name:
            raise ValueError("Habit name is required")
        if len(name) > HABIT_NAME_MAX_LENGTH:
            raise ValueError(f"Habit name must be at most {HABIT_NAME_MAX_LENGTH} characters")
        payload = {**payload, "name": name}
    return payload


def validate_journal_payload(payload, partial=False):
    if not partial or "title" in payload:
        if not str(payload.get("title") or "").strip():
            raise ValueError("Please add a title to your journal entry")
    return payload


def validate_task_payload(payload, partial=False):
    if not partial or "title" in payload:
        if not str(payload.get("title") or "").strip():
            raise ValueError("Task title is required")
    return payload


def validate_event_payload(payload, partial=False):
    if not partial or "title" in payload:
        if not str(payload.get("title") or "").strip():
            raise ValueError("Event title is required")
    start = payload.get("start")
    end = payload.get("end")
    if start is not None and end is not None and end < start:
        raise ValueError("End time must be after start time")
    return payload


def _json_payload(payload):
    return {key: _iso(value) for key, value in payload.items()}


def get_bootstrap(today=None):
    return api_client.request("GET", "/v1/bootstrap", params={"today": _iso(today)})


def list_habits(limit=None):
    return api_client.request("GET", "/v1/habits", params={"limit": limit})["items"]


def create_habit(payload):
    return api_client.request("POST", "/v1/habits", json=_json_payload(validate_habit_payload(payload)))


def update_habit(habit_id, patch):
    return api_client.request(
        "PATCH",
        f"/v1/habits/{habit_id}",
        json=_json_payload(validate_habit_payload(patch, partial=True)),
    )


def delete_habit(habit_id):
    return api_client.request("DELETE", f"/v1/habits/{habit_id}")


def set_habit_completion(habit_id, day, completed):
    return api_client.request(
        "PUT",
        f"/v1/habits/{habit_id}/completions/{_iso(day)}",
        json={"completed": bool(completed)},
    )


def list_journal_entries(limit=None, mood=None, tag=None, query=None):
    params = {"limit": limit, "mood": mood or None, "tag": tag or None, "q": query or None}
    return api_client.request("GET", "/v1/journal", params=params)["items"]


def create_journal_entry(payload):
    return api_client.request("POST", "/v1/journal", json=_json_payload(validate_journal_payload(payload)))


def update_journal_entry(entry_id, patch):
    return api_client.request(
        "PATCH",
        f"/v1/journal/{entry_id}",
        json=_json_payload(validate_journal_payload(patch, partial=True)),
    )


def delete_journal_entry(entry_id):
    return api_client.request("DELETE", f"/v1/journal/{entry_id}")


def export_journal():
    return api_client.request("GET", "/v1/journal/export", raw=True)


def list_tasks(limit=None, completed=None):
    return api_client.request("GET", "/v1/tasks", params={"limit": limit, "completed": completed})["items"]


def create_task(payload):
    return api_client.request("POST", "/v1/tasks", json=_json_payload(validate_task_payload(payload)))


def update_task(task_id, patch):
    return api_client.request(
        "PATCH",
        f"/v1/tasks/{task_id}",
        json=_json_payload(validate_task_payload(patch, partial=True)),
    )


def toggle_task(task_id):
    return api_client.request("POST", f"/v1/tasks/{task_id}/toggle")


def delete_task(task_id):
    return api_client.request("DELETE", f"/v1/tasks/{task_id}")


def list_events(start=None, end=None):
    return api_client.request(
        "GET",
        "/v1/calendar/events",
        params={"start": _iso(start), "end": _iso(end)},
    )["items"]


def create_event(payload):
    return api_client.request("POST", "/v1/calendar/events", json=_json_payload(validate_event_payload(payload)))


def delete_event(event_id):
    return api_client.request("DELETE", f"/v1/calendar/events/{event_id}")
