from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable

from dashboard.data import repositories
from dashboard.data.api_client import ApiError
from dashboard.metrics import apply_completion_delta
from dashboard.state import session_slices

logger = logging.getLogger(__name__)

HABITS_SLICE = "habits"
JOURNAL_SLICE = "journal"
TASKS_SLICE = "tasks"
EVENTS_SLICE = "events"


@dataclass
class MutationResult:
    ok: bool
    value: Any = None
    error: Exception | None = None

    @property
    def message(self):
        if self.error is None:
            return ""
        if isinstance(self.error, ApiError):
            return self.error.detail
        return str(self.error)


class OptimisticMutation:
    """Apply a local change, commit it remotely, roll back on failure.

    ``apply`` receives a copy of the current list and returns the optimistic
    list. ``commit`` performs the backend call. ``reconcile`` merges the
    server response into the list once the call succeeded.
    """

    def __init__(
        self,
        slice_name: str,
        apply: Callable[[list], list],
        commit: Callable[[], Any],
        reconcile: Callable[[list, Any], list] | None = None,
        store=None,
    ):
        self.slice_name = slice_name
        self.apply = apply
        self.commit = commit
        self.reconcile = reconcile
        self.store = store

    def run(self) -> MutationResult:
        # Unloaded slices stay unloaded so the next loader call fetches them.
        if not session_slices.is_loaded(self.slice_name, self.store):
            try:
                value = self.commit()
            except (ApiError, ValueError) as exc:
                logger.info("Failed %s change: %s", self.slice_name, exc)
                return MutationResult(ok=False, error=exc)
            return MutationResult(ok=True, value=value)

        snapshot = session_slices.snapshot_items(self.slice_name, self.store)
        session_slices.set_items(
            self.slice_name,
            self.apply(session_slices.snapshot_items(self.slice_name, self.store)),
            self.store,
        )
        try:
            value = self.commit()
        except (ApiError, ValueError) as exc:
            session_slices.set_items(self.slice_name, snapshot, self.store)
            logger.info("Rolled back %s change: %s", self.slice_name, exc)
            return MutationResult(ok=False, error=exc)
        except Exception:
            session_slices.set_items(self.slice_name, snapshot, self.store)
            raise
        if self.reconcile is not None:
            current = session_slices.get_items(self.slice_name, self.store)
            session_slices.set_items(self.slice_name, self.reconcile(current, value), self.store)
        return MutationResult(ok=True, value=value)


def _temp_id():
    return f"pending-{uuid.uuid4().hex[:8]}"


def _swap_temp(temp_id):
    def reconcile(items, value):
        return [value if item.get("id") == temp_id else item for item in items]

    return reconcile


def _patch_items(item_id, patch):
    def apply(items):
        return [{**item, **patch} if item.get("id") == item_id else item for item in items]

    return apply


def _remove_item(item_id):
    def apply(items):
        return [item for item in items if item.get("id") != item_id]

    return apply


def _reconcile_response(item_id):
    def reconcile(items, value):
        if not isinstance(value, dict):
            return items
        return [value if item.get("id") == item_id else item for item in items]

    return reconcile


def toggle_habit_completion(habit_id, day, completed, store=None, tz=None) -> MutationResult:
    def apply(items):
        updated = []
        for habit in items:
            if habit.get("id") == habit_id:
                days = apply_completion_delta(habit.get("completed_dates") or [], day, completed, tz)
                habit = {**habit, "completed_dates": sorted((d.isoformat() for d in days), reverse=True)}
            updated.append(habit)
        return updated

    def reconcile(items, value):
        server_dates = (value or {}).get("items")
        if server_dates is None:
            return items
        return [{**habit, "completed_dates": server_dates} if habit.get("id") == habit_id else habit for habit in items]

    return OptimisticMutation(
        HABITS_SLICE,
        apply,
        lambda: repositories.set_habit_completion(habit_id, day, completed),
        reconcile,
        store,
    ).run()


def _create(slice_name, payload, creator, validator, prepend=True, store=None):
    try:
        validator(payload)
    except ValueError as exc:
        return MutationResult(ok=False, error=exc)
    temp_id = _temp_id()
    placeholder = {**payload, "id": temp_id}

    def apply(items):
        return [placeholder] + items if prepend else items + [placeholder]

    return OptimisticMutation(slice_name, apply, lambda: creator(payload), _swap_temp(temp_id), store).run()


def _update(slice_name, item_id, patch, updater, validator, store=None):
    try:
        validator(patch, partial=True)
    except ValueError as exc:
        return MutationResult(ok=False, error=exc)
    return OptimisticMutation(
        slice_name,
        _patch_items(item_id, patch),
        lambda: updater(item_id, patch),
        _reconcile_response(item_id),
        store,
    ).run()


def _delete(slice_name, item_id, deleter, store=None):
    return OptimisticMutation(slice_name, _remove_item(item_id), lambda: deleter(item_id), None, store).run()


def create_habit(payload, store=None):
    payload = {**payload, "completed_dates": []}
    return _create(
        HABITS_SLICE,
        payload,
        lambda data: repositories.create_habit({k: v for k, v in data.items() if k != "completed_dates"}),
        repositories.validate_habit_payload,
        prepend=False,
        store=store,
    )


def update_habit(habit_id, patch, store=None):
    return _update(HABITS_SLICE, habit_id, patch, repositories.update_habit, repositories.validate_habit_payload, store)


def delete_habit(habit_id, store=None):
    return _delete(HABITS_SLICE, habit_id, repositories.delete_habit, store)


def create_journal_entry(payload, store=None):
    return _create(
        JOURNAL_SLICE,
        payload,
        repositories.create_journal_entry,
        repositories.validate_journal_payload,
        store=store,
    )


def update_journal_entry(entry_id, patch, store=None):
    return _update(
        JOURNAL_SLICE,
        entry_id,
        patch,
        repositories.update_journal_entry,
        repositories.validate_journal_payload,
        store,
    )


def delete_journal_entry(entry_id, store=None):
    return _delete(JOURNAL_SLICE, entry_id, repositories.delete_journal_entry, store)


def create_task(payload, store=None):
    payload = {"completed": False, **payload}
    return _create(TASKS_SLICE, payload, repositories.create_task, repositories.validate_task_payload, store=store)


def update_task(task_id, patch, store=None):
    return _update(TASKS_SLICE, task_id, patch, repositories.update_task, repositories.validate_task_payload, store)


def toggle_task(task_id, store=None):
    current = session_slices.find_item(TASKS_SLICE, task_id, store) or {}
    return OptimisticMutation(
        TASKS_SLICE,
        _patch_items(task_id, {"completed": not bool(current.get("completed"))}),
        lambda: repositories.toggle_task(task_id),
        _reconcile_response(task_id),
        store,
    ).run()


def delete_task(task_id, store=None):
    return _delete(TASKS_SLICE, task_id, repositories.delete_task, store)


def create_event(payload, store=None):
    return _create(
        EVENTS_SLICE,
        payload,
        repositories.create_event,
        repositories.validate_event_payload,
        prepend=False,
        store=store,
    )


def delete_event(event_id, store=None):
    return _delete(EVENTS_SLICE, event_id, repositories.delete_event, store)
