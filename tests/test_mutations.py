"""
Optimistic mutations against an in-memory slice store.

``dashboard.data.repositories`` is patched per test so no HTTP is issued.
"""

from __future__ import annotations

from datetime import date

import pytest

from dashboard.data import loaders, mutations, repositories
from dashboard.data.api_client import ApiError
from dashboard.state import session_slices

pytestmark = pytest.mark.unit

TODAY = date(2026, 3, 15)


@pytest.fixture
def store():
    data: dict = {}
    session_slices.set_items(
        mutations.HABITS_SLICE,
        [
            {"id": "h1", "name": "Read", "completed_dates": ["2026-03-14"]},
            {"id": "h2", "name": "Run", "completed_dates": []},
        ],
        data,
    )
    session_slices.set_items(
        mutations.TASKS_SLICE,
        [{"id": "t1", "title": "Pay rent", "completed": False}],
        data,
    )
    return data


def habit(store, habit_id):
    return session_slices.find_item(mutations.HABITS_SLICE, habit_id, store)


class TestHabitToggle:
    def test_success_uses_server_dates(self, store, monkeypatch):
        calls = []

        def fake_set(habit_id, day, completed):
            calls.append((habit_id, day, completed))
            return {"habit_id": habit_id, "items": ["2026-03-15", "2026-03-14"]}

        monkeypatch.setattr(repositories, "set_habit_completion", fake_set)
        result = mutations.toggle_habit_completion("h1", TODAY, True, store=store)

        assert result.ok is True
        assert calls == [("h1", TODAY, True)]
        assert habit(store, "h1")["completed_dates"] == ["2026-03-15", "2026-03-14"]

    def test_optimistic_state_visible_during_commit(self, store, monkeypatch):
        seen = {}

        def fake_set(habit_id, day, completed):
            seen["dates"] = habit(store, "h1")["completed_dates"]
            return {"items": ["2026-03-15", "2026-03-14"]}

        monkeypatch.setattr(repositories, "set_habit_completion", fake_set)
        mutations.toggle_habit_completion("h1", TODAY, True, store=store)

        assert seen["dates"] == ["2026-03-15", "2026-03-14"]

    def test_failure_rolls_back(self, store, monkeypatch):
        def failing_set(habit_id, day, completed):
            raise ApiError(503, "Service unavailable")

        monkeypatch.setattr(repositories, "set_habit_completion", failing_set)
        result = mutations.toggle_habit_completion("h1", TODAY, True, store=store)

        assert result.ok is False
        assert result.message == "Service unavailable"
        assert habit(store, "h1")["completed_dates"] == ["2026-03-14"]

    def test_unexpected_error_rolls_back_and_raises(self, store, monkeypatch):
        def broken_set(habit_id, day, completed):
            raise RuntimeError("boom")

        monkeypatch.setattr(repositories, "set_habit_completion", broken_set)
        with pytest.raises(RuntimeError):
            mutations.toggle_habit_completion("h2", TODAY, True, store=store)

        assert habit(store, "h2")["completed_dates"] == []

    def test_unmark_removes_day(self, store, monkeypatch):
        monkeypatch.setattr(repositories, "set_habit_completion", lambda *args: {"items": []})
        result = mutations.toggle_habit_completion("h1", date(2026, 3, 14), False, store=store)

        assert result.ok is True
        assert habit(store, "h1")["completed_dates"] == []


class TestEntityMutations:
    def test_create_habit_swaps_placeholder(self, store, monkeypatch):
        monkeypatch.setattr(
            repositories,
            "create_habit",
            lambda payload: {"id": "h3", "name": payload["name"], "completed_dates": []},
        )
        result = mutations.create_habit({"name": "Stretch"}, store=store)

        assert result.ok is True
        ids = [item["id"] for item in session_slices.get_items(mutations.HABITS_SLICE, store)]
        assert ids == ["h1", "h2", "h3"]

    def test_create_habit_validation_skips_network(self, store, monkeypatch):
        def unexpected(payload):
            raise AssertionError("should not be called")

        monkeypatch.setattr(repositories, "create_habit", unexpected)
        result = mutations.create_habit({"name": "   "}, store=store)

        assert result.ok is False
        assert "required" in result.message
        assert len(session_slices.get_items(mutations.HABITS_SLICE, store)) == 2

    def test_failed_create_removes_placeholder(self, store, monkeypatch):
        def conflict(payload):
            raise ApiError(409, "Habit already exists")

        monkeypatch.setattr(repositories, "create_habit", conflict)
        result = mutations.create_habit({"name": "Read"}, store=store)

        assert result.ok is False
        assert [item["id"] for item in session_slices.get_items(mutations.HABITS_SLICE, store)] == ["h1", "h2"]

    def test_delete_rolls_back(self, store, monkeypatch):
        def failing_delete(habit_id):
            raise ApiError(None, "Could not reach the server. Please try again.")

        monkeypatch.setattr(repositories, "delete_habit", failing_delete)
        result = mutations.delete_habit("h2", store=store)

        assert result.ok is False
        assert habit(store, "h2") is not None

    def test_toggle_task(self, store, monkeypatch):
        monkeypatch.setattr(
            repositories,
            "toggle_task",
            lambda task_id: {"id": task_id, "title": "Pay rent", "completed": True},
        )
        result = mutations.toggle_task("t1", store=store)

        assert result.ok is True
        assert session_slices.find_item(mutations.TASKS_SLICE, "t1", store)["completed"] is True

    def test_update_task_rollback(self, store, monkeypatch):
        def failing_update(task_id, patch):
            raise ApiError(404, "Task not found")

        monkeypatch.setattr(repositories, "update_task", failing_update)
        result = mutations.update_task("t1", {"title": "Pay rent today"}, store=store)

        assert result.ok is False
        assert session_slices.find_item(mutations.TASKS_SLICE, "t1", store)["title"] == "Pay rent"

    def test_create_event_rejects_inverted_range(self, store):
        result = mutations.create_event(
            {"title": "Standup", "start": date(2026, 3, 15), "end": date(2026, 3, 14)},
            store=store,
        )

        assert result.ok is False
        assert session_slices.get_items(mutations.EVENTS_SLICE, store) == []


    def test_create_task_prepends_then_swaps_placeholder(self, store, monkeypatch):
        seen = {}

        def fake_create(payload):
            seen["items"] = session_slices.snapshot_items(mutations.TASKS_SLICE, store)
            return {"id": "t2", "title": payload["title"], "completed": False}

        monkeypatch.setattr(repositories, "create_task", fake_create)
        result = mutations.create_task({"title": "Call mom"}, store=store)

        assert result.ok is True
        placeholder = seen["items"][0]
        assert placeholder["id"].startswith("pending-")
        assert placeholder["title"] == "Call mom"
        assert placeholder["completed"] is False
        assert [item["id"] for item in session_slices.get_items(mutations.TASKS_SLICE, store)] == ["t2", "t1"]

    def test_create_journal_entry_swaps_placeholder(self, store, monkeypatch):
        session_slices.set_items(
            mutations.JOURNAL_SLICE,
            [{"id": "j1", "title": "Yesterday", "entry_date": "2026-03-14"}],
            store,
        )
        monkeypatch.setattr(
            repositories,
            "create_journal_entry",
            lambda payload: {"id": "j2", **payload},
        )
        result = mutations.create_journal_entry({"title": "Today", "entry_date": TODAY}, store=store)

        assert result.ok is True
        items = session_slices.get_items(mutations.JOURNAL_SLICE, store)
        assert [item["id"] for item in items] == ["j2", "j1"]
        assert not any(str(item["id"]).startswith("pending-") for item in items)

    def test_create_event_appends_and_swaps_placeholder(self, store, monkeypatch):
        session_slices.set_items(mutations.EVENTS_SLICE, [{"id": "e1", "title": "Dentist"}], store)
        monkeypatch.setattr(repositories, "create_event", lambda payload: {"id": "e2", "title": payload["title"]})
        result = mutations.create_event(
            {"title": "Standup", "start": date(2026, 3, 16), "end": date(2026, 3, 16)},
            store=store,
        )

        assert result.ok is True
        assert [item["id"] for item in session_slices.get_items(mutations.EVENTS_SLICE, store)] == ["e1", "e2"]


class TestUnloadedSlices:
    def test_mutation_leaves_slice_for_loader(self, monkeypatch):
        store: dict = {}
        monkeypatch.setattr(
            repositories,
            "toggle_task",
            lambda task_id: {"id": task_id, "title": "Pay rent", "completed": True},
        )
        result = mutations.toggle_task("t1", store=store)

        assert result.ok is True
        assert result.value["completed"] is True
        assert session_slices.is_loaded(mutations.TASKS_SLICE, store) is False

        remote = [
            {"id": "t1", "title": "Pay rent", "completed": True},
            {"id": "t2", "title": "Call mom", "completed": False},
        ]
        monkeypatch.setattr(repositories, "list_tasks", lambda: remote)
        items, error = loaders.load_tasks(store=store)

        assert error is None
        assert items == remote
        assert session_slices.get_items(mutations.TASKS_SLICE, store) == remote

    def test_create_before_load_does_not_hide_existing_rows(self, monkeypatch):
        store: dict = {}
        monkeypatch.setattr(repositories, "create_journal_entry", lambda payload: {"id": "j2", **payload})
        result = mutations.create_journal_entry({"title": "Today", "entry_date": TODAY}, store=store)

        assert result.ok is True
        assert session_slices.is_loaded(mutations.JOURNAL_SLICE, store) is False

        monkeypatch.setattr(
            repositories,
            "list_journal_entries",
            lambda: [{"id": "j2", "title": "Today"}, {"id": "j1", "title": "Yesterday"}],
        )
        items, _ = loaders.load_journal_entries(store=store)

        assert [item["id"] for item in items] == ["j2", "j1"]

    def test_failure_on_unloaded_slice(self, monkeypatch):
        store: dict = {}

        def failing_delete(event_id):
            raise ApiError(404, "Event not found")

        monkeypatch.setattr(repositories, "delete_event", failing_delete)
        result = mutations.delete_event("e9", store=store)

        assert result.ok is False
        assert result.message == "Event not found"
        assert session_slices.is_loaded(mutations.EVENTS_SLICE, store) is False


class TestSlices:
    def test_clear_all_only_touches_slices(self, store):
        store["other"] = 1
        session_slices.clear_all(store)
        assert store == {"other": 1}

    def test_snapshot_is_deep_copy(self, store):
        snapshot = session_slices.snapshot_items(mutations.HABITS_SLICE, store)
        snapshot[0]["completed_dates"].append("2026-01-01")
        assert habit(store, "h1")["completed_dates"] == ["2026-03-14"]
