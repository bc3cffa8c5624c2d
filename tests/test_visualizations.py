from __future__ import annotations

from datetime import date

import pytest

from dashboard.tabs.journal_tab import parse_tags
from dashboard.tabs.tasks_tab import filter_tasks, sort_tasks
from dashboard.visualizations import (
    build_month_calendar_html,
    colored_title_html,
    events_by_day,
    month_grid,
    month_last_day,
    shift_month,
    small_label_html,
    tag_chips_html,
)

pytestmark = pytest.mark.unit


class TestMonthHelpers:
    def test_month_last_day(self):
        assert month_last_day(date(2028, 2, 10)) == date(2028, 2, 29)

    @pytest.mark.parametrize(
        "start,months,expected",
        [
            (date(2026, 1, 31), -1, date(2025, 12, 1)),
            (date(2026, 12, 5), 1, date(2027, 1, 1)),
            (date(2026, 3, 15), 0, date(2026, 3, 1)),
        ],
    )
    def test_shift_month(self, start, months, expected):
        assert shift_month(start, months) == expected

    def test_grid_starts_on_sunday(self):
        weeks = month_grid(date(2026, 3, 1))
        assert weeks[0][0] == date(2026, 3, 1)
        assert weeks[0][0].weekday() == 6
        assert all(len(week) == 7 for week in weeks)


class TestCalendarHtml:
    def test_multi_day_event_spans_days(self):
        grouped = events_by_day([{"title": "Trip", "start": "2026-03-02T08:00:00", "end": "2026-03-04T20:00:00"}])
        assert sorted(grouped) == [date(2026, 3, 2), date(2026, 3, 3), date(2026, 3, 4)]

    def test_overflow_label(self):
        events = [
            {"title": f"Event {index}", "start": "2026-03-10T09:00:00", "end": "2026-03-10T10:00:00"}
            for index in range(5)
        ]
        markup = build_month_calendar_html(date(2026, 3, 1), events, today=date(2026, 3, 10))
        assert markup.count("class='cal-event'") == 3
        assert "+2 more" in markup
        assert "calendar-cell today" in markup

    def test_titles_are_escaped(self):
        markup = build_month_calendar_html(
            date(2026, 3, 1),
            [{"title": "<b>x</b>", "start": "2026-03-10T09:00:00"}],
        )
        assert "<b>x</b>" not in markup
        assert tag_chips_html(["<i>"]) == "<span class='tag-chip'>#&lt;i&gt;</span>"


class TestListHelpers:
    def test_parse_tags(self):
        assert parse_tags("#work, Family\nwork,  ") == ["work", "Family"]

    def test_sort_and_filter_tasks(self):
        tasks = [
            {"id": "a", "title": "Low", "priority": "low", "completed": False, "due_date": None},
            {"id": "b", "title": "High", "priority": "high", "completed": False, "due_date": "2026-03-20"},
            {"id": "c", "title": "Done", "priority": "high", "completed": True, "due_date": "2026-03-01"},
        ]
        assert [task["id"] for task in filter_tasks(tasks, "Active")] == ["a", "b"]
        assert [task["id"] for task in filter_tasks(tasks, "Completed")] == ["c"]
        assert [task["id"] for task in filter_tasks(tasks, priority="high")] == ["b", "c"]
        assert [task["id"] for task in sort_tasks(tasks)] == ["b", "a", "c"]


class TestUserTextMarkup:
    def test_small_label_escapes_and_skips_empty_parts(self):
        assert small_label_html("2026-03-15", "", None, "<script>") == (
            "<div class='small-label'>2026-03-15 • &lt;script&gt;</div>"
        )
        assert small_label_html("Tue 10", tag="span") == "<span class='small-label'>Tue 10</span>"

    def test_colored_title_escapes_name_and_description(self):
        markup = colored_title_html("<img src=x onerror=alert(1)>", "#22C55E", bold=True, description="a & b")

        assert "<img" not in markup
        assert "<b>&lt;img src=x onerror=alert(1)&gt;</b>" in markup
        assert "<div class='small-label'>a &amp; b</div>" in markup

    def test_colored_title_escapes_color_attribute(self):
        markup = colored_title_html("Gym", "red' onmouseover='x")

        assert "style='color:red&#x27; onmouseover=&#x27;x'" in markup
        assert markup.endswith("Gym")
