import html
from datetime import datetime

import streamlit as st

from dashboard.constants import DASHBOARD_TASK_LIMIT
from dashboard.data.loaders import load_dashboard_snapshot
from dashboard.state import session_slices
from dashboard.data.mutations import HABITS_SLICE
from dashboard.tabs.habits_tab import render_habit_row
from dashboard.tabs.home_tab import render_quote_card
from dashboard.tabs.journal_tab import mood_label
from dashboard.tabs.tasks_tab import render_task_row
from dashboard.ui import navigate, report_load_error, section_title
from dashboard.visualizations import small_label_html, tag_chips_html


def greeting(now=None):
    hour = (now or datetime.now()).hour
    if hour < 12:
        return "Good morning"
    if hour < 18:
        return "Good afternoon"
    return "Good evening"


def render_dashboard_tab(ctx):
    snapshot, error = load_dashboard_snapshot(ctx.today)
    report_load_error(error, "your dashboard")
    snapshot = snapshot or {}

    st.header(f"{greeting(datetime.now(ctx.tz))}, {ctx.auth_session.display_name}!")
    st.caption(ctx.today.strftime("%A, %B %d, %Y"))
    render_quote_card()

    left, right = st.columns([1.3, 1])
    with left:
        section_title("Today's habits")
        habits = session_slices.get_items(HABITS_SLICE)
        if not habits:
            st.caption("No habits yet.")
        for habit in habits:
            render_habit_row(ctx, habit, key_prefix="dashboard.habits")
        if st.button("Manage habits", key="dashboard.to_habits", type="tertiary"):
            navigate("habits")

        section_title("Open tasks")
        open_tasks = (snapshot.get("open_tasks") or [])[:DASHBOARD_TASK_LIMIT]
        if not open_tasks:
            st.caption("Nothing on your list. Enjoy the day!")
        for task in open_tasks:
            render_task_row(ctx, task, key_prefix="dashboard.tasks", editable=False)
        remaining = int(snapshot.get("open_task_count") or 0) - len(open_tasks)
        if remaining > 0:
            st.caption(f"+{remaining} more open tasks")
        if st.button("View all tasks", key="dashboard.to_tasks", type="tertiary"):
            navigate("tasks")

    with right:
        section_title("Latest journal entry")
        latest = (snapshot.get("latest_journal") or [None])[0]
        if latest:
            with st.container(border=True):
                st.markdown(f"**{latest.get('title')}**")
                st.markdown(
                    small_label_html(latest.get("entry_date"), mood_label(latest.get("mood"))),
                    unsafe_allow_html=True,
                )
                content = latest.get("content") or ""
                st.write(content[:280] + ("…" if len(content) > 280 else ""))
                if latest.get("tags"):
                    st.markdown(tag_chips_html(latest["tags"]), unsafe_allow_html=True)
        else:
            st.caption("You haven't written anything yet.")
        if st.button("Write in journal", key="dashboard.to_journal", type="tertiary"):
            navigate("journal")

        section_title("Upcoming events")
        events = snapshot.get("upcoming_events") or []
        if not events:
            st.caption("No events in the next 7 days.")
        for event in events:
            start = datetime.fromisoformat(str(event["start"]).replace("Z", "+00:00"))
            when = start.strftime("%a %d") if event.get("all_day") else start.strftime("%a %d %H:%M")
            st.markdown(
                f"{small_label_html(when, tag='span')} {html.escape(str(event.get('title') or ''))}",
                unsafe_allow_html=True,
            )
