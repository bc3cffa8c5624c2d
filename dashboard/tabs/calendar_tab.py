from datetime import datetime, time, timedelta

import streamlit as st

from dashboard.constants import EVENT_COLOR_NAMES, EVENT_COLORS
from dashboard.data import mutations
from dashboard.data.loaders import load_events
from dashboard.ui import report_load_error, report_result, section_title
from dashboard.visualizations import (
    build_month_calendar_html,
    colored_title_html,
    events_by_day,
    month_last_day,
    shift_month,
    small_label_html,
)


def _get_month(today):
    if "calendar.month" not in st.session_state:
        st.session_state["calendar.month"] = today.replace(day=1)
    return st.session_state["calendar.month"]


def _shift(months):
    st.session_state["calendar.month"] = shift_month(st.session_state["calendar.month"], months)


def _reset(today):
    st.session_state["calendar.month"] = today.replace(day=1)


def _render_event_form(today):
    with st.form(key="calendar.add_form", clear_on_submit=True):
        title = st.text_input("Title")
        cols = st.columns(4)
        with cols[0]:
            day = st.date_input("Date", value=today)
        with cols[1]:
            start_time = st.time_input("Start", value=time(9, 0), step=900)
        with cols[2]:
            end_time = st.time_input("End", value=time(10, 0), step=900)
        with cols[3]:
            color = st.selectbox(
                "Color",
                EVENT_COLORS,
                format_func=lambda value: EVENT_COLOR_NAMES.get(value, value),
            )
        all_day = st.checkbox("All day")
        description = st.text_input("Description")
        submitted = st.form_submit_button("Add event", type="primary")

    if not submitted:
        return
    if all_day:
        start = datetime.combine(day, time.min)
        end = datetime.combine(day, time(23, 59))
    else:
        start = datetime.combine(day, start_time)
        end = datetime.combine(day, end_time)
    payload = {
        "title": title.strip(),
        "start": start,
        "end": end,
        "all_day": all_day,
        "color": color,
        "description": description or None,
    }
    if report_result(mutations.create_event(payload), "Event added"):
        st.rerun()


def _format_event_time(event):
    if event.get("all_day"):
        return "All day"
    start = event.get("start")
    if isinstance(start, str):
        start = datetime.fromisoformat(start.replace("Z", "+00:00"))
    return start.strftime("%H:%M") if isinstance(start, datetime) else ""


def render_calendar_tab(ctx):
    events, error = load_events()
    report_load_error(error, "events")

    month = _get_month(ctx.today)
    nav_cols = st.columns([0.5, 0.7, 0.5, 4])
    with nav_cols[0]:
        st.button("‹", key="calendar.prev", on_click=_shift, args=(-1,), use_container_width=True)
    with nav_cols[1]:
        st.button("Today", key="calendar.today", on_click=_reset, args=(ctx.today,), use_container_width=True)
    with nav_cols[2]:
        st.button("›", key="calendar.next", on_click=_shift, args=(1,), use_container_width=True)
    with nav_cols[3]:
        section_title(month.strftime("%B %Y"))

    st.markdown(build_month_calendar_html(month, events, ctx.today), unsafe_allow_html=True)

    with st.expander("Add an event"):
        _render_event_form(ctx.today)

    grouped = events_by_day(events)
    month_events = []
    seen = set()
    for day in (month + timedelta(days=offset) for offset in range(month_last_day(month).day)):
        for event in grouped.get(day, []):
            if event["id"] not in seen:
                seen.add(event["id"])
                month_events.append((day, event))

    section_title("Events this month")
    if not month_events:
        st.caption("No events scheduled.")
    for day, event in month_events:
        row_cols = st.columns([1.2, 0.8, 5, 0.4])
        with row_cols[0]:
            st.markdown(small_label_html(day.strftime("%a %d"), tag="span"), unsafe_allow_html=True)
        with row_cols[1]:
            st.markdown(small_label_html(_format_event_time(event), tag="span"), unsafe_allow_html=True)
        with row_cols[2]:
            color = event.get("color") or EVENT_COLORS[0]
            st.markdown(colored_title_html(event.get("title"), color), unsafe_allow_html=True)
        with row_cols[3]:
            if not str(event["id"]).startswith("pending-") and st.button(
                "✕", key=f"calendar.delete.{event['id']}", type="tertiary"
            ):
                if report_result(mutations.delete_event(event["id"]), "Event deleted"):
                    st.rerun()

