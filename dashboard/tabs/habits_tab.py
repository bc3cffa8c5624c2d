from datetime import datetime

import streamlit as st

from dashboard.constants import CATEGORY_COLORS, HABIT_CATEGORIES, HABIT_FREQUENCIES, UNCATEGORIZED_COLOR
from dashboard.data import mutations
from dashboard.data.loaders import load_habits
from dashboard.metrics import group_habits_by_category, habit_streak_summary
from dashboard.ui import report_load_error, report_result, section_title
from dashboard.visualizations import colored_title_html, small_label_html, streak_dots_html


def _toggle_completion(ctx, habit_id, widget_key):
    result = mutations.toggle_habit_completion(
        habit_id,
        ctx.today,
        bool(st.session_state.get(widget_key, False)),
        tz=ctx.tz,
    )
    report_result(result, failure_prefix="Could not update habit")


def render_habit_row(ctx, habit, key_prefix="habits", editable=False):
    summary = habit_streak_summary(habit, ctx.today, tz=ctx.tz)
    widget_key = f"{key_prefix}.done.{habit['id']}"
    # Always derived from the slice so a rolled-back toggle shows its old value.
    st.session_state[widget_key] = summary["completed_today"]
    color = CATEGORY_COLORS.get(habit.get("category"), habit.get("color") or UNCATEGORIZED_COLOR)

    row_cols = st.columns([0.3, 4.2, 3.2, 0.4, 0.4] if editable else [0.3, 4.2, 3.2])
    with row_cols[0]:
        st.checkbox(
            "Done",
            key=widget_key,
            label_visibility="collapsed",
            disabled=str(habit["id"]).startswith("pending-"),
            on_change=_toggle_completion,
            args=(ctx, habit["id"], widget_key),
        )
    with row_cols[1]:
        st.markdown(
            colored_title_html(habit["name"], color, bold=True, description=habit.get("description")),
            unsafe_allow_html=True,
        )
    with row_cols[2]:
        st.markdown(streak_dots_html(summary["dots"], summary["streak"]), unsafe_allow_html=True)
    if editable:
        with row_cols[3]:
            edit_key = f"{key_prefix}.editing.{habit['id']}"
            if st.button("✎", key=f"{key_prefix}.edit.{habit['id']}", type="tertiary"):
                st.session_state[edit_key] = not st.session_state.get(edit_key, False)
        with row_cols[4]:
            if st.button("✕", key=f"{key_prefix}.delete.{habit['id']}", type="tertiary"):
                if report_result(mutations.delete_habit(habit["id"]), "Habit deleted"):
                    st.rerun()
        if st.session_state.get(f"{key_prefix}.editing.{habit['id']}", False):
            _render_habit_form(habit)


def _parse_reminder(value):
    if not value:
        return None
    try:
        return datetime.strptime(str(value)[:5], "%H:%M").time()
    except ValueError:
        return None


def _render_habit_form(habit=None):
    form_key = f"habits.form.{habit['id']}" if habit else "habits.add_form"
    habit = habit or {}
    category_options = [""] + HABIT_CATEGORIES
    current_category = habit.get("category") if habit.get("category") in HABIT_CATEGORIES else ""
    with st.form(key=form_key, clear_on_submit=not habit):
        name = st.text_input("Name", value=habit.get("name", ""), max_chars=60)
        description = st.text_input("Description", value=habit.get("description") or "")
        cols = st.columns(3)
        with cols[0]:
            category = st.selectbox(
                "Category",
                category_options,
                index=category_options.index(current_category),
                format_func=lambda value: value or "None",
            )
        with cols[1]:
            frequency = st.selectbox(
                "Frequency",
                HABIT_FREQUENCIES,
                index=HABIT_FREQUENCIES.index(habit.get("frequency") or "daily"),
            )
        with cols[2]:
            reminder = st.time_input("Reminder", value=_parse_reminder(habit.get("reminder_time")), step=900)
        submitted = st.form_submit_button("Save habit" if habit else "Add habit", type="primary")

    if not submitted:
        return
    payload = {
        "name": name,
        "description": description or None,
        "category": category or None,
        "frequency": frequency,
    }
    if reminder is not None:
        payload["reminder_time"] = reminder.strftime("%H:%M")
    if habit:
        result = mutations.update_habit(habit["id"], payload)
        if report_result(result, "Habit updated"):
            st.session_state[f"habits.editing.{habit['id']}"] = False
            st.rerun()
    elif report_result(mutations.create_habit(payload), "Habit created"):
        st.rerun()


def render_habits_tab(ctx):
    habits, error = load_habits()
    report_load_error(error, "habits")

    section_title(f"Habits for {ctx.today.strftime('%A, %B %d')}")
    if not habits:
        st.info("No habits yet. Add your first habit below.")

    for category, items in group_habits_by_category(habits).items():
        st.markdown(small_label_html(category), unsafe_allow_html=True)
        for habit in items:
            render_habit_row(ctx, habit, editable=True)

    with st.expander("Add a habit", expanded=not habits):
        _render_habit_form()
