import streamlit as st

from dashboard.data.loaders import load_habits, load_journal_entries, load_tasks
from dashboard.metrics import (
    category_distribution,
    completion_rate,
    completion_rate_label,
    compute_achievements,
    daily_completion_series,
    habit_streak_summary,
)
from dashboard.ui import report_load_error, section_title
from dashboard.visualizations import category_pie_chart, completion_line_chart

ACHIEVEMENT_ICONS = {"habit": "🏅", "journal": "📖", "todo": "✅", "general": "⭐"}


def _render_achievement(achievement):
    icon = ACHIEVEMENT_ICONS.get(achievement["category"], "⭐")
    state = "" if achievement["earned"] else "locked"
    st.markdown(
        (
            f"<div class='achievement {state}'><span style='font-size:22px'>{icon}</span>"
            f"<div><b>{achievement['name']}</b>"
            f"<div class='small-label'>{achievement['description']}</div></div></div>"
        ),
        unsafe_allow_html=True,
    )
    if achievement["earned"]:
        st.caption("Earned")
    else:
        st.progress(
            achievement["progress"] / achievement["max_progress"],
            text=f"{achievement['progress']} / {achievement['max_progress']}",
        )


def render_insights_tab(ctx):
    habits, habits_error = load_habits()
    entries, journal_error = load_journal_entries()
    tasks, tasks_error = load_tasks()
    report_load_error(habits_error, "habits")
    report_load_error(journal_error, "journal entries")
    report_load_error(tasks_error, "tasks")

    section_title("Progress insights")
    rate = completion_rate(habits, ctx.today, tz=ctx.tz)
    summaries = [habit_streak_summary(habit, ctx.today, tz=ctx.tz) for habit in habits]
    metric_cols = st.columns(4)
    metric_cols[0].metric("7-day completion", f"{rate}%", completion_rate_label(rate), delta_color="off")
    metric_cols[1].metric("Best current streak", max((s["streak"] for s in summaries), default=0))
    metric_cols[2].metric("Longest streak", max((s["longest"] for s in summaries), default=0))
    metric_cols[3].metric("Journal entries", len(entries))

    chart_cols = st.columns([1.5, 1])
    with chart_cols[0]:
        frame = daily_completion_series(habits, ctx.today, tz=ctx.tz)
        st.plotly_chart(completion_line_chart(frame), use_container_width=True, config={"displayModeBar": False})
    with chart_cols[1]:
        categories = category_distribution(habits)
        if categories.empty:
            st.caption("Add habits to see the category breakdown.")
        else:
            st.plotly_chart(category_pie_chart(categories), use_container_width=True, config={"displayModeBar": False})

    section_title("Achievements")
    achievements = compute_achievements(habits, entries, tasks, tz=ctx.tz)
    achievement_cols = st.columns(len(achievements))
    for col, achievement in zip(achievement_cols, achievements):
        with col:
            _render_achievement(achievement)
