from __future__ import annotations

import html
import calendar as _calendar
from datetime import date, datetime, timedelta

from dashboard.constants import CALENDAR_DAY_LABELS, CALENDAR_EVENTS_PER_CELL, EVENT_COLORS
from dashboard.theme import get_active_theme


def _active_theme():
    return get_active_theme()[1]


def month_last_day(reference_date):
    days = _calendar.monthrange(reference_date.year, reference_date.month)[1]
    return reference_date.replace(day=days)


def shift_month(reference_date, months):
    month_index = reference_date.month - 1 + months
    year = reference_date.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, 1)


def apply_common_plot_style(fig, title, show_xgrid=True, show_ygrid=True):
    theme = _active_theme()
    fig.update_layout(
        title=title,
        title_font=dict(color=theme["text_main"], size=16, family="Inter"),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=theme["text_main"], family="Inter"),
        margin=dict(l=40, r=20, t=40, b=30),
        xaxis=dict(
            showgrid=show_xgrid,
            gridcolor=theme["plot_grid"],
            tickfont=dict(color=theme["text_soft"]),
            zeroline=False,
            showline=True,
            linecolor=theme["border"],
        ),
        yaxis=dict(
            showgrid=show_ygrid,
            gridcolor=theme["plot_grid"],
            zeroline=False,
            tickfont=dict(color=theme["text_soft"]),
            showline=True,
            linecolor=theme["border"],
        ),
    )
    return fig


def completion_line_chart(frame, title="Habits completed per day"):
    import plotly.graph_objects as go

    theme = _active_theme()
    fig = go.Figure(
        data=go.Scatter(
            x=frame["label"],
            y=frame["completed"],
            mode="lines+markers",
            line=dict(color=theme["button"], width=2),
            marker=dict(size=6, line=dict(width=1, color=theme["plot_marker_line"])),
            hovertemplate="%{x}: %{y} completed<extra></extra>",
        )
    )
    fig = apply_common_plot_style(fig, title, show_xgrid=False)
    fig.update_yaxes(rangemode="tozero", dtick=1)
    return fig


def category_pie_chart(frame, title="Habits by category"):
    import plotly.graph_objects as go

    fig = go.Figure(
        data=go.Pie(
            labels=frame["category"],
            values=frame["count"],
            marker=dict(colors=list(frame["color"])),
            hole=0.45,
            textinfo="label+percent",
        )
    )
    fig = apply_common_plot_style(fig, title, show_xgrid=False, show_ygrid=False)
    fig.update_layout(showlegend=False)
    return fig


def streak_dots_html(dots, streak):
    cells = []
    for day, done in dots:
        state = "done" if done else ""
        cells.append(f"<span class='streak-dot {state}' title='{day.strftime('%a %b %d')}'></span>")
    label = f"🔥 {streak} day streak" if streak else "No active streak"
    return f"<div class='streak-dots'>{''.join(cells)}<span class='streak-badge'>{label}</span></div>"


def tag_chips_html(tags):
    return "".join(f"<span class='tag-chip'>#{html.escape(str(tag))}</span>" for tag in tags or [])


def small_label_html(*parts, tag="div"):
    text = " • ".join(html.escape(str(part)) for part in parts if part not in (None, ""))
    return f"<{tag} class='small-label'>{text}</{tag}>"


def colored_title_html(title, color, bold=False, description=None):
    """Colored bullet followed by user-entered text, all escaped."""
    label = html.escape(str(title or "Untitled"))
    if bold:
        label = f"<b>{label}</b>"
    markup = f"<span style='color:{html.escape(str(color), quote=True)}'>●</span> {label}"
    if description:
        markup += small_label_html(description)
    return markup


def _event_day(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()


def events_by_day(events):
    grouped = {}
    for event in events:
        try:
            start_day = _event_day(event.get("start"))
            end_day = _event_day(event.get("end") or event.get("start"))
        except ValueError:
            continue
        current = start_day
        while current <= end_day:
            grouped.setdefault(current, []).append(event)
            current += timedelta(days=1)
    return grouped


def month_grid(reference_date):
    """Sunday-first weeks covering the month of ``reference_date``."""
    return _calendar.Calendar(firstweekday=6).monthdatescalendar(reference_date.year, reference_date.month)


def build_month_calendar_html(reference_date, events, today=None):
    today = today or date.today()
    grouped = events_by_day(events)
    header = "".join(f"<th>{label}</th>" for label in CALENDAR_DAY_LABELS)
    rows = []
    for week in month_grid(reference_date):
        cells = []
        for day in week:
            classes = ["calendar-cell"]
            if day.month != reference_date.month:
                classes.append("outside")
            if day == today:
                classes.append("today")
            day_events = grouped.get(day, [])
            items = []
            for index, event in enumerate(day_events[:CALENDAR_EVENTS_PER_CELL]):
                color = event.get("color") or EVENT_COLORS[index % len(EVENT_COLORS)]
                title = html.escape(str(event.get("title") or "Untitled"))
                items.append(f"<div class='cal-event' style='background:{html.escape(color)}' title='{title}'>{title}</div>")
            hidden = len(day_events) - CALENDAR_EVENTS_PER_CELL
            if hidden > 0:
                items.append(f"<div class='cal-more'>+{hidden} more</div>")
            cells.append(
                f"<td class='{' '.join(classes)}'><div class='calendar-day'>{day.day}</div>{''.join(items)}</td>"
            )
        rows.append(f"<tr>{''.join(cells)}</tr>")
    return (
        "<table class='calendar-table'>"
        f"<thead><tr>{header}</tr></thead>"
        f"<tbody>{''.join(rows)}</tbody>"
        "</table>"
    )
