import streamlit as st

from dashboard.constants import (
    DEFAULT_PROTECTED_PAGE,
    DEFAULT_PUBLIC_PAGE,
    PAGES,
    PROTECTED_PAGES,
)
from dashboard.tabs.auth_tab import render_auth_callback, render_login, render_signup
from dashboard.tabs.calendar_tab import render_calendar_tab
from dashboard.tabs.dashboard_tab import render_dashboard_tab
from dashboard.tabs.habits_tab import render_habits_tab
from dashboard.tabs.home_tab import render_home_tab
from dashboard.tabs.insights_tab import render_insights_tab
from dashboard.tabs.journal_tab import render_journal_tab
from dashboard.tabs.tasks_tab import render_tasks_tab


def resolve_page(requested, is_authenticated):
    page = str(requested or "").strip().lower()
    if page not in PAGES:
        page = DEFAULT_PROTECTED_PAGE if is_authenticated else DEFAULT_PUBLIC_PAGE
    if page in PROTECTED_PAGES and not is_authenticated:
        return "login"
    if page in ("login", "signup") and is_authenticated:
        return DEFAULT_PROTECTED_PAGE
    return page


def render_router(ctx):
    page = ctx.page

    if page == "home":
        return render_home_tab(ctx)

    if page == "login":
        return render_login(ctx)

    if page == "signup":
        return render_signup(ctx)

    if page == "auth-callback":
        return render_auth_callback(ctx)

    if page == "habits":
        return _render_habits(ctx)

    if page == "journal":
        return _render_journal(ctx)

    if page == "tasks":
        return _render_tasks(ctx)

    if page == "calendar":
        return _render_calendar(ctx)

    if page == "insights":
        return render_insights_tab(ctx)

    return render_dashboard_tab(ctx)


@st.fragment
def _render_habits(ctx):
    render_habits_tab(ctx)


@st.fragment
def _render_journal(ctx):
    render_journal_tab(ctx)


@st.fragment
def _render_tasks(ctx):
    render_tasks_tab(ctx)


@st.fragment
def _render_calendar(ctx):
    render_calendar_tab(ctx)
