from __future__ import annotations

import logging

import requests
import streamlit as st

from dashboard.constants import FALLBACK_QUOTE, QUOTE_URL
from dashboard.data import repositories
from dashboard.data.api_client import ApiError
from dashboard.data.mutations import EVENTS_SLICE, HABITS_SLICE, JOURNAL_SLICE, TASKS_SLICE
from dashboard.state import session_slices

logger = logging.getLogger(__name__)


@st.cache_data(ttl=3600, show_spinner=False)
def load_quote():
    try:
        response = requests.get(QUOTE_URL, timeout=5)
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as exc:
        logger.info("Quote service unavailable: %s", exc)
        return dict(FALLBACK_QUOTE)
    content = str(payload.get("content") or "").strip()
    if not content:
        return dict(FALLBACK_QUOTE)
    return {"content": content, "author": str(payload.get("author") or "Unknown")}


def _load_slice(slice_name, fetcher, force=False, store=None):
    """Fill a session slice from the backend once per session.

    On failure the previous contents stay untouched and the error is
    returned for the caller to surface.
    """
    if session_slices.is_loaded(slice_name, store) and not force:
        return session_slices.get_items(slice_name, store), None
    try:
        items = fetcher()
    except ApiError as exc:
        logger.warning("Failed to load %s: %s", slice_name, exc)
        return session_slices.get_items(slice_name, store), exc
    session_slices.set_items(slice_name, items, store)
    return items, None


def load_habits(force=False, store=None):
    return _load_slice(HABITS_SLICE, repositories.list_habits, force, store)


def load_journal_entries(force=False, store=None):
    return _load_slice(JOURNAL_SLICE, repositories.list_journal_entries, force, store)


def load_tasks(force=False, store=None):
    return _load_slice(TASKS_SLICE, repositories.list_tasks, force, store)


def load_events(force=False, store=None):
    return _load_slice(EVENTS_SLICE, repositories.list_events, force, store)


def load_dashboard_snapshot(today=None, store=None):
    try:
        payload = repositories.get_bootstrap(today)
    except ApiError as exc:
        logger.warning("Failed to load dashboard snapshot: %s", exc)
        return None, exc
    if not session_slices.is_loaded(HABITS_SLICE, store):
        session_slices.set_items(HABITS_SLICE, payload.get("habits") or [], store)
    return payload, None


def reset_loaded_data(store=None):
    session_slices.clear_all(store)
