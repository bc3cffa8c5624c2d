import logging
from datetime import datetime

import streamlit as st

from dashboard.auth import get_secret, get_user_timezone, load_local_env, refresh_session
from dashboard.context import DashboardContext
from dashboard.data import api_client
from dashboard.data.loaders import reset_loaded_data
from dashboard.header import render_navbar
from dashboard.logging_config import configure_logging
from dashboard.router import render_router, resolve_page
from dashboard.session import SIGNED_OUT, TOKEN_EXPIRED, get_auth_session
from dashboard.theme import inject_theme_css

st.set_page_config(page_title="Journalix", page_icon="📓", layout="wide")

load_local_env()
configure_logging(get_secret(("app", "DASHBOARD_LOG_LEVEL")))
logger = logging.getLogger("dashboard")

auth_session = get_auth_session()
api_client.configure(get_secret, lambda: get_auth_session().access_token, lambda: get_auth_session().expire())


def _on_auth_change(event, user):
    if event in (SIGNED_OUT, TOKEN_EXPIRED):
        reset_loaded_data()
    if event == TOKEN_EXPIRED:
        st.session_state["auth.expired_notice"] = True
    logger.info("Auth event %s", event)


if not st.session_state.get("auth.subscribed"):
    auth_session.subscribe(_on_auth_change)
    st.session_state["auth.subscribed"] = True

refresh_session(auth_session)
if st.session_state.pop("auth.expired_notice", False):
    st.toast("Your session expired. Please sign in again.", icon="🔒")

theme_meta = inject_theme_css()
tz = get_user_timezone()
requested_page = st.query_params.get("page")
page = resolve_page(requested_page, auth_session.is_authenticated)
if page != requested_page and page != "auth-callback":
    st.query_params["page"] = page

if not api_client.is_enabled():
    st.error("API_BASE_URL is not configured. Set it in .env or .streamlit/secrets.toml.")
    st.stop()

context = DashboardContext(
    auth_session=auth_session,
    today=datetime.now(tz).date(),
    page=page,
    tz=tz,
    theme=theme_meta,
)

render_navbar(context)
render_router(context)
