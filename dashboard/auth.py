from __future__ import annotations

import logging
import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import streamlit as st

from dashboard.data import api_client

logger = logging.getLogger(__name__)

ENV_PATH = os.path.join(os.path.dirname(__file__), "..", ".env")

ENV_FALLBACK_KEYS = {
    ("app", "API_BASE_URL"): "API_BASE_URL",
    ("app", "USER_TIMEZONE"): "USER_TIMEZONE",
    ("app", "DASHBOARD_LOG_LEVEL"): "DASHBOARD_LOG_LEVEL",
}


def load_local_env():
    if not os.path.exists(ENV_PATH):
        return
    with open(ENV_PATH, "r", encoding="utf-8") as env_file:
        for raw_line in env_file:
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def get_secret(path, default=None):
    env_key = ENV_FALLBACK_KEYS.get(tuple(path))
    if env_key:
        env_value = os.getenv(env_key)
        if env_value:
            return env_value
    current = st.secrets
    for key in path:
        try:
            if key not in current:
                return default
            current = current[key]
        except Exception:
            # st.secrets raises when no secrets.toml exists at all.
            return default
    return current


def get_user_timezone():
    name = get_secret(("app", "USER_TIMEZONE")) or ""
    if not name:
        return None
    try:
        return ZoneInfo(str(name))
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown USER_TIMEZONE %s; falling back to server local time", name)
        return None


def _apply_session_payload(auth_session, payload):
    token = payload.get("access_token")
    if not token:
        return False
    auth_session.sign_in(token, payload.get("user"), payload.get("expires_at"))
    return True


def sign_in_with_password(auth_session, email, password):
    email = (email or "").strip()
    if not email or not password:
        raise ValueError("Email and password are required")
    payload = api_client.request(
        "POST",
        "/v1/auth/signin",
        json={"email": email, "password": password},
        authenticated=False,
    )
    _apply_session_payload(auth_session, payload)
    return payload


def sign_up_with_password(auth_session, name, email, password, confirm_password):
    name = (name or "").strip()
    email = (email or "").strip()
    if not name or not email or not password:
        raise ValueError("Name, email and password are required")
    if password != confirm_password:
        raise ValueError("Passwords do not match")
    payload = api_client.request(
        "POST",
        "/v1/auth/signup",
        json={"name": name, "email": email, "password": password},
        authenticated=False,
    )
    _apply_session_payload(auth_session, payload)
    return payload


def oauth_authorize_url(provider):
    payload = api_client.request("GET", f"/v1/auth/oauth/{provider}/url", authenticated=False)
    return payload["url"]


def complete_oauth_sign_in(auth_session, provider, code, state):
    if not code or not state:
        raise ValueError("Missing authorization code")
    payload = api_client.request(
        "POST",
        f"/v1/auth/oauth/{provider}/callback",
        json={"code": code, "state": state},
        authenticated=False,
    )
    _apply_session_payload(auth_session, payload)
    return payload


def sign_out(auth_session):
    if auth_session.access_token:
        try:
            api_client.request("POST", "/v1/auth/signout")
        except api_client.ApiError as exc:
            logger.info("Sign-out request failed, clearing local session anyway: %s", exc)
    auth_session.sign_out()


def refresh_session(auth_session):
    if not auth_session.is_authenticated:
        return False
    if auth_session.is_expired():
        auth_session.expire()
        return False
    return True
