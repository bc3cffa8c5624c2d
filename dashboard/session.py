from __future__ import annotations

import logging
from datetime import datetime, timezone

import streamlit as st

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_EXPIRED = "TOKEN_EXPIRED"

SESSION_STATE_KEY = "auth.session"


class AuthSession:
    """Signed-in state for one browser session.

    Views receive this object through the page context instead of reading a
    global. Subscribers are called with ``(event, user)`` on every change.
    """

    def __init__(self, access_token=None, user=None, expires_at=None):
        self.access_token = access_token
        self.user = user
        self.expires_at = expires_at
        self._subscribers = []

    @property
    def is_authenticated(self):
        return bool(self.access_token and self.user)

    @property
    def user_id(self):
        return (self.user or {}).get("id")

    @property
    def display_name(self):
        user = self.user or {}
        return user.get("name") or (user.get("email") or "").split("@")[0] or "there"

    def subscribe(self, callback):
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, event, user):
        for callback in list(self._subscribers):
            try:
                callback(event, user)
            except Exception:
                logger.exception("Auth subscriber failed for %s", event)

    def sign_in(self, access_token, user, expires_at=None):
        self.access_token = access_token
        self.user = user
        self.expires_at = expires_at
        self._notify(SIGNED_IN, user)

    def sign_out(self):
        self._clear()
        self._notify(SIGNED_OUT, None)

    def expire(self):
        if not self.access_token:
            return
        self._clear()
        self._notify(TOKEN_EXPIRED, None)

    def is_expired(self, now=None):
        if not self.expires_at:
            return False
        now = now or datetime.now(timezone.utc)
        try:
            expires_at = datetime.fromisoformat(str(self.expires_at))
        except ValueError:
            return True
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at <= now

    def _clear(self):
        self.access_token = None
        self.user = None
        self.expires_at = None


def get_auth_session() -> AuthSession:
    if SESSION_STATE_KEY not in st.session_state:
        st.session_state[SESSION_STATE_KEY] = AuthSession()
    return st.session_state[SESSION_STATE_KEY]
