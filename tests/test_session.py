from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from dashboard.router import resolve_page
from dashboard.session import SIGNED_IN, SIGNED_OUT, TOKEN_EXPIRED, AuthSession

pytestmark = pytest.mark.unit

USER = {"id": "u1", "name": "Ada", "email": "ada@example.com"}


class TestAuthSession:
    def test_starts_signed_out(self):
        session = AuthSession()
        assert session.is_authenticated is False
        assert session.user_id is None
        assert session.display_name == "there"

    def test_sign_in_notifies_subscribers(self):
        session = AuthSession()
        events = []
        session.subscribe(lambda event, user: events.append((event, user)))

        session.sign_in("token", USER)

        assert session.is_authenticated is True
        assert session.user_id == "u1"
        assert events == [(SIGNED_IN, USER)]

    def test_sign_out_clears_state(self):
        session = AuthSession("token", USER)
        events = []
        session.subscribe(lambda event, user: events.append(event))

        session.sign_out()

        assert session.access_token is None
        assert session.user is None
        assert events == [SIGNED_OUT]

    def test_unsubscribe_is_idempotent(self):
        session = AuthSession()
        events = []
        unsubscribe = session.subscribe(lambda event, user: events.append(event))

        unsubscribe()
        unsubscribe()
        session.sign_in("token", USER)

        assert events == []

    def test_expire_only_fires_with_token(self):
        session = AuthSession()
        events = []
        session.subscribe(lambda event, user: events.append(event))

        session.expire()
        session.sign_in("token", USER)
        session.expire()

        assert events == [SIGNED_IN, TOKEN_EXPIRED]
        assert session.is_authenticated is False

    def test_failing_subscriber_does_not_block_others(self):
        session = AuthSession()
        events = []

        def broken(event, user):
            raise RuntimeError("subscriber bug")

        session.subscribe(broken)
        session.subscribe(lambda event, user: events.append(event))
        session.sign_in("token", USER)

        assert events == [SIGNED_IN]

    def test_display_name_falls_back_to_email(self):
        session = AuthSession("token", {"id": "u1", "name": "", "email": "grace@example.com"})
        assert session.display_name == "grace"

    def test_is_expired(self):
        now = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)
        assert AuthSession("t", USER).is_expired(now) is False
        assert AuthSession("t", USER, (now - timedelta(minutes=1)).isoformat()).is_expired(now) is True
        assert AuthSession("t", USER, (now + timedelta(hours=1)).isoformat()).is_expired(now) is False
        assert AuthSession("t", USER, "not-a-date").is_expired(now) is True


class TestResolvePage:
    @pytest.mark.parametrize("page", ["dashboard", "journal", "tasks", "habits", "insights", "calendar"])
    def test_protected_pages_redirect_to_login(self, page):
        assert resolve_page(page, is_authenticated=False) == "login"

    @pytest.mark.parametrize("page", ["dashboard", "journal", "calendar"])
    def test_protected_pages_when_signed_in(self, page):
        assert resolve_page(page, is_authenticated=True) == page

    def test_unknown_page_defaults(self):
        assert resolve_page("nope", is_authenticated=False) == "home"
        assert resolve_page(None, is_authenticated=True) == "dashboard"

    def test_auth_pages_skip_when_signed_in(self):
        assert resolve_page("login", is_authenticated=True) == "dashboard"
        assert resolve_page("signup", is_authenticated=True) == "dashboard"

    def test_callback_is_public(self):
        assert resolve_page("auth-callback", is_authenticated=False) == "auth-callback"

    def test_case_insensitive(self):
        assert resolve_page(" Journal ", is_authenticated=True) == "journal"
