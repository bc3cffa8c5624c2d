"""
Authentication endpoints: sign-up, sign-in, confirmation, sign-out.
"""

from __future__ import annotations

import pytest

from backend import repositories
from backend.services import auth_service
from backend.settings import reset_settings

pytestmark = pytest.mark.api


@pytest.fixture
def google_oauth(backend_env):
    backend_env.setenv("OAUTH_GOOGLE_CLIENT_ID", "client-id")
    backend_env.setenv("OAUTH_GOOGLE_CLIENT_SECRET", "client-secret")
    backend_env.setenv("OAUTH_REDIRECT_URI", "http://localhost:8501/?page=auth-callback")
    reset_settings()


class TestSignUp:
    async def test_sign_up_returns_session(self, register):
        payload = await register(email="Ada@Example.com ")

        assert payload["access_token"]
        assert payload["expires_at"]
        assert payload["confirmation_required"] is False
        assert payload["user"]["email"] == "ada@example.com"
        assert payload["user"]["name"] == "Ada"
        assert "password_hash" not in payload["user"]

    async def test_duplicate_email_conflicts(self, client, register):
        await register()
        response = await client.post(
            "/v1/auth/signup",
            json={"name": "Ada again", "email": "ADA@example.com", "password": "another-pass"},
        )

        assert response.status_code == 409

    async def test_short_password_rejected(self, client):
        response = await client.post(
            "/v1/auth/signup",
            json={"name": "Ada", "email": "ada@example.com", "password": "short"},
        )

        assert response.status_code == 400
        assert "at least" in response.json()["detail"]

    async def test_invalid_email_rejected(self, client):
        response = await client.post(
            "/v1/auth/signup",
            json={"name": "Ada", "email": "not-an-email", "password": "correct-horse"},
        )

        assert response.status_code == 400

    async def test_missing_field_is_bad_request(self, client):
        response = await client.post("/v1/auth/signup", json={"email": "ada@example.com"})

        assert response.status_code == 400


class TestSignIn:
    async def test_sign_in(self, client, session):
        response = await client.post(
            "/v1/auth/signin",
            json={"email": "ada@example.com", "password": "correct-horse"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["access_token"] != session["access_token"]
        assert body["user"]["id"] == session["user"]["id"]

    async def test_wrong_password(self, client, session):
        response = await client.post(
            "/v1/auth/signin",
            json={"email": "ada@example.com", "password": "wrong-horse"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    async def test_unknown_email(self, client):
        response = await client.post(
            "/v1/auth/signin",
            json={"email": "nobody@example.com", "password": "correct-horse"},
        )

        assert response.status_code == 401


class TestSession:
    async def test_current_session(self, client, session, auth_headers):
        response = await client.get("/v1/auth/session", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "ada@example.com"

    async def test_bearer_header_accepted(self, client, session):
        response = await client.get(
            "/v1/auth/session",
            headers={"Authorization": f"Bearer {session['access_token']}"},
        )

        assert response.status_code == 200

    async def test_missing_token(self, client):
        response = await client.get("/v1/habits")

        assert response.status_code == 401

    async def test_unknown_token(self, client):
        response = await client.get("/v1/habits", headers={"X-Session-Token": "forged"})

        assert response.status_code == 401

    async def test_sign_out_revokes_token(self, client, auth_headers):
        response = await client.post("/v1/auth/signout", headers=auth_headers)
        assert response.status_code == 200

        response = await client.get("/v1/auth/session", headers=auth_headers)
        assert response.status_code == 401


class TestEmailConfirmation:
    async def test_confirmation_flow(self, client, backend_env):
        backend_env.setenv("REQUIRE_EMAIL_CONFIRMATION", "true")
        reset_settings()

        response = await client.post(
            "/v1/auth/signup",
            json={"name": "Ada", "email": "ada@example.com", "password": "correct-horse"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["confirmation_required"] is True
        assert body["access_token"] is None

        credentials = {"email": "ada@example.com", "password": "correct-horse"}
        response = await client.post("/v1/auth/signin", json=credentials)
        assert response.status_code == 403

        user = await repositories.get_user_by_email("ada@example.com")
        response = await client.post("/v1/auth/confirm", json={"token": user["confirmation_token"]})
        assert response.status_code == 200
        assert response.json()["user"]["email_confirmed"] is True

        response = await client.post("/v1/auth/signin", json=credentials)
        assert response.status_code == 200

    async def test_unknown_confirmation_token(self, client):
        response = await client.post("/v1/auth/confirm", json={"token": "nope"})

        assert response.status_code == 401


class TestOAuth:
    async def test_unconfigured_provider(self, client):
        response = await client.get("/v1/auth/oauth/google/url")

        assert response.status_code == 400

    async def test_unsupported_provider(self, client):
        response = await client.get("/v1/auth/oauth/myspace/url")

        assert response.status_code == 400

    async def test_authorize_url(self, client, google_oauth):
        response = await client.get("/v1/auth/oauth/google/url")

        assert response.status_code == 200
        url = response.json()["url"]
        assert url.startswith(auth_service.GOOGLE_AUTH_URL)
        assert "client_id=client-id" in url

    async def test_callback_creates_user(self, client, google_oauth, monkeypatch):
        async def fake_profile(code):
            assert code == "auth-code"
            return {"email": "Lin@Example.com", "name": "Lin", "picture": "https://img.example.com/lin.png"}

        monkeypatch.setattr(auth_service, "_fetch_google_profile", fake_profile)
        state = auth_service._encode_state("google")

        response = await client.post(
            "/v1/auth/oauth/google/callback",
            json={"code": "auth-code", "state": state},
        )

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["email"] == "lin@example.com"
        assert user["auth_provider"] == "google"
        assert user["email_confirmed"] is True

    async def test_callback_rejects_tampered_state(self, client, google_oauth):
        response = await client.post(
            "/v1/auth/oauth/google/callback",
            json={"code": "auth-code", "state": "tampered"},
        )

        assert response.status_code == 401
