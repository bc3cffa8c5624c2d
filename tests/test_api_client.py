"""
HTTP client error mapping with the shared ``requests`` session mocked out.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from dashboard.data import api_client
from dashboard.data.api_client import ApiError

pytestmark = pytest.mark.unit

BASE_URL = "https://api.journalix.test"


def make_response(status_code=200, payload=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.text = text
    response.reason = "Reason"
    if payload is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def token():
    return {"value": "tok-123"}


@pytest.fixture
def unauthorized():
    return MagicMock()


@pytest.fixture
def http(monkeypatch, token, unauthorized):
    secrets = {("app", "API_BASE_URL"): BASE_URL}
    api_client.configure(
        lambda path, default=None: secrets.get(tuple(path), default),
        lambda: token["value"],
        unauthorized,
    )
    mock_request = MagicMock(return_value=make_response(payload={"items": []}))
    monkeypatch.setattr(api_client._SESSION, "request", mock_request)
    yield mock_request
    api_client.configure(None, None)


class TestRequest:
    def test_sends_session_token_and_drops_empty_params(self, http):
        result = api_client.request("GET", "/v1/journal", params={"mood": "happy", "tag": None})

        assert result == {"items": []}
        args, kwargs = http.call_args
        assert args == ("GET", f"{BASE_URL}/v1/journal")
        assert kwargs["params"] == {"mood": "happy"}
        assert kwargs["headers"] == {"X-Session-Token": "tok-123"}

    def test_raw_returns_text(self, http):
        http.return_value = make_response(payload=None, text="Date: 2026-03-15\n")
        assert api_client.request("GET", "/v1/journal/export", raw=True) == "Date: 2026-03-15\n"

    def test_error_detail_is_surfaced(self, http):
        http.return_value = make_response(409, {"detail": "Habit already exists"})

        with pytest.raises(ApiError) as excinfo:
            api_client.request("POST", "/v1/habits", json={"name": "Read"})

        assert excinfo.value.status_code == 409
        assert excinfo.value.detail == "Habit already exists"

    def test_non_json_error_uses_text(self, http):
        http.return_value = make_response(502, None, text="Bad gateway")

        with pytest.raises(ApiError) as excinfo:
            api_client.request("GET", "/v1/tasks")

        assert excinfo.value.detail == "Bad gateway"

    def test_unauthorized_triggers_handler(self, http, unauthorized):
        http.return_value = make_response(401, {"detail": "Session expired"})

        with pytest.raises(ApiError) as excinfo:
            api_client.request("GET", "/v1/bootstrap")

        assert excinfo.value.status_code == 401
        unauthorized.assert_called_once_with()

    def test_unauthenticated_call_skips_handler(self, http, unauthorized):
        http.return_value = make_response(401, {"detail": "Invalid email or password"})

        with pytest.raises(ApiError):
            api_client.request("POST", "/v1/auth/signin", json={}, authenticated=False)

        unauthorized.assert_not_called()
        assert http.call_args.kwargs["headers"] == {}

    def test_network_failure(self, http):
        http.side_effect = requests.ConnectionError("refused")

        with pytest.raises(ApiError) as excinfo:
            api_client.request("GET", "/v1/habits")

        assert excinfo.value.status_code is None
        assert "Could not reach the server" in excinfo.value.detail

    def test_missing_token(self, http, token):
        token["value"] = None

        with pytest.raises(ApiError) as excinfo:
            api_client.request("GET", "/v1/habits")

        assert excinfo.value.status_code == 401
        http.assert_not_called()

    def test_missing_base_url(self, http, monkeypatch):
        monkeypatch.delenv("API_BASE_URL", raising=False)
        api_client.configure(lambda path, default=None: default, lambda: "tok")

        with pytest.raises(ApiError) as excinfo:
            api_client.request("GET", "/v1/habits")

        assert excinfo.value.detail == "API_BASE_URL not configured"
        assert api_client.is_enabled() is False
