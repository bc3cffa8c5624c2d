import logging
import os
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

_SECRET_GETTER = None
_TOKEN_GETTER = None
_UNAUTHORIZED_HANDLER = None


class ApiError(Exception):
    def __init__(self, status_code: int | None, detail: str):
        super().__init__(f"API error {status_code}: {detail}" if status_code else detail)
        self.status_code = status_code
        self.detail = detail


def _build_session():
    session = requests.Session()
    retry = Retry(
        total=2,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=("GET", "POST", "PUT", "PATCH", "DELETE"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=10)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


_SESSION = _build_session()


def configure(secret_getter, token_getter, unauthorized_handler=None):
    global _SECRET_GETTER, _TOKEN_GETTER, _UNAUTHORIZED_HANDLER
    _SECRET_GETTER = secret_getter
    _TOKEN_GETTER = token_getter
    _UNAUTHORIZED_HANDLER = unauthorized_handler


def _get_secret(path, default=None):
    if _SECRET_GETTER is None:
        return default
    return _SECRET_GETTER(path, default)


def api_base_url():
    return (
        _get_secret(("app", "API_BASE_URL"))
        or _get_secret(("API_BASE_URL",))
        or os.getenv("API_BASE_URL")
        or ""
    )


def session_token():
    return _TOKEN_GETTER() if _TOKEN_GETTER else None


def is_enabled():
    return bool(api_base_url())


def _error_detail(response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason or "Unknown error"
    if isinstance(payload, dict) and "detail" in payload:
        return str(payload["detail"])
    return str(payload)


def request(
    method: str,
    path: str,
    params: dict | None = None,
    json: dict | None = None,
    timeout: int = 10,
    authenticated: bool = True,
    raw: bool = False,
) -> Any:
    base = api_base_url().rstrip("/")
    if not base:
        raise ApiError(None, "API_BASE_URL not configured")
    headers = {}
    if authenticated:
        token = session_token()
        if not token:
            raise ApiError(401, "Not signed in")
        headers["X-Session-Token"] = token
    if params:
        params = {key: value for key, value in params.items() if value is not None}
    url = f"{base}{path}"
    try:
        response = _SESSION.request(method, url, params=params, json=json, headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        logger.warning("Request %s %s failed: %s", method, path, exc)
        raise ApiError(None, "Could not reach the server. Please try again.") from exc
    if not response.ok:
        detail = _error_detail(response)
        logger.info("API %s %s -> %s %s", method, path, response.status_code, detail)
        if response.status_code == 401 and authenticated and _UNAUTHORIZED_HANDLER is not None:
            _UNAUTHORIZED_HANDLER()
        raise ApiError(response.status_code, detail)
    if response.status_code == 204:
        return None
    if raw:
        return response.text
    return response.json()
