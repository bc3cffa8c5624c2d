from __future__ import annotations

from fastapi import Header, HTTPException

from backend.errors import AuthError
from backend.services import auth_service


def _extract_token(authorization: str | None, x_session_token: str | None) -> str | None:
    if x_session_token:
        return x_session_token.strip()
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return None


async def require_session_token(
    authorization: str | None = Header(default=None),
    x_session_token: str | None = Header(default=None, alias="X-Session-Token"),
) -> str:
    token = _extract_token(authorization, x_session_token)
    if not token:
        raise HTTPException(status_code=401, detail="Missing session token")
    return token


async def require_user(
    authorization: str | None = Header(default=None),
    x_session_token: str | None = Header(default=None, alias="X-Session-Token"),
) -> dict:
    token = _extract_token(authorization, x_session_token)
    if not token:
        raise HTTPException(status_code=401, detail="Missing session token")
    try:
        return await auth_service.resolve_session(token)
    except AuthError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc


async def require_user_id(
    authorization: str | None = Header(default=None),
    x_session_token: str | None = Header(default=None, alias="X-Session-Token"),
) -> str:
    user = await require_user(authorization=authorization, x_session_token=x_session_token)
    return user["id"]
