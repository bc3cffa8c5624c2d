from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from backend.auth import require_session_token, require_user
from backend.schemas import ConfirmPayload, OAuthCallbackPayload, SessionResponse, SignInPayload, SignUpPayload
from backend.services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/v1/auth/signup", response_model=SessionResponse)
async def sign_up(payload: SignUpPayload):
    return await auth_service.sign_up(payload.name, payload.email, payload.password)


@router.post("/v1/auth/signin", response_model=SessionResponse)
async def sign_in(payload: SignInPayload):
    return await auth_service.sign_in(payload.email, payload.password)


@router.post("/v1/auth/confirm")
async def confirm(payload: ConfirmPayload):
    user = await auth_service.confirm_account(payload.token)
    return {"ok": True, "user": user}


@router.get("/v1/auth/oauth/{provider}/url")
async def oauth_url(provider: str):
    return {"url": auth_service.build_authorize_url(provider)}


@router.post("/v1/auth/oauth/{provider}/callback", response_model=SessionResponse)
async def oauth_callback(provider: str, payload: OAuthCallbackPayload):
    return await auth_service.complete_oauth(provider, payload.code, payload.state)


@router.post("/v1/auth/signout")
async def sign_out(token: str = Depends(require_session_token)):
    await auth_service.sign_out(token)
    return {"ok": True}


@router.get("/v1/auth/session")
async def current_session(user: dict = Depends(require_user)):
    return {"user": auth_service.public_user(user)}
