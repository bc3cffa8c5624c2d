from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import secrets
from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode

import httpx
from cryptography.fernet import Fernet, InvalidToken

from backend import repositories
from backend.errors import AuthError, OAuthError, UnconfirmedAccountError
from backend.settings import get_settings

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

SUPPORTED_PROVIDERS = ("google",)
OAUTH_STATE_TTL_SECONDS = 600
MIN_PASSWORD_LENGTH = 8


def _fernet() -> Fernet:
    settings = get_settings()
    digest = hashlib.sha256(settings.oauth_state_secret.encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def hash_password(password: str, iterations: int | None = None) -> str:
    iterations = iterations or get_settings().password_hash_iterations
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"pbkdf2_sha256${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored_hash: str | None) -> bool:
    if not stored_hash:
        return False
    try:
        algorithm, iterations, salt_hex, digest_hex = stored_hash.split("$", 3)
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        bytes.fromhex(salt_hex),
        int(iterations),
    )
    return hmac.compare_digest(digest.hex(), digest_hex)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def validate_email(email: str) -> str:
    clean = str(email or "").strip().lower()
    local, _, domain = clean.partition("@")
    if not local or "." not in domain or " " in clean:
        raise ValueError("Please enter a valid email address")
    return clean


def public_user(user: dict) -> dict:
    return {
        "id": user["id"],
        "name": user["name"],
        "email": user["email"],
        "avatar_url": user.get("avatar_url"),
        "auth_provider": user.get("auth_provider") or "password",
        "email_confirmed": bool(user.get("email_confirmed")),
    }


async def issue_session(user: dict) -> dict:
    settings = get_settings()
    token = secrets.token_urlsafe(32)
    expires_at = (datetime.now(timezone.utc) + timedelta(hours=settings.session_ttl_hours)).isoformat()
    await repositories.store_session(hash_token(token), user["id"], expires_at)
    logger.info("Issued session for user %s", user["id"])
    return {"access_token": token, "expires_at": expires_at, "user": public_user(user)}


async def resolve_session(token: str) -> dict:
    if not token:
        raise AuthError("Missing session token")
    record = await repositories.get_session(hash_token(token))
    if not record or record.get("revoked_at"):
        raise AuthError("Invalid session")
    expires_at = datetime.fromisoformat(str(record["expires_at"]))
    if expires_at <= datetime.now(timezone.utc):
        raise AuthError("Session expired")
    user = await repositories.get_user(record["user_id"])
    if not user:
        raise AuthError("Invalid session")
    return user


async def sign_up(name: str, email: str, password: str) -> dict:
    settings = get_settings()
    email = validate_email(email)
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    confirmation_token = secrets.token_urlsafe(24) if settings.require_email_confirmation else None
    user = await repositories.create_user(
        name,
        email,
        hash_password(password),
        auth_provider="password",
        email_confirmed=not settings.require_email_confirmation,
        confirmation_token=confirmation_token,
    )
    if settings.require_email_confirmation:
        # Delivery of the confirmation link is left to the deployment's mail relay.
        logger.info("Account %s created; confirmation pending", user["id"])
        return {"access_token": None, "expires_at": None, "user": public_user(user), "confirmation_required": True}
    return await issue_session(user)


async def confirm_account(token: str) -> dict:
    user = await repositories.confirm_user(token)
    if not user:
        raise AuthError("Invalid or already used confirmation token")
    return public_user(user)


async def sign_in(email: str, password: str) -> dict:
    settings = get_settings()
    user = await repositories.get_user_by_email(str(email or ""))
    if not user or not verify_password(password or "", user.get("password_hash")):
        raise AuthError("Invalid email or password")
    if settings.require_email_confirmation and not user.get("email_confirmed"):
        raise UnconfirmedAccountError("Please confirm your email before signing in")
    return await issue_session(user)


async def sign_out(token: str) -> None:
    await repositories.revoke_session(hash_token(token))


def _encode_state(provider: str) -> str:
    payload = {"provider": provider, "nonce": secrets.token_urlsafe(12)}
    return _fernet().encrypt(json.dumps(payload).encode("utf-8")).decode("utf-8")


def _decode_state(state: str, provider: str) -> dict:
    try:
        raw = _fernet().decrypt(state.encode("utf-8"), ttl=OAUTH_STATE_TTL_SECONDS)
    except InvalidToken as exc:
        raise OAuthError("OAuth state is invalid or expired") from exc
    payload = json.loads(raw)
    if payload.get("provider") != provider:
        raise OAuthError("OAuth state does not match provider")
    return payload


def _require_provider(provider: str) -> None:
    if provider not in SUPPORTED_PROVIDERS:
        raise ValueError(f"Unsupported OAuth provider: {provider}")
    if not get_settings().oauth_provider_configured(provider):
        raise ValueError(f"OAuth provider {provider} is not configured")


def build_authorize_url(provider: str) -> str:
    _require_provider(provider)
    settings = get_settings()
    params = {
        "client_id": settings.oauth_google_client_id,
        "redirect_uri": settings.oauth_redirect_uri,
        "response_type": "code",
        "scope": "openid email profile",
        "access_type": "online",
        "prompt": "select_account",
        "state": _encode_state(provider),
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


async def _fetch_google_profile(code: str) -> dict:
    settings = get_settings()
    payload = {
        "code": code,
        "client_id": settings.oauth_google_client_id,
        "client_secret": settings.oauth_google_client_secret,
        "redirect_uri": settings.oauth_redirect_uri,
        "grant_type": "authorization_code",
    }
    async with httpx.AsyncClient(timeout=20) as client:
        response = await client.post(GOOGLE_TOKEN_URL, data=payload)
        if response.status_code >= 400:
            raise OAuthError(f"Google token exchange failed ({response.status_code})")
        access_token = response.json().get("access_token")
        if not access_token:
            raise OAuthError("Google did not return an access token")
        profile_response = await client.get(
            GOOGLE_USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )
    if profile_response.status_code >= 400:
        raise OAuthError(f"Google profile fetch failed ({profile_response.status_code})")
    return profile_response.json()


async def complete_oauth(provider: str, code: str, state: str) -> dict:
    _require_provider(provider)
    _decode_state(state, provider)
    try:
        profile = await _fetch_google_profile(code)
    except httpx.HTTPError as exc:
        logger.warning("OAuth transport failure for %s: %s", provider, exc)
        raise OAuthError("Could not reach the OAuth provider") from exc
    email = str(profile.get("email") or "").strip().lower()
    if not email:
        raise OAuthError("OAuth provider did not share an email address")
    user = await repositories.get_user_by_email(email)
    if not user:
        user = await repositories.create_user(
            profile.get("name") or "",
            email,
            None,
            auth_provider=provider,
            email_confirmed=True,
            avatar_url=profile.get("picture"),
        )
    return await issue_session(user)
