from __future__ import annotations

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field("sqlite+aiosqlite:///./journalix.db", alias="DATABASE_URL")

    session_ttl_hours: int = Field(720, alias="SESSION_TTL_HOURS")
    require_email_confirmation: bool = Field(False, alias="REQUIRE_EMAIL_CONFIRMATION")
    password_hash_iterations: int = Field(240_000, alias="PASSWORD_HASH_ITERATIONS")

    oauth_google_client_id: str | None = Field(None, alias="OAUTH_GOOGLE_CLIENT_ID")
    oauth_google_client_secret: str | None = Field(None, alias="OAUTH_GOOGLE_CLIENT_SECRET")
    oauth_redirect_uri: str | None = Field(None, alias="OAUTH_REDIRECT_URI")
    oauth_state_secret: str = Field("change-me", alias="OAUTH_STATE_SECRET")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def oauth_provider_configured(self, provider: str) -> bool:
        if provider == "google":
            return bool(self.oauth_google_client_id and self.oauth_google_client_secret and self.oauth_redirect_uri)
        return False


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None


# For local dev convenience only.
if os.getenv("BACKEND_DEBUG_SETTINGS"):
    print(get_settings())
