"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the startup checks and
the console entry point share a consistent configuration surface.
"""

from functools import lru_cache
from typing import Annotated, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_ENV_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
)


class PaycorSettings(BaseSettings):
    """Configuration required for interacting with the Paycor APIs."""

    model_config = _ENV_CONFIG

    client_id: str = Field(..., validation_alias="PAYCOR_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="PAYCOR_CLIENT_SECRET")
    redirect_url: AnyHttpUrl = Field(..., validation_alias="PAYCOR_REDIRECT_URL")
    auth_url: str = Field(
        "https://login-sandbox.paycor.com/oauth/authorize",
        validation_alias="PAYCOR_AUTH_URL",
    )
    token_url: str = Field(
        "https://login-sandbox.paycor.com/oauth/token",
        validation_alias="PAYCOR_TOKEN_URL",
    )
    api_endpoint: str = Field(
        "https://api-sandbox.paycor.com/v1/users/me",
        validation_alias="PAYCOR_API_ENDPOINT",
        description="Endpoint returning the authenticated user's record.",
    )
    http_timeout: float = Field(10.0, validation_alias="PAYCOR_HTTP_TIMEOUT")
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("openid", "profile", "offline_access", "paycor.payroll.read"),
        validation_alias="PAYCOR_SCOPES",
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma or space separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(scope for scope in value.replace(",", " ").split() if scope)


class DatabaseSettings(BaseSettings):
    """Connection settings for the relational store."""

    model_config = _ENV_CONFIG

    url: str = Field(..., validation_alias="POSTGRES_DSN")
    ping_retry_delay: float = Field(5.0, validation_alias="DATABASE_PING_RETRY_DELAY")
    create_schema: bool = Field(True, validation_alias="DATABASE_CREATE_SCHEMA")

    @field_validator("url")
    @classmethod
    def _normalize_dsn(cls, value: str) -> str:
        """Map libpq style DSNs onto the asyncpg SQLAlchemy driver."""
        parts = urlsplit(value)
        if parts.scheme not in {"postgres", "postgresql"}:
            return value
        query = [
            ("ssl" if key == "sslmode" else key, item)
            for key, item in parse_qsl(parts.query, keep_blank_values=True)
        ]
        return urlunsplit(
            parts._replace(scheme="postgresql+asyncpg", query=urlencode(query))
        )


class OAuthSettings(BaseSettings):
    """OAuth flow configuration."""

    model_config = _ENV_CONFIG

    state_ttl_seconds: int = Field(900, validation_alias="OAUTH_STATE_TTL")


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = _ENV_CONFIG

    session_secret: Optional[str] = Field(
        None,
        validation_alias="SESSION_SECRET",
        description="Secret used to derive the key sealing the session cookie.",
    )
    session_cookie_secure: bool = Field(False, validation_alias="SESSION_COOKIE_SECURE")
    session_ttl_seconds: int = Field(
        86400,
        validation_alias="SESSION_TTL",
        description="Idle sessions and session cookies older than this are discarded.",
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = _ENV_CONFIG

    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    paycor: PaycorSettings = Field(default_factory=PaycorSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "OAuthSettings",
    "PaycorSettings",
    "SecuritySettings",
    "get_settings",
]
