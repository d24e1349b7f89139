"""
Domain models for OAuth tokens and per-browser sessions.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field

# Tokens are treated as expired slightly early so a request started just
# before expiry does not reach the API with a dead token.
EXPIRY_DELTA = timedelta(seconds=10)


class OAuthToken(BaseModel):
    """Access token issued by the Paycor token endpoint."""

    access_token: str
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = Field(
        None, description="Absolute expiry; None means the token does not expire."
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at - EXPIRY_DELTA < now

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """Return True when the token can be used without refreshing."""
        return bool(self.access_token) and not self.is_expired(now)

    def authorization_header(self) -> str:
        # Some providers answer with a lowercase "bearer"; normalize it.
        token_type = self.token_type or "Bearer"
        if token_type.lower() == "bearer":
            token_type = "Bearer"
        return f"{token_type} {self.access_token}"


class OAuthSession(BaseModel):
    """State tracked for one browser session."""

    session_id: str
    pending_state: Optional[str] = None
    token: Optional[OAuthToken] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


__all__ = ["EXPIRY_DELTA", "OAuthSession", "OAuthToken"]
