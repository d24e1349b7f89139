"""
Helpers for retrieving and refreshing Paycor OAuth tokens.
"""

from __future__ import annotations

import logging
from typing import Optional

from paycor_sync.clients import PaycorOAuthClient
from paycor_sync.clients.paycor_auth import OAuthTokenExchangeError
from paycor_sync.models.oauth import OAuthToken
from paycor_sync.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class PaycorTokenService:
    """Manages access to the tokens held for each session."""

    def __init__(self, store: SessionStore, oauth_client: PaycorOAuthClient) -> None:
        self._store = store
        self._oauth = oauth_client

    async def peek_token(self, session_id: Optional[str]) -> Optional[OAuthToken]:
        """Return the session's token when it is valid or can be refreshed."""
        if not session_id:
            return None
        token = await self._store.get_token(session_id)
        if token is None:
            return None
        if token.is_valid() or token.refresh_token:
            return token
        return None

    async def get_valid_token(self, session_id: Optional[str]) -> Optional[OAuthToken]:
        """
        Return a usable token for the session, refreshing it when expired.

        ``None`` means the user has to log in again.
        """
        if not session_id:
            return None
        token = await self._store.get_token(session_id)
        if token is None:
            return None
        if token.is_valid():
            return token
        if not token.refresh_token:
            logger.info("Token for session expired and cannot be refreshed")
            return None

        try:
            refreshed = await self._oauth.refresh_token(token.refresh_token)
        except OAuthTokenExchangeError as exc:
            logger.warning("Refreshing Paycor token failed: %s", exc)
            await self._store.clear_token(session_id)
            return None

        await self._store.store_token(session_id, refreshed)
        logger.info(
            "Access token refreshed (type: %s, expiry: %s)",
            refreshed.token_type,
            refreshed.expires_at,
        )
        return refreshed


__all__ = ["PaycorTokenService"]
