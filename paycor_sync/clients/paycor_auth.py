"""
Paycor OAuth utilities.

These helpers build the authorization redirect, protect the state parameter
and talk to the Paycor token endpoint.
"""

from __future__ import annotations

import base64
import binascii
import hmac
import json
from datetime import datetime, timedelta, timezone
from hashlib import sha256
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from fastapi import HTTPException, status

from paycor_sync.core.config import PaycorSettings
from paycor_sync.models.oauth import OAuthToken


class OAuthStateEncoder:
    """Encode and decode OAuth state values to guard against tampering."""

    def __init__(self, secret_key: str) -> None:
        self._secret_key = secret_key.encode("utf-8")

    def encode(self, payload: Dict[str, Any]) -> str:
        serialized = json.dumps(payload, separators=(",", ":"), sort_keys=True)
        signature = hmac.new(self._secret_key, serialized.encode("utf-8"), sha256).digest()
        return base64.urlsafe_b64encode(signature + serialized.encode("utf-8")).decode("utf-8")

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            decoded = base64.urlsafe_b64decode(token.encode("utf-8"))
        except (binascii.Error, ValueError) as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Malformed OAuth state.",
            ) from exc
        signature, serialized = decoded[:32], decoded[32:]
        expected_signature = hmac.new(self._secret_key, serialized, sha256).digest()
        if not hmac.compare_digest(signature, expected_signature):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid OAuth state signature.",
            )
        return json.loads(serialized)


class OAuthTokenExchangeError(Exception):
    """Raised when the token endpoint returns an error."""


class PaycorOAuthClient:
    """Build Paycor authorization URLs and obtain tokens from the token endpoint."""

    def __init__(
        self,
        settings: PaycorSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._paycor = settings
        self._transport = transport

    def build_authorization_url(self, state: str) -> str:
        """Construct the Paycor consent URL."""
        params = {
            "client_id": self._paycor.client_id,
            "redirect_uri": str(self._paycor.redirect_url),
            "response_type": "code",
            "scope": " ".join(self._paycor.scopes),
            "state": state,
        }
        separator = "&" if "?" in self._paycor.auth_url else "?"
        return f"{self._paycor.auth_url}{separator}{urlencode(params)}"

    async def exchange_authorization_code(self, code: str) -> OAuthToken:
        """Exchange an authorization code for an access/refresh token pair."""
        return await self._request_token(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": str(self._paycor.redirect_url),
            }
        )

    async def refresh_token(self, refresh_token: str) -> OAuthToken:
        """
        Refresh the access token using a stored refresh token.

        Providers may omit the refresh token from the response when it is not
        rotated; the caller's refresh token is kept in that case.
        """
        token = await self._request_token(
            {"grant_type": "refresh_token", "refresh_token": refresh_token}
        )
        if not token.refresh_token:
            token = token.model_copy(update={"refresh_token": refresh_token})
        return token

    async def password_credentials_token(self, username: str, password: str) -> OAuthToken:
        """Obtain a token with the resource owner password credentials grant."""
        return await self._request_token(
            {
                "grant_type": "password",
                "username": username,
                "password": password,
                "scope": " ".join(self._paycor.scopes),
            }
        )

    async def _request_token(self, payload: Dict[str, str]) -> OAuthToken:
        payload = {
            **payload,
            "client_id": self._paycor.client_id,
            "client_secret": self._paycor.client_secret,
        }
        requested_at = datetime.now(timezone.utc)

        try:
            async with httpx.AsyncClient(
                timeout=self._paycor.http_timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self._paycor.token_url,
                    data=payload,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            raise OAuthTokenExchangeError(f"token request failed: {exc}") from exc

        if response.status_code != status.HTTP_200_OK:
            raise OAuthTokenExchangeError(
                f"token endpoint returned {response.status_code}: {response.text}"
            )

        try:
            token_payload = response.json()
        except ValueError as exc:
            raise OAuthTokenExchangeError(
                f"token endpoint returned invalid JSON: {exc}"
            ) from exc
        if not isinstance(token_payload, dict):
            raise OAuthTokenExchangeError("Unexpected token payload returned from Paycor.")

        access_token = token_payload.get("access_token")
        if not access_token:
            raise OAuthTokenExchangeError("Incomplete token payload returned from Paycor.")

        expires_at = None
        expires_in = token_payload.get("expires_in")
        if expires_in:
            try:
                expires_at = requested_at + timedelta(seconds=int(expires_in))
            except (TypeError, ValueError) as exc:
                raise OAuthTokenExchangeError(
                    f"Invalid expires_in returned from Paycor: {expires_in!r}"
                ) from exc

        return OAuthToken(
            access_token=access_token,
            token_type=token_payload.get("token_type") or "Bearer",
            refresh_token=token_payload.get("refresh_token") or None,
            expires_at=expires_at,
        )


__all__ = [
    "OAuthStateEncoder",
    "OAuthTokenExchangeError",
    "PaycorOAuthClient",
]
