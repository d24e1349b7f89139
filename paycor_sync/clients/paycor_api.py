"""Thin async client for the Paycor REST API."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from paycor_sync.core.config import PaycorSettings
from paycor_sync.models.oauth import OAuthToken
from paycor_sync.schemas import PaycorUser

logger = logging.getLogger(__name__)


class PaycorAPIError(Exception):
    """Raised when the Paycor API cannot be reached."""


class PaycorAPIStatusError(PaycorAPIError):
    """Raised when the Paycor API answers with a non-200 status."""

    def __init__(self, status_code: int, reason: str, body: str) -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"{self.status} - {body}")

    @property
    def status(self) -> str:
        return f"{self.status_code} {self.reason}".strip()


class PaycorDecodeError(PaycorAPIError):
    """Raised when a Paycor response body does not have the expected shape."""


class PaycorAPIClient:
    """Issue authenticated requests against the Paycor API."""

    def __init__(
        self,
        settings: PaycorSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._paycor = settings
        self._transport = transport

    async def fetch_current_user(self, token: OAuthToken) -> PaycorUser:
        headers = {
            "Authorization": token.authorization_header(),
            "Accept": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._paycor.http_timeout, transport=self._transport
            ) as client:
                response = await client.get(self._paycor.api_endpoint, headers=headers)
        except httpx.HTTPError as exc:
            raise PaycorAPIError(str(exc) or exc.__class__.__name__) from exc

        if response.status_code != httpx.codes.OK:
            logger.warning(
                "Paycor API returned non-OK status: %s %s",
                response.status_code,
                response.reason_phrase,
            )
            raise PaycorAPIStatusError(
                response.status_code, response.reason_phrase, response.text
            )

        try:
            return PaycorUser.model_validate_json(response.content)
        except ValidationError as exc:
            raise PaycorDecodeError(str(exc)) from exc


__all__ = [
    "PaycorAPIClient",
    "PaycorAPIError",
    "PaycorAPIStatusError",
    "PaycorDecodeError",
]
