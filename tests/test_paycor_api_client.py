"""Tests for the authenticated Paycor API client."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from paycor_sync.clients.paycor_api import (
    PaycorAPIClient,
    PaycorAPIError,
    PaycorAPIStatusError,
    PaycorDecodeError,
)
from paycor_sync.core.config import PaycorSettings
from paycor_sync.models.oauth import OAuthToken

API_ENDPOINT = "https://api.example.com/v1/users/me"


def _client(handler) -> PaycorAPIClient:
    settings = PaycorSettings(
        PAYCOR_CLIENT_ID="client",
        PAYCOR_CLIENT_SECRET="secret",
        PAYCOR_REDIRECT_URL="http://localhost:8080/callback",
        PAYCOR_API_ENDPOINT=API_ENDPOINT,
    )
    return PaycorAPIClient(settings, transport=httpx.MockTransport(handler))


def _token() -> OAuthToken:
    return OAuthToken(
        access_token="access-123",
        token_type="bearer",
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
    )


@pytest.mark.anyio
async def test_fetch_current_user_sends_bearer_token_and_decodes() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"id": "emp-1", "firstName": "Ada", "lastName": "Lovelace", "extra": 1},
        )

    user = await _client(handler).fetch_current_user(_token())

    assert user.id == "emp-1"
    assert user.first_name == "Ada"
    assert user.last_name == "Lovelace"
    assert str(seen[0].url) == API_ENDPOINT
    assert seen[0].method == "GET"
    assert seen[0].headers["authorization"] == "Bearer access-123"


@pytest.mark.anyio
async def test_non_200_response_raises_status_error_with_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, text="insufficient scope")

    with pytest.raises(PaycorAPIStatusError) as exc_info:
        await _client(handler).fetch_current_user(_token())

    assert exc_info.value.status_code == 403
    assert exc_info.value.status == "403 Forbidden"
    assert exc_info.value.body == "insufficient scope"


@pytest.mark.parametrize(
    "body",
    [b"not json", b"[1, 2, 3]", b'{"firstName": "Ada"}'],
)
@pytest.mark.anyio
async def test_unexpected_payload_raises_decode_error(body: bytes) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body)

    with pytest.raises(PaycorDecodeError):
        await _client(handler).fetch_current_user(_token())


@pytest.mark.anyio
async def test_transport_failure_raises_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(PaycorAPIError) as exc_info:
        await _client(handler).fetch_current_user(_token())

    assert not isinstance(exc_info.value, PaycorAPIStatusError)
    assert "timed out" in str(exc_info.value)
