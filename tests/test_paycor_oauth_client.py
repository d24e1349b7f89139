"""Tests for the Paycor OAuth client and the state encoder."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
from fastapi import HTTPException

from paycor_sync.clients.paycor_auth import (
    OAuthStateEncoder,
    OAuthTokenExchangeError,
    PaycorOAuthClient,
)
from paycor_sync.core.config import PaycorSettings

TOKEN_URL = "https://login.example.com/oauth/token"


def _settings() -> PaycorSettings:
    return PaycorSettings(
        PAYCOR_CLIENT_ID="client",
        PAYCOR_CLIENT_SECRET="secret",
        PAYCOR_REDIRECT_URL="http://localhost:8080/callback",
        PAYCOR_AUTH_URL="https://login.example.com/oauth/authorize",
        PAYCOR_TOKEN_URL=TOKEN_URL,
    )


class RecordingTokenEndpoint:
    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.forms: list[dict[str, list[str]]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        assert str(request.url) == TOKEN_URL
        self.forms.append(parse_qs(request.content.decode("utf-8")))
        return self.response


def _client(endpoint: RecordingTokenEndpoint) -> PaycorOAuthClient:
    return PaycorOAuthClient(_settings(), transport=httpx.MockTransport(endpoint))


def test_authorization_url_carries_client_scopes_and_state() -> None:
    client = PaycorOAuthClient(_settings())

    url = client.build_authorization_url(state="state-123")

    parts = urlsplit(url)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == (
        "https://login.example.com/oauth/authorize"
    )
    query = parse_qs(parts.query)
    assert query["client_id"] == ["client"]
    assert query["redirect_uri"] == ["http://localhost:8080/callback"]
    assert query["response_type"] == ["code"]
    assert query["scope"] == ["openid profile offline_access paycor.payroll.read"]
    assert query["state"] == ["state-123"]


@pytest.mark.anyio
async def test_exchange_authorization_code_returns_token() -> None:
    endpoint = RecordingTokenEndpoint(
        httpx.Response(
            200,
            json={
                "access_token": "access",
                "refresh_token": "refresh",
                "token_type": "bearer",
                "expires_in": 3600,
            },
        )
    )
    before = datetime.now(timezone.utc)

    token = await _client(endpoint).exchange_authorization_code("the-code")

    assert token.access_token == "access"
    assert token.refresh_token == "refresh"
    assert token.token_type == "bearer"
    assert token.expires_at is not None
    assert before + timedelta(seconds=3590) < token.expires_at
    assert token.is_valid()

    form = endpoint.forms[0]
    assert form["grant_type"] == ["authorization_code"]
    assert form["code"] == ["the-code"]
    assert form["redirect_uri"] == ["http://localhost:8080/callback"]
    assert form["client_id"] == ["client"]
    assert form["client_secret"] == ["secret"]


@pytest.mark.anyio
async def test_exchange_without_expiry_yields_non_expiring_token() -> None:
    endpoint = RecordingTokenEndpoint(httpx.Response(200, json={"access_token": "access"}))

    token = await _client(endpoint).exchange_authorization_code("the-code")

    assert token.expires_at is None
    assert token.refresh_token is None
    assert token.token_type == "Bearer"
    assert token.is_valid()


@pytest.mark.anyio
async def test_exchange_error_carries_provider_message() -> None:
    endpoint = RecordingTokenEndpoint(
        httpx.Response(400, json={"error": "invalid_grant"})
    )

    with pytest.raises(OAuthTokenExchangeError) as exc_info:
        await _client(endpoint).exchange_authorization_code("bad-code")

    assert "400" in str(exc_info.value)
    assert "invalid_grant" in str(exc_info.value)


@pytest.mark.anyio
async def test_exchange_rejects_payload_without_access_token() -> None:
    endpoint = RecordingTokenEndpoint(httpx.Response(200, json={"token_type": "bearer"}))

    with pytest.raises(OAuthTokenExchangeError):
        await _client(endpoint).exchange_authorization_code("the-code")


@pytest.mark.anyio
async def test_exchange_wraps_transport_errors() -> None:
    def fail(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = PaycorOAuthClient(_settings(), transport=httpx.MockTransport(fail))

    with pytest.raises(OAuthTokenExchangeError) as exc_info:
        await client.exchange_authorization_code("the-code")

    assert "connection refused" in str(exc_info.value)


@pytest.mark.anyio
async def test_refresh_keeps_refresh_token_when_not_rotated() -> None:
    endpoint = RecordingTokenEndpoint(
        httpx.Response(200, json={"access_token": "new-access", "expires_in": 60})
    )

    token = await _client(endpoint).refresh_token("old-refresh")

    assert token.access_token == "new-access"
    assert token.refresh_token == "old-refresh"
    assert endpoint.forms[0]["grant_type"] == ["refresh_token"]
    assert endpoint.forms[0]["refresh_token"] == ["old-refresh"]


@pytest.mark.anyio
async def test_password_credentials_grant_posts_user_credentials() -> None:
    endpoint = RecordingTokenEndpoint(
        httpx.Response(200, json={"access_token": "access", "expires_in": 60})
    )

    token = await _client(endpoint).password_credentials_token("jane", "hunter2")

    assert token.access_token == "access"
    form = endpoint.forms[0]
    assert form["grant_type"] == ["password"]
    assert form["username"] == ["jane"]
    assert form["password"] == ["hunter2"]


def test_state_encoder_roundtrip() -> None:
    encoder = OAuthStateEncoder(secret_key="state-secret")
    payload = {"nonce": "abc", "session_id": "s1", "issued_at": "2026-01-01T00:00:00+00:00"}

    assert encoder.decode(encoder.encode(payload)) == payload


@pytest.mark.parametrize("tampered", ["not-base64!!", ""])
def test_state_encoder_rejects_malformed_values(tampered: str) -> None:
    encoder = OAuthStateEncoder(secret_key="state-secret")

    with pytest.raises(HTTPException) as exc_info:
        encoder.decode(tampered)

    assert exc_info.value.status_code == 400


def test_state_encoder_rejects_foreign_signature() -> None:
    state = OAuthStateEncoder(secret_key="other-secret").encode({"nonce": "abc"})

    with pytest.raises(HTTPException) as exc_info:
        OAuthStateEncoder(secret_key="state-secret").decode(state)

    assert exc_info.value.status_code == 400
