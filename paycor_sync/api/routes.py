"""
FastAPI routes for the Paycor login, callback and fetch flow.
"""

from __future__ import annotations

import html
import logging
import secrets
from datetime import datetime, timedelta, timezone
from http import HTTPStatus
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from paycor_sync.clients.paycor_api import (
    PaycorAPIError,
    PaycorAPIStatusError,
    PaycorDecodeError,
)
from paycor_sync.clients.paycor_auth import OAuthTokenExchangeError
from paycor_sync.core.config import AppSettings
from paycor_sync.dependencies import (
    get_app_settings,
    get_oauth_state_encoder,
    get_paycor_api_client,
    get_paycor_oauth_client,
    get_paycor_token_service,
    get_session_cipher,
    get_session_store,
    get_user_repository,
)
from paycor_sync.services import PaycorTokenService, SessionStore, TokenCipherService

router = APIRouter()
logger = logging.getLogger(__name__)

SESSION_COOKIE = "paycor_session"

_PAGE = """<html><body>
    <h2>{title}</h2>
    {body}
</body></html>"""


async def _current_session_id(
    request: Request,
    store: SessionStore,
    cipher: TokenCipherService,
) -> Optional[str]:
    """Resolve the session named by the sealed cookie, if it still exists."""
    sealed = request.cookies.get(SESSION_COOKIE)
    if not sealed:
        return None
    try:
        session_id = cipher.decrypt(sealed, ttl=store.ttl_seconds)
    except ValueError:
        logger.info("Ignoring unreadable session cookie")
        return None
    if await store.get(session_id) is None:
        return None
    return session_id


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    store: Annotated[SessionStore, Depends(get_session_store)],
    cipher: Annotated[TokenCipherService, Depends(get_session_cipher)],
    token_service: Annotated[PaycorTokenService, Depends(get_paycor_token_service)],
) -> HTMLResponse:
    session_id = await _current_session_id(request, store, cipher)
    if await token_service.peek_token(session_id) is None:
        body = (
            "<p>You are not authenticated.</p>\n"
            '    <a href="/login">Login with Paycor Sandbox</a>'
        )
    else:
        body = (
            "<p>You are authenticated!</p>\n"
            '    <a href="/fetch">Fetch My User Info from Paycor</a>'
        )
    return HTMLResponse(_PAGE.format(title="Paycor Integration Example", body=body))


@router.get("/login")
async def login(
    request: Request,
    store: Annotated[SessionStore, Depends(get_session_store)],
    cipher: Annotated[TokenCipherService, Depends(get_session_cipher)],
    oauth_client: Annotated[Any, Depends(get_paycor_oauth_client)],
    state_encoder: Annotated[Any, Depends(get_oauth_state_encoder)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> Response:
    """Start a login attempt with a fresh state and redirect to Paycor."""
    session_id = await _current_session_id(request, store, cipher)
    if session_id is None:
        session_id = (await store.create()).session_id

    state = state_encoder.encode(
        {
            "nonce": secrets.token_urlsafe(16),
            "session_id": session_id,
            "issued_at": datetime.now(timezone.utc).isoformat(),
        }
    )
    await store.set_pending_state(session_id, state)

    response = RedirectResponse(
        url=oauth_client.build_authorization_url(state=state),
        status_code=HTTPStatus.TEMPORARY_REDIRECT,
    )
    response.set_cookie(
        SESSION_COOKIE,
        cipher.encrypt(session_id),
        httponly=True,
        samesite="lax",
        secure=settings.security.session_cookie_secure,
        max_age=store.ttl_seconds,
    )
    return response


@router.get("/callback")
async def callback(
    request: Request,
    store: Annotated[SessionStore, Depends(get_session_store)],
    cipher: Annotated[TokenCipherService, Depends(get_session_cipher)],
    oauth_client: Annotated[Any, Depends(get_paycor_oauth_client)],
    state_encoder: Annotated[Any, Depends(get_oauth_state_encoder)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    state: str = Query("", description="OAuth state issued by /login."),
    code: str = Query("", description="Authorization code returned by Paycor."),
) -> Response:
    """Validate the state, exchange the code and keep the token for the session."""
    session_id = await _current_session_id(request, store, cipher)
    if session_id is None or not await store.consume_pending_state(session_id, state):
        logger.warning("Invalid OAuth state received on callback")
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail="Invalid OAuth State")

    state_data = state_encoder.decode(state)
    try:
        issued_at = datetime.fromisoformat(state_data["issued_at"])
    except (KeyError, TypeError, ValueError) as exc:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail="Invalid issued_at in state token.",
        ) from exc
    if issued_at.tzinfo is None:
        issued_at = issued_at.replace(tzinfo=timezone.utc)
    if datetime.now(timezone.utc) - issued_at > timedelta(
        seconds=settings.oauth.state_ttl_seconds
    ):
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST, detail="OAuth state token has expired."
        )

    if not code:
        logger.warning("OAuth code not found in callback")
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail="Code not found")

    try:
        token = await oauth_client.exchange_authorization_code(code)
    except OAuthTokenExchangeError as exc:
        logger.error("Token exchange failed: %s", exc)
        raise HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail=f"Failed to exchange token: {exc}",
        ) from exc

    await store.store_token(session_id, token)
    logger.info(
        "Access token received (type: %s, expiry: %s)", token.token_type, token.expires_at
    )
    return RedirectResponse(url="/", status_code=HTTPStatus.TEMPORARY_REDIRECT)


@router.get("/fetch", response_class=HTMLResponse)
async def fetch_user(
    request: Request,
    store: Annotated[SessionStore, Depends(get_session_store)],
    cipher: Annotated[TokenCipherService, Depends(get_session_cipher)],
    token_service: Annotated[PaycorTokenService, Depends(get_paycor_token_service)],
    api_client: Annotated[Any, Depends(get_paycor_api_client)],
    repository: Annotated[Any, Depends(get_user_repository)],
) -> Response:
    """Fetch the user's record from Paycor and upsert it locally."""
    session_id = await _current_session_id(request, store, cipher)
    token = await token_service.get_valid_token(session_id)
    if token is None:
        logger.info("Fetch attempt without valid token, redirecting to login")
        return RedirectResponse(url="/login", status_code=HTTPStatus.TEMPORARY_REDIRECT)

    try:
        user = await api_client.fetch_current_user(token)
    except PaycorAPIStatusError as exc:
        raise HTTPException(
            status_code=HTTPStatus.BAD_GATEWAY,
            detail=f"Error fetching data from Paycor: {exc.status} - {exc.body}",
        ) from exc
    except PaycorDecodeError as exc:
        logger.error("Error decoding Paycor API response: %s", exc)
        raise HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail=f"Error decoding Paycor response: {exc}",
        ) from exc
    except PaycorAPIError as exc:
        logger.error("Error making request to Paycor API: %s", exc)
        raise HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail=f"Error fetching data from Paycor: {exc}",
        ) from exc

    logger.info("Successfully fetched data for Paycor user %s", user.id)

    try:
        await repository.upsert(user)
    except SQLAlchemyError as exc:
        logger.error("Error saving data to database: %s", exc)
        raise HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail=f"Error saving data to database: {exc}",
        ) from exc

    logger.info("Successfully saved user data for ID: %s", user.id)

    body = (
        "<p>Successfully fetched data from Paycor and saved to the database.</p>\n"
        f"    <pre>{html.escape(repr(user))}</pre>\n"
        '    <a href="/">Back Home</a>'
    )
    return HTMLResponse(_PAGE.format(title="Data Fetched and Stored", body=body))


__all__ = ["SESSION_COOKIE", "router"]
