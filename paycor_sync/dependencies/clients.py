"""
Factory functions to provide shared settings, clients and services as
FastAPI dependencies.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncEngine

from paycor_sync.clients import OAuthStateEncoder, PaycorAPIClient, PaycorOAuthClient
from paycor_sync.core.config import AppSettings, get_settings
from paycor_sync.database import build_engine
from paycor_sync.services import (
    PaycorTokenService,
    SessionStore,
    TokenCipherService,
    UserRepository,
)


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning application settings."""
    return get_settings()


@lru_cache()
def get_engine() -> AsyncEngine:
    """Provide the process-wide database engine."""
    return build_engine(get_settings().database)


@lru_cache()
def get_oauth_state_encoder() -> OAuthStateEncoder:
    """Provide an OAuth state encoder keyed by the session secret."""
    return OAuthStateEncoder(secret_key=_session_secret())


@lru_cache()
def get_paycor_oauth_client() -> PaycorOAuthClient:
    """Create a singleton Paycor OAuth client."""
    return PaycorOAuthClient(get_settings().paycor)


@lru_cache()
def get_paycor_api_client() -> PaycorAPIClient:
    """Provide the Paycor REST client."""
    return PaycorAPIClient(get_settings().paycor)


@lru_cache()
def get_session_store() -> SessionStore:
    """Provide the process-local session store."""
    return SessionStore(ttl_seconds=get_settings().security.session_ttl_seconds)


@lru_cache()
def get_session_cipher() -> TokenCipherService:
    """Provide symmetric encryption helper for the session cookie."""
    return TokenCipherService(secret=_session_secret())


def get_paycor_token_service(
    store: Annotated[SessionStore, Depends(get_session_store)],
    oauth_client: Annotated[PaycorOAuthClient, Depends(get_paycor_oauth_client)],
) -> PaycorTokenService:
    """Build the token service over the shared session store."""
    return PaycorTokenService(store=store, oauth_client=oauth_client)


def get_user_repository(
    engine: Annotated[AsyncEngine, Depends(get_engine)],
) -> UserRepository:
    """Build a repository bound to the shared engine."""
    return UserRepository(engine)


def _session_secret() -> str:
    settings = get_settings()
    return settings.security.session_secret or settings.paycor.client_secret


__all__ = [
    "get_app_settings",
    "get_engine",
    "get_oauth_state_encoder",
    "get_paycor_api_client",
    "get_paycor_oauth_client",
    "get_paycor_token_service",
    "get_session_cipher",
    "get_session_store",
    "get_user_repository",
]
