"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_app_settings,
    get_engine,
    get_oauth_state_encoder,
    get_paycor_api_client,
    get_paycor_oauth_client,
    get_paycor_token_service,
    get_session_cipher,
    get_session_store,
    get_user_repository,
)

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
