"""Expose constructed client wrappers."""

from .paycor_api import PaycorAPIClient
from .paycor_auth import OAuthStateEncoder, PaycorOAuthClient

__all__ = [
    "OAuthStateEncoder",
    "PaycorAPIClient",
    "PaycorOAuthClient",
]
