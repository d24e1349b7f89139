"""Service layer exports."""

from .paycor_tokens import PaycorTokenService
from .session_store import SessionStore
from .token_cipher import TokenCipherService
from .user_repository import UserRepository

__all__ = [
    "PaycorTokenService",
    "SessionStore",
    "TokenCipherService",
    "UserRepository",
]
