"""Token storage and the authenticated HTTP client."""

from yatijapp_tui.auth.client import AuthClient, refresh_token
from yatijapp_tui.auth.token import ReadWriteLock, Token, TokenStore

__all__ = [
    "AuthClient",
    "ReadWriteLock",
    "Token",
    "TokenStore",
    "refresh_token",
]
