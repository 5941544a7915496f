"""Authentication abstraction layer."""

from core.auth.interface import AuthProvider, AuthUser, get_auth_provider
from core.auth.jwt_provider import JwtAuthProvider
from core.auth.tokens import clear_session_cookie, extract_token, session_cookie

__all__ = [
    "AuthProvider",
    "AuthUser",
    "JwtAuthProvider",
    "clear_session_cookie",
    "extract_token",
    "get_auth_provider",
    "session_cookie",
]
