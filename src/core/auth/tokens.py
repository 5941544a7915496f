"""Session token transport: request extraction and the ``sessionToken`` cookie."""

from typing import Any

COOKIE_NAME = "sessionToken"


def _bearer(value: str | None) -> str | None:
    if not value:
        return None
    if value.startswith("Bearer "):
        return value[len("Bearer "):].strip() or None
    if " " not in value:
        return value
    return None


def _cookie_token(cookie_header: str | None) -> str | None:
    if not cookie_header:
        return None
    for part in cookie_header.split(";"):
        name, _, value = part.strip().partition("=")
        if name == COOKIE_NAME and value:
            return value.strip()
    return None


def extract_token(event: dict[str, Any]) -> str | None:
    """Token from the authorizer input, the Authorization header, or the session cookie."""
    token = _bearer(event.get("authorizationToken"))
    if token:
        return token

    headers = event.get("headers") or {}
    token = _bearer(headers.get("Authorization") or headers.get("authorization"))
    if token:
        return token

    return _cookie_token(headers.get("Cookie") or headers.get("cookie"))


def session_cookie(token: str, max_age: int) -> str:
    return f"{COOKIE_NAME}={token}; HttpOnly; Secure; SameSite=Strict; Max-Age={max_age}; Path=/"


def clear_session_cookie() -> str:
    return f"{COOKIE_NAME}=; HttpOnly; Secure; SameSite=Strict; Max-Age=0; Path=/"
