"""Admin session endpoints: login, logout and session check."""

import asyncio
from typing import Any

from core.auth import JwtAuthProvider, clear_session_cookie, extract_token, get_auth_provider, session_cookie
from core.clients import get_dynamo_client
from core.config import get_config
from core.errors import AuthenticationError, ConfigurationError, ErrorCode
from core.http import Headers, api_handler, json_response, method_not_allowed, parse_body, route_not_found
from core.models.auth import LoginRequest
from core.services.admin_auth import authenticate


def _login(event: dict[str, Any], headers: Headers) -> dict[str, Any]:
    config = get_config()
    request = LoginRequest.model_validate(parse_body(event))
    user = authenticate(request.username, request.password, get_dynamo_client(), config.admin_users_table)

    provider = get_auth_provider()
    if not isinstance(provider, JwtAuthProvider):
        raise ConfigurationError("Configured auth provider cannot issue tokens")
    token = provider.issue_token(user)

    return json_response(
        200,
        {
            "success": True,
            "sessionToken": token,
            "user": user.to_api(),
            "expiresIn": config.jwt_expiry_seconds,
        },
        {**headers, "Set-Cookie": session_cookie(token, config.jwt_expiry_seconds)},
    )


def _logout(headers: Headers) -> dict[str, Any]:
    return json_response(
        200,
        {"success": True, "message": "Logged out successfully"},
        {**headers, "Set-Cookie": clear_session_cookie()},
    )


def _session(event: dict[str, Any], headers: Headers) -> dict[str, Any]:
    token = extract_token(event)
    if not token:
        raise AuthenticationError("No session token provided", code=ErrorCode.INVALID_TOKEN)

    # AuthProvider methods are async; asyncio.run() bridges them into this sync handler.
    user = asyncio.run(get_auth_provider().verify_token(token))
    return json_response(200, {"valid": True, "user": user.to_api()}, headers)


@api_handler(methods="GET,POST,OPTIONS")
def handler(event: dict[str, Any], headers: Headers) -> dict[str, Any]:
    path = event.get("path") or event.get("resource") or ""
    method = event.get("httpMethod")

    if path.endswith("/login"):
        if method != "POST":
            raise method_not_allowed(method)
        return _login(event, headers)

    if path.endswith("/logout"):
        if method != "POST":
            raise method_not_allowed(method)
        return _logout(headers)

    if path.endswith("/session"):
        if method != "GET":
            raise method_not_allowed(method)
        return _session(event, headers)

    raise route_not_found(event)
