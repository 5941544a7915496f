"""Secrets Manager lookups, cached for the lifetime of a warm Lambda container.

Each secret holds exactly one value in memory. Local development can bypass
Secrets Manager by setting the plain environment variable instead.
"""

import logging
from os import environ

from botocore.exceptions import BotoCoreError, ClientError

from core.clients import get_secrets_client
from core.config import get_config
from core.errors import ConfigurationError

logger = logging.getLogger(__name__)

_cached_jwt_secret: str | None = None
_cached_maps_api_key: str | None = None


def _reset_secrets() -> None:
    global _cached_jwt_secret, _cached_maps_api_key
    _cached_jwt_secret = None
    _cached_maps_api_key = None


def _fetch_secret(secret_name: str) -> str:
    try:
        response = get_secrets_client().get_secret_value(SecretId=secret_name)
    except (ClientError, BotoCoreError) as e:
        logger.error("Failed to retrieve secret %s: %s", secret_name, e)
        raise ConfigurationError(f"Unable to load secret {secret_name}") from e

    value = response.get("SecretString") or ""
    if not value:
        raise ConfigurationError(f"Secret {secret_name} is empty")
    return value


def get_jwt_secret() -> str:
    """Return the HS256 signing secret shared by admin-auth and the authorizer."""
    global _cached_jwt_secret
    if _cached_jwt_secret is not None:
        return _cached_jwt_secret

    # Local dev: use env var directly
    direct = environ.get("JWT_SECRET", "")
    if direct:
        _cached_jwt_secret = direct
        return direct

    _cached_jwt_secret = _fetch_secret(get_config().jwt_secret_name)
    return _cached_jwt_secret


def get_google_maps_api_key() -> str:
    global _cached_maps_api_key
    if _cached_maps_api_key is not None:
        return _cached_maps_api_key

    direct = environ.get("GOOGLE_MAPS_API_KEY", "")
    if direct:
        _cached_maps_api_key = direct
        return direct

    _cached_maps_api_key = _fetch_secret(get_config().google_maps_secret_name)
    return _cached_maps_api_key
