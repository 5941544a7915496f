from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from core.auth import AuthProvider, AuthUser, JwtAuthProvider, get_auth_provider
from core.config import _reset_config
from core.errors import ConfigurationError


@pytest.fixture(autouse=True)
def _clear_config_cache():
    _reset_config()
    yield
    _reset_config()


VALID_USER = dict(username="dispatcher", role="admin", email="ops@durdle.co.uk", full_name="Ops Desk")


def test_auth_user_valid():
    user = AuthUser(**VALID_USER)
    assert user.to_api() == {
        "username": "dispatcher",
        "role": "admin",
        "email": "ops@durdle.co.uk",
        "fullName": "Ops Desk",
    }


def test_auth_user_defaults():
    user = AuthUser(username="dispatcher")
    assert user.role == "admin"
    assert user.email == ""


def test_auth_user_missing_username():
    with pytest.raises(Exception):
        AuthUser(role="admin")


def test_auth_provider_is_abstract():
    with pytest.raises(TypeError):
        AuthProvider()  # type: ignore[abstract]


def test_get_auth_provider_returns_jwt_provider(monkeypatch):
    monkeypatch.setenv("JWT_EXPIRY_SECONDS", "600")
    provider = get_auth_provider()
    assert isinstance(provider, JwtAuthProvider)
    assert provider.expiry_seconds == 600


def test_get_auth_provider_without_secret(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    secrets_client = MagicMock()
    secrets_client.get_secret_value.side_effect = ClientError(
        {"Error": {"Code": "ResourceNotFoundException"}}, "GetSecretValue"
    )

    with patch("core.secrets.get_secrets_client", return_value=secrets_client):
        with pytest.raises(ConfigurationError):
            get_auth_provider()
