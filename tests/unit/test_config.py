"""Unit tests for configuration management."""

import os
from unittest.mock import patch

import pydantic
import pytest

from core.config import _reset_config, get_config


@pytest.fixture(autouse=True)
def _clear_config_cache():
    _reset_config()
    yield
    _reset_config()


def test_get_config_with_dynamodb_endpoint():
    """Test that get_config reads DYNAMODB_ENDPOINT when set."""
    with patch.dict(os.environ, {"DYNAMODB_ENDPOINT": "http://localhost:8000"}):
        config = get_config()
        assert config.dynamodb_endpoint == "http://localhost:8000"


def test_get_config_defaults():
    """Test that get_config provides sensible defaults."""
    with patch.dict(os.environ, {}, clear=True):
        config = get_config()
        assert config.aws_region == "eu-west-2"
        assert config.dynamodb_endpoint is None
        assert config.table_name == "durdle-main-table-dev"
        assert config.bookings_table == "durdle-bookings-dev"
        assert config.admin_users_table == "durdle-admin-users-dev"
        assert config.quote_ttl_minutes == 15
        assert config.jwt_expiry_seconds == 28800
        assert config.environment == "dev"
        assert "http://localhost:3000" in config.allowed_origins


def test_table_names_from_environment():
    env = {
        "TABLE_NAME": "durdle-main-table-prod",
        "PRICING_TABLE_NAME": "durdle-pricing-config-prod",
        "FIXED_ROUTES_TABLE_NAME": "durdle-fixed-routes-prod",
        "COMMENTS_TABLE_NAME": "durdle-document-comments-prod",
        "IMAGES_BUCKET_NAME": "durdle-vehicle-images-prod",
    }
    with patch.dict(os.environ, env):
        config = get_config()
        assert config.table_name == "durdle-main-table-prod"
        assert config.pricing_table == "durdle-pricing-config-prod"
        assert config.fixed_routes_table == "durdle-fixed-routes-prod"
        assert config.comments_table == "durdle-document-comments-prod"
        assert config.images_bucket == "durdle-vehicle-images-prod"


def test_allowed_origins_parsing():
    with patch.dict(os.environ, {"ALLOWED_ORIGINS": " https://a.example , ,https://b.example"}):
        assert get_config().allowed_origins == ("https://a.example", "https://b.example")


def test_integer_string_coercion():
    with patch.dict(os.environ, {"QUOTE_TTL_MINUTES": "30", "JWT_EXPIRY_SECONDS": "3600"}):
        config = get_config()
        assert config.quote_ttl_minutes == 30
        assert config.jwt_expiry_seconds == 3600


def test_config_is_cached():
    assert get_config() is get_config()


def test_config_is_immutable():
    with patch.dict(os.environ, {}, clear=True):
        config = get_config()
        with pytest.raises(pydantic.ValidationError):
            config.aws_region = "eu-west-1"  # type: ignore[misc]
