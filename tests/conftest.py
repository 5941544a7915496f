"""Shared test fixtures for Durdle."""

import os
import sys
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env file for test configuration
load_dotenv()

# Unset AWS_PROFILE for local testing (moto and DynamoDB Local don't need it)
if "AWS_PROFILE" in os.environ:
    del os.environ["AWS_PROFILE"]

os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-2")

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

TEST_JWT_SECRET = "test-jwt-secret-not-for-production-use-0123456789"


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch):
    """Fresh config, secrets and boto3 clients for every test."""
    from core.clients import _reset_clients
    from core.config import _reset_config

    monkeypatch.setenv("AWS_REGION", "eu-west-2")
    monkeypatch.setenv("JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "test-maps-key")
    _reset_config()
    _reset_clients()
    yield
    _reset_config()
    _reset_clients()


# DynamoDB / S3 fixtures (moto)
@pytest.fixture
def aws(monkeypatch):
    """In-memory DynamoDB and S3 with every Durdle table and the images bucket created.

    Yields the low-level DynamoDB client returned by ``get_dynamo_client()``.
    """
    from moto import mock_aws

    from core.clients import _reset_clients, get_dynamo_client, get_s3_client
    from core.config import _reset_config, get_config
    from core.db.tables import table_definitions

    monkeypatch.delenv("DYNAMODB_ENDPOINT", raising=False)
    _reset_config()

    with mock_aws():
        _reset_clients()
        config = get_config()
        client = get_dynamo_client()
        for definition in table_definitions(config):
            client.create_table(**definition)

        get_s3_client().create_bucket(
            Bucket=config.images_bucket,
            CreateBucketConfiguration={"LocationConstraint": config.aws_region},
        )
        yield client
        _reset_clients()


@pytest.fixture
def config():
    from core.config import get_config

    return get_config()


@pytest.fixture
def lambda_context():
    class _Context:
        aws_request_id = "req-test-0001"
        function_name = "durdle-test"

    return _Context()


@pytest.fixture
def api_event():
    """Factory for API Gateway proxy events."""

    def _make(
        method="GET",
        path="/",
        resource=None,
        body=None,
        path_parameters=None,
        query=None,
        headers=None,
    ):
        import json

        return {
            "httpMethod": method,
            "path": path,
            "resource": resource or path,
            "headers": {"origin": "http://localhost:3000", **(headers or {})},
            "pathParameters": path_parameters,
            "queryStringParameters": query,
            "body": json.dumps(body) if isinstance(body, (dict, list)) else body,
        }

    return _make
