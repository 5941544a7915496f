"""API Gateway TOKEN/REQUEST authorizer for /admin/* routes."""

import asyncio
import logging
from typing import Any

from core.auth import extract_token, get_auth_provider
from core.errors import AuthenticationError, ConfigurationError
from core.logging import configure_logging, set_correlation_id

logger = logging.getLogger(__name__)


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    configure_logging()
    set_correlation_id(getattr(context, "aws_request_id", None))

    token = extract_token(event)
    if not token:
        logger.info("No token provided", extra={"event": "authorizer_denied", "reason": "missing_token"})
        raise Exception("Unauthorized")

    try:
        # Verified claims only; the admin users table is not read per request.
        claims = asyncio.run(get_auth_provider().verify_claims(token))
    except (AuthenticationError, ConfigurationError) as e:
        logger.info("Authorization failed: %s", e.code.value, extra={"event": "authorizer_denied"})
        raise Exception("Unauthorized") from e

    try:
        resource = admin_resource(event.get("methodArn") or "")
    except ValueError as e:
        logger.warning("Malformed methodArn", extra={"event": "authorizer_denied", "reason": "method_arn"})
        raise Exception("Unauthorized") from e

    username = str(claims["username"])
    return _allow_policy(
        resource,
        username,
        {
            "username": username,
            "role": str(claims.get("role") or "admin"),
            "email": str(claims.get("email") or ""),
        },
    )


def admin_resource(method_arn: str) -> str:
    """``arn:aws:execute-api:{region}:{account}:{api}/{stage}/GET/admin/x`` -> ``.../{stage}/*/admin/*``.

    Authorizer results are cached per token, so the policy must cover every admin route.
    """
    arn_parts = method_arn.split(":")
    if len(arn_parts) != 6 or arn_parts[2] != "execute-api":
        raise ValueError(f"Not an execute-api ARN: {method_arn!r}")
    path_parts = arn_parts[5].split("/")
    if len(path_parts) < 2 or not all(path_parts[:2]):
        raise ValueError(f"ARN has no api id and stage: {method_arn!r}")
    api_id, stage = path_parts[:2]
    return f"arn:aws:execute-api:{arn_parts[3]}:{arn_parts[4]}:{api_id}/{stage}/*/admin/*"


def _allow_policy(resource: str, principal_id: str, context: dict[str, str]) -> dict[str, Any]:
    return {
        "principalId": principal_id,
        "policyDocument": {
            "Version": "2012-10-17",
            "Statement": [{"Action": "execute-api:Invoke", "Effect": "Allow", "Resource": resource}],
        },
        "context": context,
    }
