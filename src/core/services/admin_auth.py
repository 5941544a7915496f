"""Admin username/password login against the admin users table."""

import logging
from typing import Any

import bcrypt

from core.auth.interface import AuthUser
from core.auth.jwt_provider import user_key
from core.db.dynamo import from_item, to_expression_values, to_item
from core.errors import AuthenticationError, ErrorCode
from core.models.auth import BCRYPT_MAX_PASSWORD_BYTES
from core.models.base import isoformat_utc, utc_now

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def check_password(password: str, password_hash: str) -> bool:
    if len(password.encode()) > BCRYPT_MAX_PASSWORD_BYTES:
        logger.info(
            "Password exceeds the bcrypt length limit",
            extra={"event": "login_failed", "reason": "password_too_long"},
        )
        return False
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def authenticate(username: str, password: str, dynamo_client: Any, admin_users_table: str) -> AuthUser:
    """Check credentials and stamp ``lastLogin``. Unknown users and bad passwords look the same."""
    response = dynamo_client.get_item(TableName=admin_users_table, Key=user_key(username))
    item = response.get("Item")
    if not item:
        logger.info("Login failed: unknown user", extra={"event": "login_failed", "reason": "unknown_user"})
        raise AuthenticationError(f"User {username} not found")

    record = from_item(item)
    if not record.get("active"):
        raise AuthenticationError(f"User {username} is disabled", code=ErrorCode.ACCOUNT_DISABLED)

    if not check_password(password, record.get("passwordHash") or ""):
        logger.info("Login failed: bad password", extra={"event": "login_failed", "reason": "password"})
        raise AuthenticationError(f"Password mismatch for {username}")

    dynamo_client.update_item(
        TableName=admin_users_table,
        Key=user_key(username),
        UpdateExpression="SET lastLogin = :lastLogin",
        ExpressionAttributeValues=to_expression_values({":lastLogin": isoformat_utc(utc_now())}),
    )

    logger.info("Admin login: %s", record.get("username"), extra={"event": "login_success"})
    return AuthUser.model_validate(record)


def create_admin_user(
    username: str,
    password: str,
    dynamo_client: Any,
    admin_users_table: str,
    email: str = "",
    full_name: str = "",
    role: str = "admin",
) -> AuthUser:
    """Seed an admin account. Used by local setup scripts and tests."""
    user = AuthUser(username=username.lower(), role=role, email=email, full_name=full_name)
    document = {
        "PK": f"USER#{user.username}",
        "SK": "METADATA",
        **user.model_dump(by_alias=True),
        "passwordHash": hash_password(password),
        "active": True,
        "createdAt": isoformat_utc(utc_now()),
    }
    dynamo_client.put_item(TableName=admin_users_table, Item=to_item(document))
    return user
