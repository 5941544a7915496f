from datetime import datetime, timedelta
from typing import Any

import jwt

from core.db.dynamo import from_item, to_attr
from core.errors import AuthenticationError, ErrorCode
from core.models.base import utc_now

from .interface import AuthProvider, AuthUser

ALGORITHM = "HS256"


def user_key(username: str) -> dict[str, Any]:
    return {"PK": to_attr(f"USER#{username.lower()}"), "SK": to_attr("METADATA")}


class JwtAuthProvider(AuthProvider):
    """HS256 session tokens backed by the admin users table."""

    def __init__(self, secret: str, dynamo_client: Any, admin_users_table: str, expiry_seconds: int = 28800):
        self._secret = secret
        self._dynamo = dynamo_client
        self._table = admin_users_table
        self.expiry_seconds = expiry_seconds

    def issue_token(self, user: AuthUser, now: datetime | None = None) -> str:
        issued = now or utc_now()
        payload = {
            "username": user.username,
            "role": user.role,
            "email": user.email,
            "iat": issued,
            "exp": issued + timedelta(seconds=self.expiry_seconds),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    async def verify_claims(self, token: str) -> dict[str, object]:
        try:
            claims: dict[str, object] = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Session token expired", code=ErrorCode.SESSION_EXPIRED) from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid session token: {e}", code=ErrorCode.INVALID_TOKEN) from e

        if not claims.get("username"):
            raise AuthenticationError("Session token has no username", code=ErrorCode.INVALID_TOKEN)
        return claims

    async def verify_token(self, token: str) -> AuthUser:
        claims = await self.verify_claims(token)
        return await self.get_user(str(claims["username"]))

    async def get_user(self, username: str) -> AuthUser:
        response = self._dynamo.get_item(TableName=self._table, Key=user_key(username))
        item = response.get("Item")
        if not item:
            raise AuthenticationError(f"Admin user {username} not found", code=ErrorCode.ACCOUNT_DISABLED)

        record = from_item(item)
        if not record.get("active"):
            raise AuthenticationError(f"Admin user {username} is disabled", code=ErrorCode.ACCOUNT_DISABLED)
        return AuthUser.model_validate(record)

    async def decode_claims(self, token: str) -> dict[str, object]:
        """Decode JWT claims WITHOUT signature verification. For logging/routing only."""
        try:
            decoded: dict[str, object] = jwt.decode(token, options={"verify_signature": False})
            return decoded
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid token: {e}", code=ErrorCode.INVALID_TOKEN) from e
