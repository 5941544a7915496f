from abc import ABC, abstractmethod

from core.models.base import ApiModel


class AuthUser(ApiModel):
    username: str
    role: str = "admin"
    email: str = ""
    full_name: str = ""


class AuthProvider(ABC):
    @abstractmethod
    async def verify_token(self, token: str) -> AuthUser: ...

    @abstractmethod
    async def verify_claims(self, token: str) -> dict[str, object]: ...

    @abstractmethod
    async def get_user(self, username: str) -> AuthUser: ...

    @abstractmethod
    async def decode_claims(self, token: str) -> dict[str, object]: ...


def get_auth_provider() -> AuthProvider:
    from core.clients import get_dynamo_client
    from core.config import get_config
    from core.secrets import get_jwt_secret

    config = get_config()

    from core.auth.jwt_provider import JwtAuthProvider

    return JwtAuthProvider(
        secret=get_jwt_secret(),
        dynamo_client=get_dynamo_client(),
        admin_users_table=config.admin_users_table,
        expiry_seconds=config.jwt_expiry_seconds,
    )
