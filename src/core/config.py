from os import environ

from pydantic import BaseModel, ConfigDict

DEFAULT_ALLOWED_ORIGINS = "http://localhost:3000,https://durdle.flowency.build,https://durdle.co.uk"


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    aws_region: str
    dynamodb_endpoint: str | None = None
    table_name: str
    bookings_table: str
    pricing_table: str
    fixed_routes_table: str
    comments_table: str
    admin_users_table: str
    images_bucket: str
    jwt_secret_name: str
    google_maps_secret_name: str
    quote_ttl_minutes: int = 15
    jwt_expiry_seconds: int = 28800
    allowed_origins: tuple[str, ...]
    log_level: str = "INFO"
    environment: str


_cached_config: Config | None = None


def _reset_config() -> None:
    """Reset cached config and secrets. For testing only."""
    global _cached_config
    _cached_config = None

    from core import secrets

    secrets._reset_secrets()


def get_config() -> Config:
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    origins = environ.get("ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS)

    _cached_config = Config(
        aws_region=environ.get("AWS_REGION", "eu-west-2"),
        dynamodb_endpoint=environ.get("DYNAMODB_ENDPOINT"),
        table_name=environ.get("TABLE_NAME", "durdle-main-table-dev"),
        bookings_table=environ.get("BOOKINGS_TABLE_NAME", "durdle-bookings-dev"),
        pricing_table=environ.get("PRICING_TABLE_NAME", "durdle-pricing-config-dev"),
        fixed_routes_table=environ.get("FIXED_ROUTES_TABLE_NAME", "durdle-fixed-routes-dev"),
        comments_table=environ.get("COMMENTS_TABLE_NAME", "durdle-document-comments-dev"),
        admin_users_table=environ.get("ADMIN_USERS_TABLE_NAME", "durdle-admin-users-dev"),
        images_bucket=environ.get("IMAGES_BUCKET_NAME", "durdle-vehicle-images-dev"),
        jwt_secret_name=environ.get("JWT_SECRET_NAME", "durdle/jwt-secret"),
        google_maps_secret_name=environ.get("GOOGLE_MAPS_SECRET_NAME", "durdle/google-maps-api-key"),
        quote_ttl_minutes=int(environ.get("QUOTE_TTL_MINUTES", "15")),
        jwt_expiry_seconds=int(environ.get("JWT_EXPIRY_SECONDS", "28800")),
        allowed_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        log_level=environ.get("LOG_LEVEL", "INFO"),
        environment=environ.get("ENVIRONMENT", "dev"),
    )
    return _cached_config
