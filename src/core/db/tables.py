"""DynamoDB table schemas, shared by the local setup script and the test fixtures."""

from typing import Any

from core.config import Config


def _gsi(name: str, hash_key: str, range_key: str) -> dict[str, Any]:
    return {
        "IndexName": name,
        "KeySchema": [
            {"AttributeName": hash_key, "KeyType": "HASH"},
            {"AttributeName": range_key, "KeyType": "RANGE"},
        ],
        "Projection": {"ProjectionType": "ALL"},
    }


def _string_attrs(*names: str) -> list[dict[str, str]]:
    return [{"AttributeName": name, "AttributeType": "S"} for name in names]


_PK_SK = [
    {"AttributeName": "PK", "KeyType": "HASH"},
    {"AttributeName": "SK", "KeyType": "RANGE"},
]


def table_definitions(config: Config) -> list[dict[str, Any]]:
    """``create_table`` kwargs for every table the service uses."""
    return [
        {
            "TableName": config.table_name,
            "KeySchema": _PK_SK,
            "AttributeDefinitions": _string_attrs("PK", "SK", "GSI1PK", "GSI1SK"),
            "GlobalSecondaryIndexes": [_gsi("GSI1", "GSI1PK", "GSI1SK")],
            "BillingMode": "PAY_PER_REQUEST",
        },
        {
            "TableName": config.bookings_table,
            "KeySchema": _PK_SK,
            "AttributeDefinitions": _string_attrs("PK", "SK", "GSI1PK", "GSI1SK", "GSI2PK", "GSI2SK"),
            "GlobalSecondaryIndexes": [_gsi("GSI1", "GSI1PK", "GSI1SK"), _gsi("GSI2", "GSI2PK", "GSI2SK")],
            "BillingMode": "PAY_PER_REQUEST",
        },
        {
            "TableName": config.pricing_table,
            "KeySchema": _PK_SK,
            "AttributeDefinitions": _string_attrs("PK", "SK"),
            "BillingMode": "PAY_PER_REQUEST",
        },
        {
            "TableName": config.fixed_routes_table,
            "KeySchema": _PK_SK,
            "AttributeDefinitions": _string_attrs("PK", "SK", "GSI1PK", "GSI1SK"),
            "GlobalSecondaryIndexes": [_gsi("GSI1", "GSI1PK", "GSI1SK")],
            "BillingMode": "PAY_PER_REQUEST",
        },
        {
            "TableName": config.comments_table,
            "KeySchema": [
                {"AttributeName": "documentPath", "KeyType": "HASH"},
                {"AttributeName": "commentId", "KeyType": "RANGE"},
            ],
            "AttributeDefinitions": _string_attrs("documentPath", "commentId"),
            "BillingMode": "PAY_PER_REQUEST",
        },
        {
            "TableName": config.admin_users_table,
            "KeySchema": _PK_SK,
            "AttributeDefinitions": _string_attrs("PK", "SK"),
            "BillingMode": "PAY_PER_REQUEST",
        },
    ]
