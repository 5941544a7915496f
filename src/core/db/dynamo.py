"""Conversion between plain documents and DynamoDB's low-level attribute format."""

import base64
import binascii
import json
from decimal import Decimal
from typing import Any

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

from core.errors import ValidationError

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def _to_dynamo_value(value: Any) -> Any:
    # boto3 rejects floats; route them through Decimal without binary noise
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _to_dynamo_value(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_to_dynamo_value(v) for v in value]
    return value


def _from_dynamo_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _from_dynamo_value(v) for k, v in value.items()}
    if isinstance(value, (list, set)):
        return [_from_dynamo_value(v) for v in value]
    return value


def to_attr(value: Any) -> dict[str, Any]:
    """Serialize a single value, e.g. for ExpressionAttributeValues."""
    return _serializer.serialize(_to_dynamo_value(value))


def to_item(document: dict[str, Any]) -> dict[str, Any]:
    """Serialize a document into a typed item. ``None`` values are dropped."""
    return {k: to_attr(v) for k, v in _to_dynamo_value(document).items()}


def from_item(item: dict[str, Any]) -> dict[str, Any]:
    return {k: _from_dynamo_value(_deserializer.deserialize(v)) for k, v in item.items()}


def to_expression_values(values: dict[str, Any]) -> dict[str, Any]:
    return {k: to_attr(v) for k, v in values.items()}


def encode_cursor(last_evaluated_key: dict[str, Any]) -> str:
    """Encode a LastEvaluatedKey as an opaque URL-safe pagination cursor."""
    payload = json.dumps(last_evaluated_key, separators=(",", ":"), sort_keys=True)
    return base64.urlsafe_b64encode(payload.encode()).decode()


def decode_cursor(cursor: str) -> dict[str, Any]:
    try:
        decoded = json.loads(base64.urlsafe_b64decode(cursor.encode()).decode())
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise ValidationError(
            f"Invalid pagination cursor: {e}",
            details=[{"field": "cursor", "message": "Invalid pagination cursor"}],
        ) from e
    if not isinstance(decoded, dict):
        raise ValidationError(
            "Pagination cursor is not an object",
            details=[{"field": "cursor", "message": "Invalid pagination cursor"}],
        )
    return decoded
