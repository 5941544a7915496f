"""
DynamoDB helpers for Durdle.

Items are read and written through the low-level client; this package
converts between plain documents and typed attributes.
"""

from core.db.dynamo import (
    decode_cursor,
    encode_cursor,
    from_item,
    to_attr,
    to_expression_values,
    to_item,
)

__all__ = ["decode_cursor", "encode_cursor", "from_item", "to_attr", "to_expression_values", "to_item"]
