"""
Tenant helpers for multi-tenant data isolation.

There is a single tenant today. Every DynamoDB partition key written by the
quote and booking services carries the ``TENANT#001`` prefix and every S3
object lives under ``TENANT-001/``. Once the API Gateway authorizer supplies
a tenant, ``get_tenant_id`` should read ``event.requestContext.authorizer.tenantId``.
"""

import logging
import re
from typing import Any

from core.errors import TenantAccessError

# Opaque numeric ID; never a company name
CURRENT_TENANT = "TENANT#001"

# '#' is awkward in S3 keys
CURRENT_TENANT_S3 = "TENANT-001"


def get_tenant_id(event: dict[str, Any] | None = None) -> str:
    return CURRENT_TENANT


def get_tenant_id_s3(event: dict[str, Any] | None = None) -> str:
    return CURRENT_TENANT_S3


def build_tenant_pk(tenant_id: str, entity_type: str, entity_id: str) -> str:
    """``build_tenant_pk("TENANT#001", "QUOTE", "abc")`` -> ``TENANT#001#QUOTE#abc``."""
    return f"{tenant_id}#{entity_type}#{entity_id}"


def build_tenant_s3_key(tenant_s3_id: str, folder: str, filename: str) -> str:
    return f"{tenant_s3_id}/{folder}/{filename}"


def extract_entity_id(pk: str, entity_type: str) -> str:
    """Return the entity ID from a tenant (``TENANT#001#QUOTE#x``) or legacy (``QUOTE#x``) key."""
    entity = re.escape(entity_type)

    match = re.match(rf"^TENANT#\d+#{entity}#(.+)$", pk)
    if match:
        return match.group(1)

    match = re.match(rf"^{entity}#(.+)$", pk)
    if match:
        return match.group(1)

    raise ValueError(f"Invalid PK format for {entity_type}: {pk}")


def is_tenant_prefixed(pk: str) -> bool:
    return pk.startswith("TENANT#")


def validate_tenant_access(request_tenant_id: str, resource_tenant_id: str | None) -> None:
    """Raise if a record belongs to another tenant. Legacy records without a tenant pass."""
    if not resource_tenant_id:
        return

    if request_tenant_id != resource_tenant_id:
        raise TenantAccessError(
            f"Cross-tenant access denied: {request_tenant_id} -> {resource_tenant_id}"
        )


def log_tenant_context(logger: logging.Logger, tenant_id: str, operation: str) -> None:
    logger.info(
        "Tenant operation: %s",
        operation,
        extra={"event": "tenant_context", "tenant_id": tenant_id, "operation": operation},
    )


def build_dual_format_filter(tenant_id: str, entity_type: str) -> dict[str, Any]:
    """Scan filter matching both key formats for records owned by ``tenant_id``.

    Values are plain strings; serialize them before passing to the low-level client.
    """
    return {
        "FilterExpression": (
            "(begins_with(PK, :newPrefix) OR begins_with(PK, :oldPrefix)) "
            "AND (attribute_not_exists(tenantId) OR tenantId = :tenantId)"
        ),
        "ExpressionAttributeValues": {
            ":newPrefix": f"{tenant_id}#{entity_type}#",
            ":oldPrefix": f"{entity_type}#",
            ":tenantId": tenant_id,
        },
    }
