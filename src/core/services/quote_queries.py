"""Admin quote listing, lookup and export queries against the main table."""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from core.db.dynamo import decode_cursor, encode_cursor, from_item, to_expression_values
from core.models.base import isoformat_utc, parse_iso_datetime, utc_now
from core.models.quote import QuoteExportFilters, QuoteListFilters
from core.services.quotes import effective_status, fetch_quote_item, quote_document
from core.tenant import build_dual_format_filter, get_tenant_id, log_tenant_context

logger = logging.getLogger(__name__)

GSI_NAME = "GSI1"
DEFAULT_RANGE_DAYS = 30
EXPORT_PAGE_SIZE = 1000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# API status -> stored status. Expired quotes keep the ``valid`` key until TTL removes them.
_DB_STATUS = {"active": "valid", "expired": "valid", "converted": "converted"}


def with_default_date_range(filters: QuoteExportFilters, now: datetime | None = None) -> QuoteExportFilters:
    """Fill in the last 30 days when no range was given."""
    now = now or utc_now()
    return filters.model_copy(
        update={
            "date_from": filters.date_from or isoformat_utc(now - timedelta(days=DEFAULT_RANGE_DAYS)),
            "date_to": filters.date_to or isoformat_utc(now),
        }
    )


def _date_range_condition(attribute: str, date_from: str | None, date_to: str | None) -> tuple[str, dict[str, str]]:
    if date_from and date_to:
        return (
            f"{attribute} BETWEEN :dateFrom AND :dateTo",
            {":dateFrom": f"CREATED#{date_from}", ":dateTo": f"CREATED#{date_to}"},
        )
    if date_from:
        return f"{attribute} >= :dateFrom", {":dateFrom": f"CREATED#{date_from}"}
    if date_to:
        return f"{attribute} <= :dateTo", {":dateTo": f"CREATED#{date_to}"}
    return "", {}


def _query_by_status(
    filters: QuoteExportFilters,
    limit: int,
    start_key: dict[str, Any] | None,
    dynamo_client: Any,
    table_name: str,
) -> tuple[list[dict[str, Any]], dict[str, Any] | None]:
    tenant_id = get_tenant_id()
    db_status = _DB_STATUS[filters.status]

    condition = "GSI1PK = :status"
    values = {":status": f"{tenant_id}#STATUS#{db_status}"}
    range_condition, range_values = _date_range_condition("GSI1SK", filters.date_from, filters.date_to)
    if range_condition:
        condition += f" AND {range_condition}"
        values.update(range_values)

    kwargs: dict[str, Any] = {
        "TableName": table_name,
        "IndexName": GSI_NAME,
        "KeyConditionExpression": condition,
        "ExpressionAttributeValues": to_expression_values(values),
        "Limit": limit,
        "ScanIndexForward": False,
    }
    if start_key:
        kwargs["ExclusiveStartKey"] = start_key

    logger.info("Querying quotes by status", extra={"event": "dynamodb_query", "status": db_status})
    response = dynamo_client.query(**kwargs)
    return [from_item(item) for item in response.get("Items", [])], response.get("LastEvaluatedKey")


def _scan_quotes(
    filters: QuoteExportFilters,
    limit: int,
    start_key: dict[str, Any] | None,
    dynamo_client: Any,
    table_name: str,
) -> tuple[list[dict[str, Any]], dict[str, Any] | None]:
    tenant_id = get_tenant_id()
    tenant_filter = build_dual_format_filter(tenant_id, "QUOTE")

    expression = f"{tenant_filter['FilterExpression']} AND SK = :metadata"
    values = {**tenant_filter["ExpressionAttributeValues"], ":metadata": "METADATA"}
    range_condition, range_values = _date_range_condition("GSI1SK", filters.date_from, filters.date_to)
    if range_condition:
        expression += f" AND {range_condition}"
        values.update(range_values)

    kwargs: dict[str, Any] = {
        "TableName": table_name,
        "FilterExpression": expression,
        "ExpressionAttributeValues": to_expression_values(values),
        "Limit": limit,
    }
    if start_key:
        kwargs["ExclusiveStartKey"] = start_key

    log_tenant_context(logger, tenant_id, "scan_quotes")
    response = dynamo_client.scan(**kwargs)
    return [from_item(item) for item in response.get("Items", [])], response.get("LastEvaluatedKey")


def _fetch_page(
    filters: QuoteExportFilters,
    limit: int,
    start_key: dict[str, Any] | None,
    dynamo_client: Any,
    table_name: str,
) -> tuple[list[dict[str, Any]], dict[str, Any] | None]:
    if filters.status == "all":
        return _scan_quotes(filters, limit, start_key, dynamo_client, table_name)
    return _query_by_status(filters, limit, start_key, dynamo_client, table_name)


def _total_pence(document: dict[str, Any]) -> int:
    breakdown = (document.get("pricing") or {}).get("breakdown") or {}
    if breakdown.get("total"):
        return breakdown["total"]
    return round((document.get("totalPrice") or 0) * 100)


def _matches(document: dict[str, Any], filters: QuoteExportFilters) -> bool:
    price = _total_pence(document)
    if filters.price_min is not None and price < filters.price_min * 100:
        return False
    if filters.price_max is not None and price > filters.price_max * 100:
        return False

    if filters.search:
        needle = filters.search.lower()
        haystack = [
            document.get("quoteId") or "",
            (document.get("pickupLocation") or {}).get("address") or "",
            (document.get("dropoffLocation") or {}).get("address") or "",
            document.get("customerEmail") or "",
        ]
        if not any(needle in field.lower() for field in haystack):
            return False
    return True


def _created(document: dict[str, Any]) -> datetime:
    created = document.get("createdAt")
    return parse_iso_datetime(created) if created else _EPOCH


def _sort_key(filters: QuoteExportFilters) -> Callable[[dict[str, Any]], Any]:
    return _total_pence if filters.sort_by == "price" else _created


def normalize_quote_for_api(document: dict[str, Any], now: datetime | None = None) -> dict[str, Any]:
    """Admin view of a quote: ``valid`` reads as ``active`` or ``expired`` and money is in pounds."""
    status = effective_status(document, now)
    if status == "valid":
        status = "active"

    breakdown = (document.get("pricing") or {}).get("breakdown")
    if breakdown:
        pricing_breakdown = {
            "baseFare": (breakdown.get("baseFare") or 0) / 100,
            "distanceCost": (breakdown.get("distanceCharge") or 0) / 100,
            "waypointCost": (breakdown.get("waitTimeCharge") or 0) / 100,
        }
    else:
        pricing_breakdown = document.get("pricingBreakdown")

    return {
        "quoteId": document.get("quoteId"),
        "createdAt": document.get("createdAt"),
        "expiresAt": document.get("expiresAt"),
        "status": status,
        "journeyType": document.get("journeyType"),
        "pickupLocation": document.get("pickupLocation"),
        "dropoffLocation": document.get("dropoffLocation"),
        "waypoints": document.get("waypoints"),
        "pickupTime": document.get("pickupTime"),
        "totalPrice": _total_pence(document) / 100,
        "vehicleType": document.get("vehicleType"),
        "pricingBreakdown": pricing_breakdown,
        "customerEmail": document.get("customerEmail"),
        "customerPhone": document.get("customerPhone"),
        "bookingId": document.get("bookingId"),
        "journey": document.get("journey"),
        "passengers": document.get("passengers"),
        "luggage": document.get("luggage"),
    }


def _filter_sort_normalize(items: list[dict[str, Any]], filters: QuoteExportFilters) -> list[dict[str, Any]]:
    documents = [quote_document(item) for item in items]
    documents = [d for d in documents if _matches(d, filters)]
    documents.sort(key=_sort_key(filters), reverse=filters.sort_order == "desc")
    quotes = [normalize_quote_for_api(d) for d in documents]
    if filters.status != "all":
        quotes = [q for q in quotes if q["status"] == filters.status]
    return quotes


def query_quotes(filters: QuoteListFilters, dynamo_client: Any, table_name: str) -> dict[str, Any]:
    start_key = decode_cursor(filters.cursor) if filters.cursor else None
    items, last_key = _fetch_page(filters, filters.limit, start_key, dynamo_client, table_name)
    quotes = _filter_sort_normalize(items, filters)

    logger.info(
        "Quotes query returned %d result(s)",
        len(quotes),
        extra={"event": "quotes_query_complete", "has_more": bool(last_key)},
    )
    return {
        "quotes": quotes,
        "pagination": {
            "total": len(quotes),
            "limit": filters.limit,
            "cursor": encode_cursor(last_key) if last_key else None,
        },
    }


def get_quote_by_id(quote_id: str, dynamo_client: Any, table_name: str) -> dict[str, Any] | None:
    item = fetch_quote_item(quote_id, dynamo_client, table_name)
    if item is None:
        logger.warning("Quote not found: %s", quote_id, extra={"event": "quote_not_found"})
        return None
    return normalize_quote_for_api(quote_document(item))


def get_all_quotes_for_export(filters: QuoteExportFilters, dynamo_client: Any, table_name: str) -> list[dict[str, Any]]:
    items: list[dict[str, Any]] = []
    last_key = None

    while True:
        page, last_key = _fetch_page(filters, EXPORT_PAGE_SIZE, last_key, dynamo_client, table_name)
        items.extend(page)
        if not last_key:
            break

    quotes = _filter_sort_normalize(items, filters)
    logger.info("Prepared %d quote(s) for export", len(quotes), extra={"event": "quotes_export_complete"})
    return quotes
