"""
Quote calculation and storage.

A quote prices one journey for one vehicle type (or every type in compare
mode) and lives in the main table for ``QUOTE_TTL_MINUTES``:

    PK     = TENANT#001#QUOTE#{quoteId}      SK     = METADATA
    GSI1PK = TENANT#001#STATUS#{status}      GSI1SK = CREATED#{createdAt}
    TTL    = expiry (epoch seconds)          Data   = the quote document
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any

from core.config import Config
from core.db.dynamo import from_item, to_attr, to_item
from core.errors import NotFoundError
from core.models.base import isoformat_utc, parse_iso_datetime, utc_now
from core.models.quote import VEHICLE_TYPES, JourneyType, Pricing, Quote, QuoteRequest, QuoteStatus, RouteDetails
from core.secrets import get_google_maps_api_key
from core.services import maps
from core.services.fixed_routes import find_fixed_route
from core.services.pricing import (
    calculate_fixed_route_pricing,
    calculate_hourly_pricing,
    calculate_total_wait_time,
    calculate_variable_pricing,
)
from core.services.vehicles import get_vehicle_rates
from core.tenant import build_tenant_pk, get_tenant_id, validate_tenant_access

logger = logging.getLogger(__name__)


def quote_pk(quote_id: str, tenant_id: str | None = None) -> str:
    return build_tenant_pk(tenant_id or get_tenant_id(), "QUOTE", quote_id)


def _price_vehicle(
    request: QuoteRequest,
    vehicle_type: str,
    route: RouteDetails | None,
    dynamo_client: Any,
    config: Config,
) -> Pricing:
    rates = get_vehicle_rates(vehicle_type, dynamo_client, config.pricing_table)

    if request.journey_type == JourneyType.BY_THE_HOUR:
        return calculate_hourly_pricing(request.duration_hours, rates)

    pickup, dropoff = request.pickup_location, request.dropoff_location
    if not request.waypoints and pickup.place_id and dropoff.place_id:
        fixed = find_fixed_route(
            pickup.place_id, dropoff.place_id, vehicle_type, dynamo_client, config.fixed_routes_table
        )
        if fixed:
            logger.info(
                "Fixed route applied: %s",
                fixed.route_id,
                extra={"event": "fixed_route_match", "vehicle_type": vehicle_type},
            )
            return calculate_fixed_route_pricing(fixed.price, rates.metadata())

    pricing = calculate_variable_pricing(
        route.distance.miles, calculate_total_wait_time(request.waypoints), rates
    )
    if request.compare_mode:
        pricing = pricing.model_copy(update={"vehicle_metadata": rates.metadata()})
    return pricing


def calculate_quote(
    request: QuoteRequest, dynamo_client: Any, config: Config, now: datetime | None = None
) -> Quote:
    now = now or utc_now()

    route = None
    if request.journey_type == JourneyType.ONE_WAY:
        route = maps.calculate_route(
            request.pickup_location,
            request.dropoff_location,
            get_google_maps_api_key(),
            waypoints=request.waypoints,
        )

    pricing = _price_vehicle(request, request.vehicle_type, route, dynamo_client, config)

    vehicle_options = None
    if request.compare_mode:
        vehicle_options = {
            vehicle_type: (
                pricing
                if vehicle_type == request.vehicle_type
                else _price_vehicle(request, vehicle_type, route, dynamo_client, config)
            )
            for vehicle_type in VEHICLE_TYPES
        }

    contact = request.contact_details
    return Quote(
        quote_id=f"quote_{uuid.uuid4().hex}",
        status=QuoteStatus.VALID,
        created_at=isoformat_utc(now),
        expires_at=isoformat_utc(now + timedelta(minutes=config.quote_ttl_minutes)),
        journey_type=request.journey_type,
        journey=route,
        pricing=pricing,
        vehicle_type=request.vehicle_type,
        vehicle_options=vehicle_options,
        pickup_location=request.pickup_location,
        dropoff_location=request.dropoff_location,
        waypoints=request.waypoints,
        pickup_time=request.pickup_time,
        passengers=request.passengers,
        luggage=request.luggage,
        duration_hours=request.duration_hours,
        extras=request.extras,
        return_journey=request.return_journey,
        customer_name=contact.name if contact else None,
        customer_email=contact.email if contact else None,
        customer_phone=contact.phone if contact else None,
    )


def store_quote(quote: Quote, dynamo_client: Any, table_name: str) -> None:
    tenant_id = get_tenant_id()
    created = parse_iso_datetime(quote.created_at)
    expires = parse_iso_datetime(quote.expires_at)

    document = {
        "PK": quote_pk(quote.quote_id, tenant_id),
        "SK": "METADATA",
        "EntityType": "Quote",
        "GSI1PK": f"{tenant_id}#STATUS#{quote.status.value}",
        "GSI1SK": f"CREATED#{quote.created_at}",
        "TTL": int(expires.timestamp()),
        "Data": quote.to_api(),
        "tenantId": tenant_id,
        "CreatedAt": int(created.timestamp()),
        "UpdatedAt": int(created.timestamp()),
    }
    dynamo_client.put_item(TableName=table_name, Item=to_item(document))

    logger.info(
        "Quote stored: %s",
        quote.quote_id,
        extra={"event": "quote_stored", "quote_id": quote.quote_id, "tenant_id": tenant_id},
    )


def fetch_quote_item(quote_id: str, dynamo_client: Any, table_name: str) -> dict[str, Any] | None:
    """Load a quote item by bare ID, legacy ``QUOTE#id`` or tenant key.

    Tenant-prefixed keys are tried first, then the legacy format.
    """
    tenant_id = get_tenant_id()
    if quote_id.startswith("TENANT#"):
        candidates = [quote_id]
    else:
        bare_id = quote_id.removeprefix("QUOTE#")
        candidates = [quote_pk(bare_id, tenant_id), f"QUOTE#{bare_id}"]

    for pk in candidates:
        response = dynamo_client.get_item(
            TableName=table_name, Key={"PK": to_attr(pk), "SK": to_attr("METADATA")}
        )
        item = response.get("Item")
        if item:
            document = from_item(item)
            validate_tenant_access(tenant_id, document.get("tenantId"))
            return document
    return None


def quote_document(item: dict[str, Any]) -> dict[str, Any]:
    """The quote body of a stored item; older items keep it at the top level."""
    data = dict(item.get("Data") or item)
    if not data.get("quoteId") and item.get("PK"):
        pk = item["PK"]
        data["quoteId"] = pk.rsplit("#QUOTE#", 1)[-1] if "#QUOTE#" in pk else pk.removeprefix("QUOTE#")
    return data


def effective_status(document: dict[str, Any], now: datetime | None = None) -> str:
    """``valid`` quotes past their expiry report as ``expired`` (DynamoDB TTL deletion lags)."""
    status = document.get("status") or QuoteStatus.VALID.value
    expires_at = document.get("expiresAt")
    if status == QuoteStatus.VALID.value and expires_at:
        if parse_iso_datetime(expires_at) < (now or utc_now()):
            return QuoteStatus.EXPIRED.value
    return status


def get_public_quote(quote_id: str, dynamo_client: Any, table_name: str) -> Quote:
    item = fetch_quote_item(quote_id, dynamo_client, table_name)
    if item is None:
        raise NotFoundError(f"Quote {quote_id} not found")

    document = quote_document(item)
    document["status"] = effective_status(document)
    return Quote.model_validate(document)
