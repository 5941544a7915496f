"""
Bookings: ID generation, creation from a quote, and the status state machine.

Bookings table layout:
    PK     = TENANT#001#BOOKING#{bookingId}   SK     = METADATA
    GSI1PK = TENANT#001#STATUS#{status}       GSI1SK = PICKUP#{pickupTime}
    GSI2PK = TENANT#001#DATE#{yyyy-mm-dd}     GSI2SK = CREATED#{createdAt}

Booking IDs are ``DTC-{ddmmyy}{seq}`` where ``seq`` is the 1-based count of
bookings created that UTC day, zero-padded to two digits.
"""

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.db.dynamo import from_item, to_attr, to_expression_values, to_item
from core.errors import ConflictError, ErrorCode, NotFoundError
from core.models.base import isoformat_utc, utc_now
from core.models.booking import (
    Booking,
    BookingListFilters,
    BookingStatus,
    CreateBookingRequest,
    Customer,
    Payment,
    can_transition,
)
from core.models.quote import QuoteStatus
from core.services.quotes import effective_status, fetch_quote_item, quote_document
from core.tenant import build_tenant_pk, get_tenant_id, validate_tenant_access

logger = logging.getLogger(__name__)

MAX_CREATE_ATTEMPTS = 5


def _is_conditional_failure(error: ClientError) -> bool:
    return error.response["Error"]["Code"] == "ConditionalCheckFailedException"


def _date_prefix(now: datetime) -> str:
    return now.strftime("%d%m%y")


def _random_booking_id(now: datetime) -> str:
    return f"DTC-{_date_prefix(now)}{uuid.uuid4().hex[:2].upper()}"


def _sequenced_booking_id(now: datetime, seq: int) -> str:
    return f"DTC-{_date_prefix(now)}{seq:02d}"


def count_bookings_on(day: date, dynamo_client: Any, bookings_table: str) -> int:
    """Number of bookings created on ``day``, following every result page."""
    total = 0
    last_key = None

    while True:
        kwargs: dict[str, Any] = {
            "TableName": bookings_table,
            "IndexName": "GSI2",
            "KeyConditionExpression": "GSI2PK = :dateKey",
            "ExpressionAttributeValues": to_expression_values(
                {":dateKey": f"{get_tenant_id()}#DATE#{day.isoformat()}"}
            ),
            "Select": "COUNT",
        }
        if last_key:
            kwargs["ExclusiveStartKey"] = last_key

        response = dynamo_client.query(**kwargs)
        total += response.get("Count", 0)

        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            return total


def _next_sequence(now: datetime, dynamo_client: Any, bookings_table: str) -> int | None:
    try:
        return count_bookings_on(now.date(), dynamo_client, bookings_table) + 1
    except (ClientError, BotoCoreError) as e:
        logger.warning("Failed to query booking sequence, using random suffix: %s", e)
        return None


def generate_booking_id(dynamo_client: Any, bookings_table: str, now: datetime | None = None) -> str:
    now = (now or utc_now()).astimezone(timezone.utc)
    seq = _next_sequence(now, dynamo_client, bookings_table)
    return _sequenced_booking_id(now, seq) if seq is not None else _random_booking_id(now)


def _booking_document(booking: Booking, tenant_id: str) -> dict[str, Any]:
    return {
        "PK": build_tenant_pk(tenant_id, "BOOKING", booking.booking_id),
        "SK": "METADATA",
        "EntityType": "Booking",
        "GSI1PK": f"{tenant_id}#STATUS#{booking.status.value}",
        "GSI1SK": f"PICKUP#{booking.pickup_time}",
        "GSI2PK": f"{tenant_id}#DATE#{booking.created_at[:10]}",
        "GSI2SK": f"CREATED#{booking.created_at}",
        "tenantId": tenant_id,
        **booking.model_dump(by_alias=True, mode="json", exclude_none=True),
    }


def _put_booking(booking: Booking, tenant_id: str, dynamo_client: Any, bookings_table: str) -> bool:
    """Write the booking unless the ID is taken. Returns False on collision."""
    try:
        dynamo_client.put_item(
            TableName=bookings_table,
            Item=to_item(_booking_document(booking, tenant_id)),
            ConditionExpression="attribute_not_exists(PK)",
        )
    except ClientError as e:
        if _is_conditional_failure(e):
            return False
        raise
    return True


def _ensure_quote_convertible(
    quote_id: str, dynamo_client: Any, table_name: str, now: datetime
) -> dict[str, Any] | None:
    item = fetch_quote_item(quote_id, dynamo_client, table_name)
    if item is None:
        logger.warning(
            "Quote %s not found (likely expired via TTL), booking proceeds",
            quote_id,
            extra={"event": "quote_missing_on_booking", "quote_id": quote_id},
        )
        return None

    status = effective_status(quote_document(item), now)
    if status != QuoteStatus.VALID.value:
        raise ConflictError(f"Quote {quote_id} is {status}, cannot convert")
    return item


def _convert_quote(item: dict[str, Any], booking_id: str, dynamo_client: Any, table_name: str, now: datetime) -> bool:
    """Mark a stored quote as converted. False if it was converted concurrently or has expired."""
    tenant_id = item.get("tenantId") or get_tenant_id()
    try:
        dynamo_client.update_item(
            TableName=table_name,
            Key={"PK": to_attr(item["PK"]), "SK": to_attr("METADATA")},
            UpdateExpression=(
                "SET #data.#status = :converted, #data.bookingId = :bookingId, "
                "GSI1PK = :gsi1pk, UpdatedAt = :updatedAt REMOVE #ttl"
            ),
            ConditionExpression=(
                "attribute_exists(PK) AND #data.#status = :valid "
                "AND (attribute_not_exists(#data.#expiresAt) OR #data.#expiresAt > :now)"
            ),
            ExpressionAttributeNames={"#data": "Data", "#status": "status", "#expiresAt": "expiresAt", "#ttl": "TTL"},
            ExpressionAttributeValues=to_expression_values(
                {
                    ":converted": QuoteStatus.CONVERTED.value,
                    ":valid": QuoteStatus.VALID.value,
                    ":bookingId": booking_id,
                    ":now": isoformat_utc(now),
                    ":gsi1pk": f"{tenant_id}#STATUS#{QuoteStatus.CONVERTED.value}",
                    ":updatedAt": int(now.timestamp()),
                }
            ),
        )
    except ClientError as e:
        if _is_conditional_failure(e):
            return False
        raise
    return True


def create_booking(
    request: CreateBookingRequest,
    dynamo_client: Any,
    bookings_table: str,
    quotes_table: str,
    now: datetime | None = None,
) -> Booking:
    """Create a pending booking and, if it came from a quote, convert that quote.

    An ID collision bumps the sequence and retries; after
    ``MAX_CREATE_ATTEMPTS`` a random suffix is used instead.
    """
    now = (now or utc_now()).astimezone(timezone.utc)
    tenant_id = get_tenant_id()

    quote_item = None
    if request.quote_id:
        quote_item = _ensure_quote_convertible(request.quote_id, dynamo_client, quotes_table, now)

    created_at = isoformat_utc(now)
    seq = _next_sequence(now, dynamo_client, bookings_table)

    booking = None
    for attempt in range(MAX_CREATE_ATTEMPTS + 1):
        if seq is not None and attempt < MAX_CREATE_ATTEMPTS:
            booking_id = _sequenced_booking_id(now, seq + attempt)
        else:
            booking_id = _random_booking_id(now)

        candidate = Booking(
            booking_id=booking_id,
            quote_id=request.quote_id,
            status=BookingStatus.PENDING,
            customer=Customer(
                name=request.customer_name, email=request.customer_email, phone=request.customer_phone
            ),
            journey=request.journey,
            pickup_location=request.pickup_location,
            dropoff_location=request.dropoff_location,
            waypoints=request.waypoints,
            pickup_time=request.pickup_time,
            passengers=request.passengers,
            luggage=request.luggage,
            return_journey=request.return_journey,
            vehicle_type=request.vehicle_type,
            pricing=request.pricing,
            payment=Payment(
                method=request.payment_method,
                status=request.payment_status,
                stripe_payment_intent_id=request.stripe_payment_intent_id,
            ),
            special_requests=request.special_requests,
            flight_number=request.flight_number,
            created_at=created_at,
            updated_at=created_at,
        )
        if _put_booking(candidate, tenant_id, dynamo_client, bookings_table):
            booking = candidate
            break
        logger.warning("Booking ID collision on %s, retrying", booking_id, extra={"event": "booking_id_collision"})

    if booking is None:
        raise ConflictError("Could not allocate a unique booking ID")

    if quote_item is not None and not _convert_quote(
        quote_item, booking.booking_id, dynamo_client, quotes_table, now
    ):
        dynamo_client.delete_item(
            TableName=bookings_table,
            Key={"PK": to_attr(build_tenant_pk(tenant_id, "BOOKING", booking.booking_id)), "SK": to_attr("METADATA")},
        )
        raise ConflictError(f"Quote {request.quote_id} was converted by another booking or has expired")

    logger.info(
        "Booking created: %s",
        booking.booking_id,
        extra={
            "event": "booking_created",
            "booking_id": booking.booking_id,
            "quote_id": request.quote_id,
            "tenant_id": tenant_id,
        },
    )
    return booking


def _get_booking_item(booking_id: str, dynamo_client: Any, bookings_table: str) -> dict[str, Any]:
    tenant_id = get_tenant_id()
    for pk in (build_tenant_pk(tenant_id, "BOOKING", booking_id), f"BOOKING#{booking_id}"):
        response = dynamo_client.get_item(
            TableName=bookings_table, Key={"PK": to_attr(pk), "SK": to_attr("METADATA")}
        )
        item = response.get("Item")
        if item:
            document = from_item(item)
            validate_tenant_access(tenant_id, document.get("tenantId"))
            return document
    raise NotFoundError(f"Booking {booking_id} not found")


def get_booking(booking_id: str, dynamo_client: Any, bookings_table: str) -> Booking:
    return Booking.model_validate(_get_booking_item(booking_id, dynamo_client, bookings_table))


def list_bookings(filters: BookingListFilters, dynamo_client: Any, bookings_table: str) -> list[Booking]:
    """Bookings by status (GSI1) or by creation date (GSI2, default today), newest first."""
    tenant_id = get_tenant_id()

    if filters.status:
        index, key_name = "GSI1", "GSI1PK"
        key_value = f"{tenant_id}#STATUS#{filters.status.value}"
    else:
        day = filters.created_on or utc_now().date()
        index, key_name = "GSI2", "GSI2PK"
        key_value = f"{tenant_id}#DATE#{day.isoformat()}"

    response = dynamo_client.query(
        TableName=bookings_table,
        IndexName=index,
        KeyConditionExpression=f"{key_name} = :key",
        ExpressionAttributeValues=to_expression_values({":key": key_value}),
        Limit=filters.limit,
        ScanIndexForward=False,
    )
    bookings = [Booking.model_validate(from_item(item)) for item in response.get("Items", [])]

    logger.info(
        "Listed %d booking(s)",
        len(bookings),
        extra={"event": "bookings_listed", "index": index, "status": filters.status},
    )
    return bookings


def update_booking_status(
    booking_id: str, new_status: BookingStatus, dynamo_client: Any, bookings_table: str
) -> Booking:
    """Move a booking along the state machine.

    The write is conditional on the status that was read, so a concurrent
    change surfaces as a conflict instead of being overwritten.
    """
    item = _get_booking_item(booking_id, dynamo_client, bookings_table)
    current = BookingStatus(item["status"])

    if not can_transition(current, new_status):
        raise ConflictError(
            f"Cannot change booking {booking_id} from {current.value} to {new_status.value}",
            code=ErrorCode.INVALID_TRANSITION,
            details=[{"field": "status", "message": f"Invalid transition: {current.value} -> {new_status.value}"}],
        )

    tenant_id = item.get("tenantId") or get_tenant_id()
    try:
        response = dynamo_client.update_item(
            TableName=bookings_table,
            Key={"PK": to_attr(item["PK"]), "SK": to_attr("METADATA")},
            UpdateExpression="SET #status = :new, GSI1PK = :gsi1pk, updatedAt = :updatedAt",
            ConditionExpression="#status = :current",
            ExpressionAttributeNames={"#status": "status"},
            ExpressionAttributeValues=to_expression_values(
                {
                    ":new": new_status.value,
                    ":current": current.value,
                    ":gsi1pk": f"{tenant_id}#STATUS#{new_status.value}",
                    ":updatedAt": isoformat_utc(utc_now()),
                }
            ),
            ReturnValues="ALL_NEW",
        )
    except ClientError as e:
        if _is_conditional_failure(e):
            raise ConflictError(f"Booking {booking_id} was modified concurrently") from e
        raise

    logger.info(
        "Booking %s: %s -> %s",
        booking_id,
        current.value,
        new_status.value,
        extra={"event": "booking_status_updated", "booking_id": booking_id},
    )
    return Booking.model_validate(from_item(response["Attributes"]))
