"""Booking endpoints: create, fetch, list and status changes."""

from typing import Any

from core.clients import get_dynamo_client
from core.config import get_config
from core.http import Headers, api_handler, json_response, method_not_allowed, parse_body, path_param, query_params
from core.models.booking import BookingListFilters, CreateBookingRequest, UpdateBookingStatusRequest
from core.services.bookings import create_booking, get_booking, list_bookings, update_booking_status


@api_handler(methods="GET,POST,PUT,OPTIONS", public=True)
def handler(event: dict[str, Any], headers: Headers) -> dict[str, Any]:
    config = get_config()
    dynamo_client = get_dynamo_client()
    method = event.get("httpMethod")
    booking_id = path_param(event, "bookingId")

    if method == "POST" and not booking_id:
        request = CreateBookingRequest.model_validate(parse_body(event))
        booking = create_booking(request, dynamo_client, config.bookings_table, config.table_name)
        return json_response(201, {"message": "Booking created successfully", "booking": booking.to_api()}, headers)

    if method == "GET" and booking_id:
        booking = get_booking(booking_id, dynamo_client, config.bookings_table)
        return json_response(200, {"booking": booking.to_api()}, headers)

    if method == "GET":
        filters = BookingListFilters.model_validate(query_params(event))
        bookings = list_bookings(filters, dynamo_client, config.bookings_table)
        return json_response(200, {"bookings": [b.to_api() for b in bookings], "count": len(bookings)}, headers)

    if method == "PUT" and booking_id:
        request = UpdateBookingStatusRequest.model_validate(parse_body(event))
        booking = update_booking_status(booking_id, request.status, dynamo_client, config.bookings_table)
        return json_response(200, {"message": "Booking updated", "booking": booking.to_api()}, headers)

    raise method_not_allowed(method)
