"""Integration tests for booking creation, quote conversion and status changes."""

import json
from unittest.mock import patch

import pytest

from core.db.dynamo import from_item, to_attr
from core.models.quote import Distance, Duration, RouteDetails
from handlers import bookings_manager, quotes_calculator

ROUTE = RouteDetails(
    distance=Distance(meters=20117, miles=12.5, text="12.5 mi"),
    duration=Duration(seconds=1500, minutes=25, text="25 mins"),
)
BOOKING_BODY = {
    "customerName": "Jane Doe",
    "customerEmail": "jane@example.com",
    "customerPhone": "+447700900000",
    "pickupLocation": {"address": "Bournemouth Airport"},
    "dropoffLocation": {"address": "Poole Quay"},
    "pickupTime": "2026-03-10T09:00:00Z",
    "passengers": 2,
    "vehicleType": "standard",
    "pricing": {"breakdown": {"subtotal": 1750, "total": 1750}, "displayTotal": "£17.50"},
}


def _post_booking(api_event, lambda_context, **overrides):
    return bookings_manager.handler(
        api_event(method="POST", path="/v1/bookings", body={**BOOKING_BODY, **overrides}), lambda_context
    )


def _create_quote(api_event, lambda_context):
    with patch("core.services.maps.calculate_route", return_value=ROUTE):
        response = quotes_calculator.handler(
            api_event(
                method="POST",
                path="/v1/quotes",
                body={
                    "pickupLocation": {"address": "Bournemouth Airport"},
                    "dropoffLocation": {"address": "Poole Quay"},
                    "pickupTime": "2026-03-10T09:00:00Z",
                    "passengers": 2,
                },
            ),
            lambda_context,
        )
    return json.loads(response["body"])


@pytest.mark.integration
def test_booking_ids_follow_daily_sequence(aws, api_event, lambda_context):
    ids = []
    for _ in range(3):
        response = _post_booking(api_event, lambda_context)
        assert response["statusCode"] == 201, response["body"]
        body = json.loads(response["body"])
        assert body["message"] == "Booking created successfully"
        ids.append(body["booking"]["bookingId"])

    prefix = ids[0][:-2]
    assert prefix.startswith("DTC-")
    assert ids == [f"{prefix}01", f"{prefix}02", f"{prefix}03"]


@pytest.mark.integration
def test_booking_converts_quote(aws, config, api_event, lambda_context):
    quote = _create_quote(api_event, lambda_context)

    response = _post_booking(api_event, lambda_context, quoteId=quote["quoteId"])
    assert response["statusCode"] == 201
    booking = json.loads(response["body"])["booking"]

    stored = from_item(
        aws.get_item(
            TableName=config.table_name,
            Key={"PK": to_attr(f"TENANT#001#QUOTE#{quote['quoteId']}"), "SK": to_attr("METADATA")},
        )["Item"]
    )
    assert stored["Data"]["status"] == "converted"
    assert stored["Data"]["bookingId"] == booking["bookingId"]
    assert stored["GSI1PK"] == "TENANT#001#STATUS#converted"
    assert "TTL" not in stored

    response = quotes_calculator.handler(
        api_event(path=f"/v1/quotes/{quote['quoteId']}", path_parameters={"quoteId": quote["quoteId"]}),
        lambda_context,
    )
    assert json.loads(response["body"])["status"] == "converted"


@pytest.mark.integration
def test_quote_cannot_be_booked_twice(aws, api_event, lambda_context):
    quote = _create_quote(api_event, lambda_context)

    assert _post_booking(api_event, lambda_context, quoteId=quote["quoteId"])["statusCode"] == 201
    response = _post_booking(api_event, lambda_context, quoteId=quote["quoteId"])

    assert response["statusCode"] == 409
    assert json.loads(response["body"])["error"]["code"] == "CONFLICT"


@pytest.mark.integration
def test_booking_with_expired_quote_id_proceeds(aws, api_event, lambda_context):
    response = _post_booking(api_event, lambda_context, quoteId="quote_deleted_by_ttl")
    assert response["statusCode"] == 201
    assert json.loads(response["body"])["booking"]["quoteId"] == "quote_deleted_by_ttl"


@pytest.mark.integration
def test_get_and_list_bookings(aws, api_event, lambda_context):
    booking = json.loads(_post_booking(api_event, lambda_context)["body"])["booking"]

    response = bookings_manager.handler(
        api_event(path=f"/v1/bookings/{booking['bookingId']}", path_parameters={"bookingId": booking["bookingId"]}),
        lambda_context,
    )
    assert response["statusCode"] == 200
    assert json.loads(response["body"])["booking"]["customer"]["email"] == "jane@example.com"

    response = bookings_manager.handler(api_event(path="/v1/bookings"), lambda_context)
    body = json.loads(response["body"])
    assert body["count"] == 1
    assert body["bookings"][0]["bookingId"] == booking["bookingId"]

    response = bookings_manager.handler(api_event(path="/v1/bookings", query={"status": "pending"}), lambda_context)
    assert json.loads(response["body"])["count"] == 1

    response = bookings_manager.handler(api_event(path="/v1/bookings", query={"status": "confirmed"}), lambda_context)
    assert json.loads(response["body"])["count"] == 0


@pytest.mark.integration
def test_status_transitions(aws, api_event, lambda_context):
    booking_id = json.loads(_post_booking(api_event, lambda_context)["body"])["booking"]["bookingId"]

    def put_status(status):
        return bookings_manager.handler(
            api_event(
                method="PUT",
                path=f"/v1/bookings/{booking_id}",
                path_parameters={"bookingId": booking_id},
                body={"status": status},
            ),
            lambda_context,
        )

    response = put_status("confirmed")
    assert response["statusCode"] == 200
    assert json.loads(response["body"])["booking"]["status"] == "confirmed"

    response = put_status("pending")
    assert response["statusCode"] == 409
    assert json.loads(response["body"])["error"]["code"] == "INVALID_TRANSITION"

    assert put_status("in_progress")["statusCode"] == 200
    assert put_status("completed")["statusCode"] == 200
    assert put_status("cancelled")["statusCode"] == 409

    response = bookings_manager.handler(api_event(path="/v1/bookings", query={"status": "completed"}), lambda_context)
    assert json.loads(response["body"])["count"] == 1


@pytest.mark.integration
def test_unknown_booking(aws, api_event, lambda_context):
    response = bookings_manager.handler(
        api_event(path="/v1/bookings/DTC-01012699", path_parameters={"bookingId": "DTC-01012699"}), lambda_context
    )
    assert response["statusCode"] == 404


@pytest.mark.integration
def test_invalid_status_value(aws, api_event, lambda_context):
    response = bookings_manager.handler(
        api_event(method="PUT", path="/v1/bookings/x", path_parameters={"bookingId": "x"}, body={"status": "lost"}),
        lambda_context,
    )
    assert response["statusCode"] == 400
