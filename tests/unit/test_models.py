from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from core.models import (
    BookingListFilters,
    BookingStatus,
    CreateBookingRequest,
    CreateFixedRouteRequest,
    JourneyType,
    QuoteListFilters,
    QuoteRequest,
    UploadRequest,
    can_transition,
)
from core.models.base import isoformat_utc, parse_iso_datetime

VALID_QUOTE = {
    "pickupLocation": {"address": "Bournemouth Airport", "placeId": "ChIJ_bournemouth"},
    "dropoffLocation": {"address": "Poole Quay", "placeId": "ChIJ_poole"},
    "pickupTime": "2026-03-10T09:00:00Z",
    "passengers": 2,
}


# --- base helpers ---


def test_isoformat_utc_millisecond_z():
    dt = datetime(2026, 1, 30, 14, 5, 9, 123456, tzinfo=timezone.utc)
    assert isoformat_utc(dt) == "2026-01-30T14:05:09.123Z"


def test_isoformat_utc_converts_offsets_and_naive():
    dt = datetime(2026, 6, 1, 10, 0, tzinfo=timezone(timedelta(hours=1)))
    assert isoformat_utc(dt) == "2026-06-01T09:00:00.000Z"
    assert isoformat_utc(datetime(2026, 6, 1, 10, 0)) == "2026-06-01T10:00:00.000Z"


def test_parse_iso_datetime():
    assert parse_iso_datetime("2026-01-30T14:05:09Z").tzinfo is not None
    assert parse_iso_datetime("2026-01-30T14:05:09").tzinfo == timezone.utc


# --- QuoteRequest ---


def test_quote_request_camel_case_aliases():
    req = QuoteRequest.model_validate(VALID_QUOTE)
    assert req.pickup_location.place_id == "ChIJ_bournemouth"
    assert req.journey_type == JourneyType.ONE_WAY
    assert req.vehicle_type == "standard"
    assert req.pickup_location.route_query() == "place_id:ChIJ_bournemouth"


def test_quote_request_one_way_needs_dropoff():
    with pytest.raises(ValidationError, match="Dropoff location is required"):
        QuoteRequest.model_validate({**VALID_QUOTE, "dropoffLocation": None})


def test_quote_request_same_pickup_and_dropoff():
    with pytest.raises(ValidationError, match="must be different"):
        QuoteRequest.model_validate({**VALID_QUOTE, "dropoffLocation": {"address": "Bournemouth Airport"}})


def test_quote_request_hourly_needs_duration():
    data = {**VALID_QUOTE, "journeyType": "by-the-hour", "dropoffLocation": None}
    with pytest.raises(ValidationError, match="Duration is required"):
        QuoteRequest.model_validate(data)

    req = QuoteRequest.model_validate({**data, "durationHours": 4})
    assert req.duration_hours == 4


@pytest.mark.parametrize("hours", [1, 13])
def test_quote_request_duration_bounds(hours):
    with pytest.raises(ValidationError):
        QuoteRequest.model_validate({**VALID_QUOTE, "journeyType": "by-the-hour", "durationHours": hours})


@pytest.mark.parametrize("passengers", [0, 9])
def test_quote_request_passenger_bounds(passengers):
    with pytest.raises(ValidationError):
        QuoteRequest.model_validate({**VALID_QUOTE, "passengers": passengers})


def test_quote_request_too_many_waypoints():
    waypoints = [{"address": f"Stop {i}"} for i in range(6)]
    with pytest.raises(ValidationError):
        QuoteRequest.model_validate({**VALID_QUOTE, "waypoints": waypoints})


def test_quote_request_waypoint_wait_limit():
    with pytest.raises(ValidationError):
        QuoteRequest.model_validate({**VALID_QUOTE, "waypoints": [{"address": "Stop", "waitTime": 481}]})


def test_quote_request_child_seats_cannot_exceed_passengers():
    with pytest.raises(ValidationError, match="child seats"):
        QuoteRequest.model_validate({**VALID_QUOTE, "extras": {"babySeats": 2, "childSeats": 1}})


def test_quote_request_bad_pickup_time():
    with pytest.raises(ValidationError, match="ISO 8601"):
        QuoteRequest.model_validate({**VALID_QUOTE, "pickupTime": "tomorrow morning"})


def test_quote_request_bad_contact_email():
    with pytest.raises(ValidationError):
        QuoteRequest.model_validate({**VALID_QUOTE, "contactDetails": {"email": "not-an-email"}})


def test_quote_request_unknown_vehicle_type():
    with pytest.raises(ValidationError):
        QuoteRequest.model_validate({**VALID_QUOTE, "vehicleType": "limousine"})


# --- filters ---


def test_quote_list_filters_defaults():
    filters = QuoteListFilters.model_validate({})
    assert filters.status == "all"
    assert filters.limit == 50
    assert filters.sort_by == "date"
    assert filters.sort_order == "desc"


def test_quote_list_filters_normalize_dates():
    filters = QuoteListFilters.model_validate({"dateFrom": "2026-01-01T00:00:00Z"})
    assert filters.date_from == "2026-01-01T00:00:00.000Z"


@pytest.mark.parametrize(
    "bad",
    [{"status": "pending"}, {"limit": 0}, {"limit": 101}, {"sortBy": "name"}, {"dateTo": "yesterday"}],
)
def test_quote_list_filters_reject(bad):
    with pytest.raises(ValidationError):
        QuoteListFilters.model_validate(bad)


def test_booking_list_filters_date_alias():
    filters = BookingListFilters.model_validate({"date": "2026-02-01", "status": "confirmed"})
    assert filters.created_on.isoformat() == "2026-02-01"
    assert filters.status == BookingStatus.CONFIRMED


# --- bookings ---


@pytest.mark.parametrize(
    "current,new,allowed",
    [
        (BookingStatus.PENDING, BookingStatus.CONFIRMED, True),
        (BookingStatus.PENDING, BookingStatus.CANCELLED, True),
        (BookingStatus.PENDING, BookingStatus.COMPLETED, False),
        (BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS, True),
        (BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED, True),
        (BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED, False),
        (BookingStatus.COMPLETED, BookingStatus.PENDING, False),
        (BookingStatus.CANCELLED, BookingStatus.CONFIRMED, False),
    ],
)
def test_booking_transitions(current, new, allowed):
    assert can_transition(current, new) is allowed


def test_create_booking_request_requires_contact():
    data = {
        "customerName": "Jane Doe",
        "customerEmail": "jane@example.com",
        "customerPhone": "+447700900000",
        "pickupLocation": {"address": "A"},
        "dropoffLocation": {"address": "B"},
        "pickupTime": "2026-03-10T09:00:00Z",
        "vehicleType": "standard",
        "pricing": {"breakdown": {"subtotal": 2050, "total": 2050}, "displayTotal": "£20.50"},
    }
    req = CreateBookingRequest.model_validate(data)
    assert req.passengers == 1
    assert req.payment_method == "card"

    with pytest.raises(ValidationError):
        CreateBookingRequest.model_validate({**data, "customerEmail": "nope"})


# --- fixed routes / uploads ---


def test_fixed_route_endpoints_must_differ():
    with pytest.raises(ValidationError, match="must be different"):
        CreateFixedRouteRequest.model_validate(
            {
                "originPlaceId": "ChIJ_a",
                "originName": "A",
                "destinationPlaceId": "ChIJ_a",
                "destinationName": "A again",
                "vehicleId": "standard",
                "price": 4500,
            }
        )


def test_upload_request_folder_defaults_to_vehicles():
    assert UploadRequest.model_validate({"fileName": "car.png", "fileType": "image/png"}).folder == "vehicles"


@pytest.mark.parametrize(
    "folder, expected",
    [
        ("Branding", "branding"),
        ("../etc", "etc"),
        ("fleet photos/2026", "fleet-photos-2026"),
        ("///", "vehicles"),
        ("x" * 80, "x" * 63),
    ],
)
def test_upload_request_folder_is_sanitised(folder, expected):
    request = UploadRequest.model_validate({"fileName": "car.png", "fileType": "image/png", "folder": folder})
    assert request.folder == expected
