from datetime import date
from enum import Enum

from pydantic import Field, field_validator

from core.models.base import EMAIL_PATTERN, ApiModel, parse_iso_datetime
from core.models.quote import Location, Pricing, RouteDetails, Waypoint


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED}),
    BookingStatus.IN_PROGRESS: frozenset({BookingStatus.COMPLETED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


def can_transition(current: BookingStatus, new: BookingStatus) -> bool:
    return new in ALLOWED_TRANSITIONS[current]


class Customer(ApiModel):
    name: str
    email: str
    phone: str


class Payment(ApiModel):
    method: str = "card"
    status: str = "pending"
    stripe_payment_intent_id: str | None = None


class CreateBookingRequest(ApiModel):
    quote_id: str | None = None
    customer_name: str = Field(..., min_length=1)
    customer_email: str = Field(..., pattern=EMAIL_PATTERN)
    customer_phone: str = Field(..., min_length=1)
    pickup_location: Location
    dropoff_location: Location
    waypoints: list[Waypoint] = Field(default_factory=list)
    pickup_time: str
    passengers: int = Field(default=1, ge=1, le=8)
    luggage: int = Field(default=0, ge=0, le=20)
    return_journey: bool = False
    vehicle_type: str = Field(..., min_length=1)
    pricing: Pricing
    journey: RouteDetails | None = None
    payment_method: str = "card"
    payment_status: str = "pending"
    stripe_payment_intent_id: str | None = None
    special_requests: str = ""
    flight_number: str | None = None

    @field_validator("pickup_time")
    @classmethod
    def pickup_time_is_iso(cls, value: str) -> str:
        try:
            parse_iso_datetime(value)
        except ValueError as e:
            raise ValueError("Valid ISO 8601 datetime required") from e
        return value


class Booking(ApiModel):
    booking_id: str
    quote_id: str | None = None
    status: BookingStatus = BookingStatus.PENDING
    customer: Customer
    journey: RouteDetails | None = None
    pickup_location: Location
    dropoff_location: Location
    waypoints: list[Waypoint] = Field(default_factory=list)
    pickup_time: str
    passengers: int
    luggage: int = 0
    return_journey: bool = False
    vehicle_type: str
    pricing: Pricing
    payment: Payment
    special_requests: str = ""
    flight_number: str | None = None
    created_at: str
    updated_at: str


class UpdateBookingStatusRequest(ApiModel):
    status: BookingStatus


class BookingListFilters(ApiModel):
    status: BookingStatus | None = None
    created_on: date | None = Field(default=None, alias="date")
    limit: int = Field(default=50, ge=1, le=100)
