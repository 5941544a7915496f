from enum import Enum
from typing import Literal

from pydantic import Field, field_validator, model_validator

from core.models.base import EMAIL_PATTERN, ApiModel, isoformat_utc, parse_iso_datetime

VehicleType = Literal["standard", "executive", "minibus"]
VEHICLE_TYPES: tuple[str, ...] = ("standard", "executive", "minibus")

MAX_WAYPOINTS = 5
MAX_WAIT_MINUTES = 480


class JourneyType(str, Enum):
    ONE_WAY = "one-way"
    BY_THE_HOUR = "by-the-hour"


class QuoteStatus(str, Enum):
    """Stored quote status. ``valid`` is reported to admins as ``active`` or ``expired``."""

    VALID = "valid"
    EXPIRED = "expired"
    CONVERTED = "converted"


class Location(ApiModel):
    address: str = Field(..., min_length=1)
    place_id: str | None = None
    lat: float | None = None
    lng: float | None = None

    def route_query(self) -> str:
        """Google Maps origin/destination string; place IDs are unambiguous."""
        return f"place_id:{self.place_id}" if self.place_id else self.address


class Waypoint(Location):
    wait_time: float | None = Field(default=None, ge=0, le=MAX_WAIT_MINUTES)


class Extras(ApiModel):
    baby_seats: int = Field(default=0, ge=0, le=4)
    child_seats: int = Field(default=0, ge=0, le=4)


class ContactDetails(ApiModel):
    name: str | None = Field(default=None, min_length=2)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    phone: str | None = None


class QuoteRequest(ApiModel):
    pickup_location: Location
    dropoff_location: Location | None = None
    waypoints: list[Waypoint] = Field(default_factory=list, max_length=MAX_WAYPOINTS)
    pickup_time: str
    passengers: int = Field(..., ge=1, le=8)
    luggage: int | None = Field(default=None, ge=0, le=20)
    vehicle_type: VehicleType = "standard"
    journey_type: JourneyType = JourneyType.ONE_WAY
    duration_hours: int | None = Field(default=None, ge=2, le=12)
    extras: Extras | None = None
    compare_mode: bool = False
    return_journey: bool = False
    contact_details: ContactDetails | None = None

    @field_validator("pickup_time")
    @classmethod
    def pickup_time_is_iso(cls, value: str) -> str:
        try:
            parse_iso_datetime(value)
        except ValueError as e:
            raise ValueError("Valid ISO 8601 datetime required") from e
        return value

    @model_validator(mode="after")
    def journey_is_consistent(self) -> "QuoteRequest":
        if self.journey_type == JourneyType.ONE_WAY:
            if self.dropoff_location is None:
                raise ValueError("Dropoff location is required for one-way journeys")
            if self.pickup_location.address == self.dropoff_location.address:
                raise ValueError("Pickup and dropoff locations must be different")
        elif self.duration_hours is None:
            raise ValueError("Duration is required for by-the-hour journeys (minimum 2 hours)")

        seats = (self.extras.baby_seats + self.extras.child_seats) if self.extras else 0
        if seats > self.passengers:
            raise ValueError("Total child seats cannot exceed passenger count")
        return self


class PricingBreakdown(ApiModel):
    base_fare: int = 0
    distance_charge: int = 0
    wait_time_charge: int = 0
    hourly_charge: int | None = None
    duration_hours: int | None = None
    subtotal: int
    tax: int = 0
    total: int


class VehicleMetadata(ApiModel):
    name: str
    description: str = ""
    capacity: int
    features: list[str] = Field(default_factory=list)
    image_url: str = ""


class Pricing(ApiModel):
    currency: str = "GBP"
    breakdown: PricingBreakdown
    display_total: str
    is_fixed_route: bool | None = None
    is_hourly_rate: bool | None = None
    vehicle_metadata: VehicleMetadata | None = None


class Distance(ApiModel):
    meters: int
    miles: float
    text: str


class Duration(ApiModel):
    seconds: int
    minutes: int
    text: str


class RouteDetails(ApiModel):
    distance: Distance
    duration: Duration


class Quote(ApiModel):
    quote_id: str
    status: QuoteStatus = QuoteStatus.VALID
    created_at: str
    expires_at: str
    journey_type: JourneyType
    journey: RouteDetails | None = None
    pricing: Pricing
    vehicle_type: str
    vehicle_options: dict[str, Pricing] | None = None
    pickup_location: Location
    dropoff_location: Location | None = None
    waypoints: list[Waypoint] = Field(default_factory=list)
    pickup_time: str
    passengers: int
    luggage: int | None = None
    duration_hours: int | None = None
    extras: Extras | None = None
    return_journey: bool = False
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    booking_id: str | None = None


QuoteStatusFilter = Literal["all", "active", "expired", "converted"]


class QuoteExportFilters(ApiModel):
    status: QuoteStatusFilter = "all"
    date_from: str | None = None
    date_to: str | None = None
    price_min: float | None = Field(default=None, ge=0)
    price_max: float | None = Field(default=None, ge=0)
    search: str | None = Field(default=None, max_length=200)
    sort_by: Literal["date", "price"] = "date"
    sort_order: Literal["asc", "desc"] = "desc"

    @field_validator("date_from", "date_to")
    @classmethod
    def normalize_datetime(cls, value: str | None) -> str | None:
        # Must match the stored CREATED#<iso> sort keys character for character
        if value is None:
            return None
        try:
            return isoformat_utc(parse_iso_datetime(value))
        except ValueError as e:
            raise ValueError("Valid ISO 8601 datetime required") from e


class QuoteListFilters(QuoteExportFilters):
    limit: int = Field(default=50, ge=1, le=100)
    cursor: str | None = None
