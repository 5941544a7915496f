"""
Fare calculation. No I/O.

All amounts are integer pence. Charges round half-up to the nearest penny.
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from core.models.quote import Pricing, PricingBreakdown, VehicleMetadata, Waypoint
from core.models.vehicle import VehicleRates

CURRENCY = "GBP"
DEFAULT_PER_HOUR = 3500
MAX_DISTANCE_MILES = 500
MAX_WAIT_MINUTES = 480

FALLBACK_VEHICLE_RATES: dict[str, VehicleRates] = {
    "standard": VehicleRates(
        base_fare=500,
        per_mile=100,
        per_minute=10,
        per_hour=3500,
        name="Standard Sedan",
        description="Comfortable sedan for up to 4 passengers",
        capacity=4,
        features=["Air Conditioning", "Phone Charger"],
    ),
    "executive": VehicleRates(
        base_fare=800,
        per_mile=150,
        per_minute=15,
        per_hour=5000,
        name="Executive Sedan",
        description="Premium sedan with luxury amenities",
        capacity=4,
        features=["Air Conditioning", "WiFi", "Premium Amenities"],
    ),
    "minibus": VehicleRates(
        base_fare=1000,
        per_mile=120,
        per_minute=12,
        per_hour=7000,
        name="Minibus",
        description="Spacious minibus for up to 8 passengers",
        capacity=8,
        features=["Air Conditioning", "WiFi", "Extra Luggage Space"],
    ),
}


def round_pence(amount: float) -> int:
    return int(Decimal(repr(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_display_total(pence: int) -> str:
    pounds = (Decimal(pence) / 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"£{pounds}"


def calculate_variable_pricing(distance_miles: float, wait_time_minutes: float, rates: VehicleRates) -> Pricing:
    base_fare = rates.base_fare
    distance_charge = round_pence(distance_miles * rates.per_mile)
    wait_time_charge = round_pence(wait_time_minutes * rates.per_minute)
    subtotal = base_fare + distance_charge + wait_time_charge
    tax = 0
    total = subtotal + tax

    return Pricing(
        currency=CURRENCY,
        breakdown=PricingBreakdown(
            base_fare=base_fare,
            distance_charge=distance_charge,
            wait_time_charge=wait_time_charge,
            subtotal=subtotal,
            tax=tax,
            total=total,
        ),
        display_total=format_display_total(total),
    )


def calculate_fixed_route_pricing(fixed_price: int, vehicle_metadata: VehicleMetadata) -> Pricing:
    return Pricing(
        currency=CURRENCY,
        breakdown=PricingBreakdown(subtotal=fixed_price, total=fixed_price),
        display_total=format_display_total(fixed_price),
        is_fixed_route=True,
        vehicle_metadata=vehicle_metadata,
    )


def calculate_hourly_pricing(duration_hours: int, rates: VehicleRates) -> Pricing:
    per_hour = rates.per_hour or DEFAULT_PER_HOUR
    hourly_charge = duration_hours * per_hour

    return Pricing(
        currency=CURRENCY,
        breakdown=PricingBreakdown(
            hourly_charge=hourly_charge,
            duration_hours=duration_hours,
            subtotal=hourly_charge,
            total=hourly_charge,
        ),
        display_total=format_display_total(hourly_charge),
        is_hourly_rate=True,
    )


def calculate_total_wait_time(waypoints: Iterable[Waypoint] | None) -> float:
    if not waypoints:
        return 0
    return sum(wp.wait_time or 0 for wp in waypoints)


def validate_pricing_inputs(distance_miles: float, wait_time_minutes: float) -> tuple[bool, list[str]]:
    errors: list[str] = []

    distance_ok = isinstance(distance_miles, (int, float)) and not isinstance(distance_miles, bool)
    wait_ok = isinstance(wait_time_minutes, (int, float)) and not isinstance(wait_time_minutes, bool)

    if not distance_ok or distance_miles < 0:
        errors.append("Distance must be a non-negative number")
    elif distance_miles > MAX_DISTANCE_MILES:
        errors.append(f"Distance exceeds maximum allowed ({MAX_DISTANCE_MILES} miles)")

    if not wait_ok or wait_time_minutes < 0:
        errors.append("Wait time must be a non-negative number")
    elif wait_time_minutes > MAX_WAIT_MINUTES:
        errors.append("Wait time exceeds maximum allowed (8 hours)")

    return not errors, errors
