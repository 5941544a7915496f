"""CSV rendering of normalized admin quotes."""

import csv
import io
from datetime import datetime, timezone
from typing import Any

from core.models.base import parse_iso_datetime, utc_now

CSV_HEADERS = [
    "Quote ID",
    "Created Date",
    "Status",
    "Customer Email",
    "Pickup Location",
    "Dropoff Location",
    "Pickup Time",
    "Vehicle Type",
    "Price",
    "Booking ID",
]

VEHICLE_DISPLAY_NAMES = {
    "standard": "Standard Saloon",
    "executive": "Executive Saloon",
    "minibus": "Minibus (8 seats)",
}


def format_quote_id(quote_id: str | None) -> str:
    if not quote_id:
        return ""
    return quote_id.replace("QUOTE#", "#", 1)


def format_datetime(value: str | None) -> str:
    """``2026-01-30T14:05:09Z`` -> ``30/01/2026, 14:05:09`` (en-GB, 24h, UTC)."""
    if not value:
        return ""
    try:
        return parse_iso_datetime(value).astimezone(timezone.utc).strftime("%d/%m/%Y, %H:%M:%S")
    except ValueError:
        return value


def format_status(status: str | None) -> str:
    return status[:1].upper() + status[1:] if status else ""


def format_vehicle_type(vehicle_type: str | None) -> str:
    if not vehicle_type:
        return ""
    return VEHICLE_DISPLAY_NAMES.get(vehicle_type, vehicle_type)


def format_price(pounds: float | None) -> str:
    if pounds is None:
        return ""
    return f"£{pounds:.2f}"


def generate_csv(quotes: list[dict[str, Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)

    for quote in quotes:
        writer.writerow(
            [
                format_quote_id(quote.get("quoteId")),
                format_datetime(quote.get("createdAt")),
                format_status(quote.get("status")),
                quote.get("customerEmail") or "",
                (quote.get("pickupLocation") or {}).get("address") or "",
                (quote.get("dropoffLocation") or {}).get("address") or "",
                format_datetime(quote.get("pickupTime")),
                format_vehicle_type(quote.get("vehicleType")),
                format_price(quote.get("totalPrice")),
                quote.get("bookingId") or "",
            ]
        )

    return buffer.getvalue()


def generate_csv_filename(now: datetime | None = None) -> str:
    return f"durdle-quotes-{(now or utc_now()).strftime('%Y-%m-%d')}.csv"
