"""Google Maps route lookup (Distance Matrix, or Directions when there are waypoints)."""

import logging
import math
from collections.abc import Sequence
from typing import Any

import httpx

from core.errors import RouteCalculationError
from core.models.quote import Distance, Duration, Location, RouteDetails

logger = logging.getLogger(__name__)

DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"
DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"
METERS_PER_MILE = 1609.34
REQUEST_TIMEOUT = 10.0


def _route_details(meters: int, seconds: int, distance_text: str, duration_text: str) -> RouteDetails:
    return RouteDetails(
        distance=Distance(meters=meters, miles=round(meters / METERS_PER_MILE, 2), text=distance_text),
        duration=Duration(seconds=seconds, minutes=math.ceil(seconds / 60), text=duration_text),
    )


def _format_duration(seconds: int) -> str:
    minutes = math.ceil(seconds / 60)
    hours, mins = divmod(minutes, 60)
    if hours and mins:
        return f"{hours} hour{'s' if hours > 1 else ''} {mins} min{'s' if mins != 1 else ''}"
    if hours:
        return f"{hours} hour{'s' if hours > 1 else ''}"
    return f"{mins} min{'s' if mins != 1 else ''}"


def _get_json(client: httpx.Client, url: str, params: dict[str, str]) -> dict[str, Any]:
    try:
        response = client.get(url, params=params)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPError as e:
        logger.error("Google Maps request failed: %s", e, extra={"event": "maps_http_error"})
        raise RouteCalculationError(f"Google Maps request failed: {e}") from e
    except ValueError as e:
        raise RouteCalculationError("Google Maps returned invalid JSON") from e


def _distance_matrix(client: httpx.Client, origin: str, destination: str, api_key: str) -> RouteDetails:
    data = _get_json(
        client,
        DISTANCE_MATRIX_URL,
        {"origins": origin, "destinations": destination, "units": "imperial", "key": api_key},
    )
    if data.get("status") != "OK":
        raise RouteCalculationError(f"Google Maps API error: {data.get('status')}")

    try:
        element = data["rows"][0]["elements"][0]
    except (KeyError, IndexError) as e:
        raise RouteCalculationError("Google Maps returned no route elements") from e

    if element.get("status") != "OK":
        raise RouteCalculationError(f"Route calculation failed: {element.get('status')}")

    return _route_details(
        element["distance"]["value"],
        element["duration"]["value"],
        element["distance"]["text"],
        element["duration"]["text"],
    )


def _directions(
    client: httpx.Client, origin: str, destination: str, waypoints: Sequence[str], api_key: str
) -> RouteDetails:
    data = _get_json(
        client,
        DIRECTIONS_URL,
        {
            "origin": origin,
            "destination": destination,
            "waypoints": "|".join(waypoints),
            "units": "imperial",
            "key": api_key,
        },
    )
    if data.get("status") != "OK" or not data.get("routes"):
        raise RouteCalculationError(f"Google Maps API error: {data.get('status')}")

    legs = data["routes"][0].get("legs") or []
    if not legs:
        raise RouteCalculationError("Google Maps returned a route without legs")

    meters = sum(leg["distance"]["value"] for leg in legs)
    seconds = sum(leg["duration"]["value"] for leg in legs)
    miles = round(meters / METERS_PER_MILE, 1)
    return _route_details(meters, seconds, f"{miles} mi", _format_duration(seconds))


def calculate_route(
    origin: Location,
    destination: Location,
    api_key: str,
    waypoints: Sequence[Location] | None = None,
    http_client: httpx.Client | None = None,
) -> RouteDetails:
    """Distance and drive time from ``origin`` to ``destination``.

    With waypoints the Directions API is used and every leg is summed, so the
    result covers the whole multi-stop journey.
    """
    client = http_client or httpx.Client(timeout=REQUEST_TIMEOUT)
    try:
        if waypoints:
            route = _directions(
                client,
                origin.route_query(),
                destination.route_query(),
                [wp.route_query() for wp in waypoints],
                api_key,
            )
        else:
            route = _distance_matrix(client, origin.route_query(), destination.route_query(), api_key)
    finally:
        if http_client is None:
            client.close()

    logger.info(
        "Route calculated: %.2f miles, %d minutes",
        route.distance.miles,
        route.duration.minutes,
        extra={"event": "route_calculated", "waypoints": len(waypoints or [])},
    )
    return route
