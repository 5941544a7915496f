"""
Admin-defined flat fares for (origin place, destination place, vehicle).

Key layout in the fixed-routes table:
    PK     = ROUTE#{originPlaceId}
    SK     = DEST#{destinationPlaceId}#VEHICLE#{vehicleId}
    GSI1PK = VEHICLE#{vehicleId}
    GSI1SK = ROUTE#{originPlaceId}#{destinationPlaceId}
"""

import logging
import math
import uuid
from typing import Any

from botocore.exceptions import ClientError

from core.db.dynamo import decode_cursor, encode_cursor, from_item, to_attr, to_expression_values, to_item
from core.errors import ConflictError, NotFoundError, ValidationError
from core.models.base import isoformat_utc, utc_now
from core.models.fixed_route import CreateFixedRouteRequest, FixedRoute, FixedRouteFilters, UpdateFixedRouteRequest
from core.models.quote import Location
from core.secrets import get_google_maps_api_key
from core.services import maps

logger = logging.getLogger(__name__)


def _route_keys(origin_place_id: str, destination_place_id: str, vehicle_id: str) -> dict[str, str]:
    return {
        "PK": f"ROUTE#{origin_place_id}",
        "SK": f"DEST#{destination_place_id}#VEHICLE#{vehicle_id}",
        "GSI1PK": f"VEHICLE#{vehicle_id}",
        "GSI1SK": f"ROUTE#{origin_place_id}#{destination_place_id}",
    }


def _route_document(route: FixedRoute) -> dict[str, Any]:
    keys = _route_keys(route.origin_place_id, route.destination_place_id, route.vehicle_id)
    return {**keys, **route.model_dump(by_alias=True)}


def _measure(origin_place_id: str, destination_place_id: str, api_key: str) -> tuple[float, int]:
    """Distance in miles and drive time in whole minutes (nearest)."""
    route = maps.calculate_route(
        Location(address=origin_place_id, place_id=origin_place_id),
        Location(address=destination_place_id, place_id=destination_place_id),
        api_key,
    )
    return route.distance.meters / maps.METERS_PER_MILE, math.floor(route.duration.seconds / 60 + 0.5)


def find_fixed_route(
    origin_place_id: str, destination_place_id: str, vehicle_id: str, dynamo_client: Any, fixed_routes_table: str
) -> FixedRoute | None:
    """Active fixed route for the exact triple, or None."""
    keys = _route_keys(origin_place_id, destination_place_id, vehicle_id)
    response = dynamo_client.get_item(
        TableName=fixed_routes_table,
        Key={"PK": to_attr(keys["PK"]), "SK": to_attr(keys["SK"])},
    )
    item = response.get("Item")
    if not item:
        return None

    route = FixedRoute.model_validate(from_item(item))
    return route if route.active else None


def list_routes(filters: FixedRouteFilters, dynamo_client: Any, fixed_routes_table: str) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"TableName": fixed_routes_table, "Limit": filters.limit}
    if filters.cursor:
        kwargs["ExclusiveStartKey"] = decode_cursor(filters.cursor)

    if filters.vehicle_id:
        kwargs["IndexName"] = "GSI1"
        kwargs["KeyConditionExpression"] = "GSI1PK = :gsi1pk"
        kwargs["ExpressionAttributeValues"] = to_expression_values({":gsi1pk": f"VEHICLE#{filters.vehicle_id}"})
        response = dynamo_client.query(**kwargs)
    elif filters.origin:
        values = {":pk": f"ROUTE#{filters.origin}"}
        kwargs["KeyConditionExpression"] = "PK = :pk"
        if filters.destination:
            kwargs["KeyConditionExpression"] += " AND begins_with(SK, :sk)"
            values[":sk"] = f"DEST#{filters.destination}#"
        kwargs["ExpressionAttributeValues"] = to_expression_values(values)
        response = dynamo_client.query(**kwargs)
    else:
        response = dynamo_client.scan(**kwargs)

    routes = [FixedRoute.model_validate(from_item(item)) for item in response.get("Items", [])]
    if filters.active is not None:
        routes = [r for r in routes if r.active == filters.active]

    last_key = response.get("LastEvaluatedKey")
    return {
        "routes": [r.to_api() for r in routes],
        "count": len(routes),
        "cursor": encode_cursor(last_key) if last_key else None,
    }


def _find_item_by_route_id(route_id: str, dynamo_client: Any, fixed_routes_table: str) -> dict[str, Any]:
    last_key = None
    while True:
        scan_kwargs: dict[str, Any] = {
            "TableName": fixed_routes_table,
            "FilterExpression": "routeId = :routeId",
            "ExpressionAttributeValues": to_expression_values({":routeId": route_id}),
        }
        if last_key:
            scan_kwargs["ExclusiveStartKey"] = last_key

        response = dynamo_client.scan(**scan_kwargs)
        items = response.get("Items", [])
        if items:
            return from_item(items[0])

        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            raise NotFoundError(f"Fixed route {route_id} not found")


def get_route(route_id: str, dynamo_client: Any, fixed_routes_table: str) -> FixedRoute:
    return FixedRoute.model_validate(_find_item_by_route_id(route_id, dynamo_client, fixed_routes_table))


def create_route(
    request: CreateFixedRouteRequest, api_key: str, dynamo_client: Any, fixed_routes_table: str
) -> FixedRoute:
    keys = _route_keys(request.origin_place_id, request.destination_place_id, request.vehicle_id)
    existing = dynamo_client.get_item(
        TableName=fixed_routes_table,
        Key={"PK": to_attr(keys["PK"]), "SK": to_attr(keys["SK"])},
    )
    if existing.get("Item"):
        raise ConflictError("Route already exists for this origin, destination, and vehicle combination")

    distance, duration = _measure(request.origin_place_id, request.destination_place_id, api_key)

    now = isoformat_utc(utc_now())
    route = FixedRoute(
        route_id=str(uuid.uuid4()),
        distance=distance,
        estimated_duration=duration,
        created_at=now,
        updated_at=now,
        **request.model_dump(),
    )

    try:
        dynamo_client.put_item(
            TableName=fixed_routes_table,
            Item=to_item(_route_document(route)),
            ConditionExpression="attribute_not_exists(PK)",
        )
    except ClientError as e:
        if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
            raise ConflictError("Route already exists for this origin, destination, and vehicle combination") from e
        raise

    logger.info("Fixed route created: %s", route.route_id, extra={"event": "fixed_route_created"})
    return route


def update_route(
    route_id: str,
    request: UpdateFixedRouteRequest,
    api_key: str | None,
    dynamo_client: Any,
    fixed_routes_table: str,
) -> FixedRoute:
    """Apply a partial update.

    Changing an endpoint changes the item's key, so the route is re-measured
    and moved to its new key in a single transaction. Without ``api_key`` the
    Maps key is only resolved when an endpoint changes.
    """
    changes = request.model_dump(exclude_none=True, exclude={"updated_by"})
    if not changes:
        raise ValidationError("No fields to update", details=[{"field": "body", "message": "No fields to update"}])

    item = _find_item_by_route_id(route_id, dynamo_client, fixed_routes_table)
    current = FixedRoute.model_validate(item)
    updated = current.model_copy(
        update={**changes, "updated_at": isoformat_utc(utc_now()), "updated_by": request.updated_by}
    )

    endpoints_changed = (
        updated.origin_place_id != current.origin_place_id
        or updated.destination_place_id != current.destination_place_id
    )

    if not endpoints_changed:
        dynamo_client.put_item(
            TableName=fixed_routes_table,
            Item=to_item(_route_document(updated)),
            ConditionExpression="routeId = :routeId",
            ExpressionAttributeValues=to_expression_values({":routeId": route_id}),
        )
        logger.info("Fixed route updated: %s", route_id, extra={"event": "fixed_route_updated"})
        return updated

    if updated.origin_place_id == updated.destination_place_id:
        raise ValidationError(
            "Origin and destination must be different",
            details=[{"field": "destinationPlaceId", "message": "Origin and destination must be different"}],
        )

    distance, duration = _measure(
        updated.origin_place_id, updated.destination_place_id, api_key or get_google_maps_api_key()
    )
    updated = updated.model_copy(update={"distance": distance, "estimated_duration": duration})

    try:
        dynamo_client.transact_write_items(
            TransactItems=[
                {
                    "Put": {
                        "TableName": fixed_routes_table,
                        "Item": to_item(_route_document(updated)),
                        "ConditionExpression": "attribute_not_exists(PK)",
                    }
                },
                {
                    "Delete": {
                        "TableName": fixed_routes_table,
                        "Key": {"PK": to_attr(item["PK"]), "SK": to_attr(item["SK"])},
                    }
                },
            ]
        )
    except ClientError as e:
        if e.response["Error"]["Code"] == "TransactionCanceledException":
            raise ConflictError("Route already exists for this origin, destination, and vehicle combination") from e
        raise

    logger.info("Fixed route moved: %s", route_id, extra={"event": "fixed_route_updated", "rekeyed": True})
    return updated


def delete_route(route_id: str, dynamo_client: Any, fixed_routes_table: str) -> None:
    item = _find_item_by_route_id(route_id, dynamo_client, fixed_routes_table)
    dynamo_client.delete_item(
        TableName=fixed_routes_table,
        Key={"PK": to_attr(item["PK"]), "SK": to_attr(item["SK"])},
    )
    logger.info("Fixed route deleted: %s", route_id, extra={"event": "fixed_route_deleted"})
