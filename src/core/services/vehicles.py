"""Vehicle catalogue and tariffs stored in the pricing table (``VEHICLE#{id}`` / ``METADATA``)."""

import logging
import uuid
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.db.dynamo import from_item, to_attr, to_expression_values, to_item
from core.errors import ConflictError, NotFoundError, ValidationError
from core.models.base import isoformat_utc, utc_now
from core.models.vehicle import CreateVehicleRequest, PublicVehicle, UpdateVehicleRequest, Vehicle, VehicleRates
from core.services.pricing import FALLBACK_VEHICLE_RATES

logger = logging.getLogger(__name__)


def _vehicle_key(vehicle_id: str) -> dict[str, Any]:
    return {"PK": to_attr(f"VEHICLE#{vehicle_id}"), "SK": to_attr("METADATA")}


def _scan_vehicles(dynamo_client: Any, pricing_table: str) -> list[Vehicle]:
    vehicles: list[Vehicle] = []
    last_key = None

    while True:
        scan_kwargs: dict[str, Any] = {
            "TableName": pricing_table,
            "FilterExpression": "begins_with(PK, :pkPrefix) AND SK = :sk",
            "ExpressionAttributeValues": to_expression_values({":pkPrefix": "VEHICLE#", ":sk": "METADATA"}),
        }
        if last_key:
            scan_kwargs["ExclusiveStartKey"] = last_key

        response = dynamo_client.scan(**scan_kwargs)
        vehicles.extend(Vehicle.model_validate(from_item(item)) for item in response.get("Items", []))

        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            break

    return vehicles


def list_vehicles(dynamo_client: Any, pricing_table: str, public: bool) -> list[dict[str, Any]]:
    """All vehicles, smallest first. The public view drops tariffs and inactive vehicles."""
    vehicles = sorted(_scan_vehicles(dynamo_client, pricing_table), key=lambda v: v.capacity)

    if public:
        return [
            PublicVehicle.model_validate(v.model_dump()).to_api()
            for v in vehicles
            if v.active
        ]
    return [v.to_api() for v in vehicles]


def get_vehicle(vehicle_id: str, dynamo_client: Any, pricing_table: str) -> Vehicle:
    response = dynamo_client.get_item(TableName=pricing_table, Key=_vehicle_key(vehicle_id))
    item = response.get("Item")
    if not item:
        raise NotFoundError(f"Vehicle {vehicle_id} not found")
    return Vehicle.model_validate(from_item(item))


def create_vehicle(request: CreateVehicleRequest, dynamo_client: Any, pricing_table: str) -> Vehicle:
    now = isoformat_utc(utc_now())
    vehicle = Vehicle(
        vehicle_id=request.vehicle_id or str(uuid.uuid4()),
        name=request.name,
        description=request.description,
        capacity=request.capacity,
        features=request.features,
        base_fare=request.base_fare,
        per_mile=request.per_mile,
        per_minute=request.per_minute,
        per_hour=request.per_hour,
        active=request.active,
        image_key=request.image_key,
        image_url=request.image_url,
        created_at=now,
        updated_at=now,
        updated_by=request.updated_by,
    )

    document = {"PK": f"VEHICLE#{vehicle.vehicle_id}", "SK": "METADATA", **vehicle.model_dump(by_alias=True)}
    try:
        dynamo_client.put_item(
            TableName=pricing_table,
            Item=to_item(document),
            ConditionExpression="attribute_not_exists(PK)",
        )
    except ClientError as e:
        if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
            raise ConflictError(f"Vehicle {vehicle.vehicle_id} already exists") from e
        raise

    logger.info("Vehicle created: %s", vehicle.vehicle_id, extra={"event": "vehicle_created"})
    return vehicle


def update_vehicle(
    vehicle_id: str, request: UpdateVehicleRequest, dynamo_client: Any, pricing_table: str
) -> Vehicle:
    changes = request.model_dump(by_alias=True, exclude_none=True, exclude={"updated_by"})
    if not changes:
        raise ValidationError("No fields to update", details=[{"field": "body", "message": "No fields to update"}])

    get_vehicle(vehicle_id, dynamo_client, pricing_table)

    changes["updatedAt"] = isoformat_utc(utc_now())
    changes["updatedBy"] = request.updated_by

    names = {f"#{field}": field for field in changes}
    values = {f":{field}": value for field, value in changes.items()}
    update_expression = "SET " + ", ".join(f"#{field} = :{field}" for field in changes)

    response = dynamo_client.update_item(
        TableName=pricing_table,
        Key=_vehicle_key(vehicle_id),
        UpdateExpression=update_expression,
        ExpressionAttributeNames=names,
        ExpressionAttributeValues=to_expression_values(values),
        ReturnValues="ALL_NEW",
    )

    logger.info("Vehicle updated: %s", vehicle_id, extra={"event": "vehicle_updated", "fields": sorted(changes)})
    return Vehicle.model_validate(from_item(response["Attributes"]))


def deactivate_vehicle(vehicle_id: str, dynamo_client: Any, pricing_table: str) -> None:
    """Soft delete: quotes and fixed routes may still reference the vehicle."""
    try:
        dynamo_client.update_item(
            TableName=pricing_table,
            Key=_vehicle_key(vehicle_id),
            UpdateExpression="SET active = :active, updatedAt = :updatedAt",
            ConditionExpression="attribute_exists(PK)",
            ExpressionAttributeValues=to_expression_values(
                {":active": False, ":updatedAt": isoformat_utc(utc_now())}
            ),
        )
    except ClientError as e:
        if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
            raise NotFoundError(f"Vehicle {vehicle_id} not found") from e
        raise

    logger.info("Vehicle deactivated: %s", vehicle_id, extra={"event": "vehicle_deactivated"})


def get_vehicle_rates(vehicle_type: str, dynamo_client: Any, pricing_table: str) -> VehicleRates:
    """Tariff for ``vehicle_type``; the built-in rates apply when the table has none."""
    try:
        response = dynamo_client.get_item(TableName=pricing_table, Key=_vehicle_key(vehicle_type))
    except (ClientError, BotoCoreError) as e:
        logger.warning("Failed to load rates for %s, using fallback: %s", vehicle_type, e)
        response = {}

    item = response.get("Item")
    if item:
        vehicle = Vehicle.model_validate(from_item(item))
        if vehicle.active:
            return vehicle.rates()

    if vehicle_type not in FALLBACK_VEHICLE_RATES:
        raise ValidationError(
            f"Unknown vehicle type {vehicle_type}",
            details=[{"field": "vehicleType", "message": f"Unknown vehicle type: {vehicle_type}"}],
        )

    logger.info("Using fallback rates for %s", vehicle_type, extra={"event": "fallback_rates"})
    return FALLBACK_VEHICLE_RATES[vehicle_type]
