"""Admin vehicle tariff CRUD on /admin/pricing/vehicles[/{vehicleId}]."""

from typing import Any

from core.clients import get_dynamo_client
from core.config import get_config
from core.errors import ValidationError
from core.http import Headers, api_handler, json_response, method_not_allowed, parse_body, path_param
from core.models.vehicle import CreateVehicleRequest, UpdateVehicleRequest
from core.services.vehicles import create_vehicle, deactivate_vehicle, get_vehicle, list_vehicles, update_vehicle


def _require_vehicle_id(event: dict[str, Any]) -> str:
    vehicle_id = path_param(event, "vehicleId")
    if not vehicle_id:
        raise ValidationError(
            "vehicleId path parameter missing",
            details=[{"field": "vehicleId", "message": "vehicleId is required"}],
        )
    return vehicle_id


@api_handler(methods="GET,POST,PUT,DELETE,OPTIONS")
def handler(event: dict[str, Any], headers: Headers) -> dict[str, Any]:
    config = get_config()
    dynamo_client = get_dynamo_client()
    method = event.get("httpMethod")

    if method == "GET":
        vehicle_id = path_param(event, "vehicleId")
        if vehicle_id:
            vehicle = get_vehicle(vehicle_id, dynamo_client, config.pricing_table)
            return json_response(200, vehicle.to_api(), headers)
        vehicles = list_vehicles(dynamo_client, config.pricing_table, public=False)
        return json_response(200, {"vehicles": vehicles, "count": len(vehicles)}, headers)

    if method == "POST":
        request = CreateVehicleRequest.model_validate(parse_body(event))
        vehicle = create_vehicle(request, dynamo_client, config.pricing_table)
        return json_response(
            201,
            {"message": "Vehicle created successfully", "vehicleId": vehicle.vehicle_id, "vehicle": vehicle.to_api()},
            headers,
        )

    if method == "PUT":
        vehicle_id = _require_vehicle_id(event)
        request = UpdateVehicleRequest.model_validate(parse_body(event))
        vehicle = update_vehicle(vehicle_id, request, dynamo_client, config.pricing_table)
        return json_response(200, {"message": "Vehicle updated successfully", "vehicle": vehicle.to_api()}, headers)

    if method == "DELETE":
        vehicle_id = _require_vehicle_id(event)
        deactivate_vehicle(vehicle_id, dynamo_client, config.pricing_table)
        return json_response(200, {"message": "Vehicle deactivated successfully", "vehicleId": vehicle_id}, headers)

    raise method_not_allowed(method)
