"""Integration tests for vehicle tariffs and fixed routes."""

import json
from unittest.mock import patch

import pytest

from core.models.quote import Distance, Duration, RouteDetails
from core.services.vehicles import get_vehicle_rates
from handlers import fixed_routes_manager, pricing_manager, vehicle_manager

ROUTE = RouteDetails(
    distance=Distance(meters=16093, miles=10.0, text="10.0 mi"),
    duration=Duration(seconds=1170, minutes=20, text="20 mins"),
)
VEHICLE_BODY = {
    "vehicleId": "standard",
    "name": "Standard Saloon",
    "description": "Up to 4 passengers",
    "capacity": 4,
    "baseFare": 600,
    "perMile": 110,
    "perMinute": 12,
    "perHour": 3800,
    "features": ["Air Conditioning"],
}
ROUTE_BODY = {
    "originPlaceId": "ChIJ_airport",
    "originName": "Bournemouth Airport",
    "destinationPlaceId": "ChIJ_poole",
    "destinationName": "Poole Quay",
    "vehicleId": "standard",
    "price": 4500,
}


@pytest.fixture(autouse=True)
def mock_route():
    with patch("core.services.maps.calculate_route", return_value=ROUTE) as mock:
        yield mock


def _body(response):
    return json.loads(response["body"])


@pytest.mark.integration
def test_vehicle_lifecycle(aws, config, api_event, lambda_context):
    response = pricing_manager.handler(
        api_event(method="POST", path="/admin/pricing/vehicles", body=VEHICLE_BODY), lambda_context
    )
    assert response["statusCode"] == 201
    assert _body(response)["vehicleId"] == "standard"

    duplicate = pricing_manager.handler(
        api_event(method="POST", path="/admin/pricing/vehicles", body=VEHICLE_BODY), lambda_context
    )
    assert duplicate["statusCode"] == 409

    rates = get_vehicle_rates("standard", aws, config.pricing_table)
    assert rates.base_fare == 600
    assert rates.per_hour == 3800

    response = pricing_manager.handler(
        api_event(
            method="PUT",
            path="/admin/pricing/vehicles/standard",
            path_parameters={"vehicleId": "standard"},
            body={"perMile": 120},
        ),
        lambda_context,
    )
    assert response["statusCode"] == 200
    assert _body(response)["vehicle"]["perMile"] == 120
    assert _body(response)["vehicle"]["baseFare"] == 600

    response = pricing_manager.handler(
        api_event(path="/admin/pricing/vehicles/standard", path_parameters={"vehicleId": "standard"}), lambda_context
    )
    assert _body(response)["perMile"] == 120

    response = pricing_manager.handler(
        api_event(method="DELETE", path="/admin/pricing/vehicles/standard", path_parameters={"vehicleId": "standard"}),
        lambda_context,
    )
    assert response["statusCode"] == 200

    assert get_vehicle_rates("standard", aws, config.pricing_table).base_fare == 500


@pytest.mark.integration
def test_public_and_admin_vehicle_lists(aws, api_event, lambda_context):
    for body in (
        VEHICLE_BODY,
        {**VEHICLE_BODY, "vehicleId": "minibus", "name": "Minibus", "capacity": 8},
        {**VEHICLE_BODY, "vehicleId": "retired", "name": "Retired", "capacity": 2, "active": False},
    ):
        pricing_manager.handler(api_event(method="POST", path="/admin/pricing/vehicles", body=body), lambda_context)

    public = vehicle_manager.handler(api_event(path="/v1/vehicles"), lambda_context)
    assert public["headers"]["Access-Control-Allow-Credentials"] == "true"
    vehicles = _body(public)["vehicles"]
    assert [v["vehicleId"] for v in vehicles] == ["standard", "minibus"]
    assert "baseFare" not in vehicles[0]

    admin = vehicle_manager.handler(api_event(path="/admin/vehicles"), lambda_context)
    body = _body(admin)
    assert body["count"] == 3
    assert body["vehicles"][0]["vehicleId"] == "retired"
    assert body["vehicles"][0]["baseFare"] == 600


@pytest.mark.integration
def test_update_missing_vehicle(aws, api_event, lambda_context):
    response = pricing_manager.handler(
        api_event(method="PUT", path="/admin/pricing/vehicles/ghost", path_parameters={"vehicleId": "ghost"},
                  body={"name": "Ghost"}),
        lambda_context,
    )
    assert response["statusCode"] == 404


@pytest.mark.integration
def test_fixed_route_lifecycle(aws, api_event, lambda_context, mock_route):
    response = fixed_routes_manager.handler(
        api_event(method="POST", path="/admin/pricing/fixed-routes", body=ROUTE_BODY), lambda_context
    )
    assert response["statusCode"] == 201
    route = _body(response)["route"]
    route_id = route["routeId"]
    assert route["estimatedDuration"] == 20
    assert mock_route.call_args.args[2] == "test-maps-key"

    duplicate = fixed_routes_manager.handler(
        api_event(method="POST", path="/admin/pricing/fixed-routes", body=ROUTE_BODY), lambda_context
    )
    assert duplicate["statusCode"] == 409

    response = fixed_routes_manager.handler(
        api_event(path="/admin/pricing/fixed-routes", query={"vehicleId": "standard"}), lambda_context
    )
    assert _body(response)["count"] == 1

    response = fixed_routes_manager.handler(
        api_event(
            method="PUT",
            path=f"/admin/pricing/fixed-routes/{route_id}",
            path_parameters={"routeId": route_id},
            body={"destinationPlaceId": "ChIJ_sandbanks", "destinationName": "Sandbanks", "price": 5200},
        ),
        lambda_context,
    )
    assert response["statusCode"] == 200, response["body"]
    assert _body(response)["route"]["price"] == 5200

    response = fixed_routes_manager.handler(
        api_event(path="/admin/pricing/fixed-routes", query={"origin": "ChIJ_airport"}), lambda_context
    )
    routes = _body(response)["routes"]
    assert [r["destinationPlaceId"] for r in routes] == ["ChIJ_sandbanks"]
    assert routes[0]["routeId"] == route_id

    response = fixed_routes_manager.handler(
        api_event(path=f"/admin/pricing/fixed-routes/{route_id}", path_parameters={"routeId": route_id}),
        lambda_context,
    )
    assert _body(response)["destinationName"] == "Sandbanks"

    response = fixed_routes_manager.handler(
        api_event(method="DELETE", path=f"/admin/pricing/fixed-routes/{route_id}", path_parameters={"routeId": route_id}),
        lambda_context,
    )
    assert response["statusCode"] == 200

    response = fixed_routes_manager.handler(api_event(path="/admin/pricing/fixed-routes"), lambda_context)
    assert _body(response)["count"] == 0


@pytest.mark.integration
def test_fixed_route_same_endpoints_rejected(aws, api_event, lambda_context):
    response = fixed_routes_manager.handler(
        api_event(
            method="POST",
            path="/admin/pricing/fixed-routes",
            body={**ROUTE_BODY, "destinationPlaceId": "ChIJ_airport"},
        ),
        lambda_context,
    )
    assert response["statusCode"] == 400


@pytest.mark.integration
def test_delete_missing_route(aws, api_event, lambda_context):
    response = fixed_routes_manager.handler(
        api_event(method="DELETE", path="/admin/pricing/fixed-routes/nope", path_parameters={"routeId": "nope"}),
        lambda_context,
    )
    assert response["statusCode"] == 404
