"""Admin fixed-route CRUD on /admin/pricing/fixed-routes[/{routeId}]."""

from typing import Any

from core.clients import get_dynamo_client
from core.config import get_config
from core.errors import ValidationError
from core.http import Headers, api_handler, json_response, method_not_allowed, parse_body, path_param, query_params
from core.models.fixed_route import CreateFixedRouteRequest, FixedRouteFilters, UpdateFixedRouteRequest
from core.secrets import get_google_maps_api_key
from core.services.fixed_routes import create_route, delete_route, get_route, list_routes, update_route


def _require_route_id(event: dict[str, Any]) -> str:
    route_id = path_param(event, "routeId")
    if not route_id:
        raise ValidationError(
            "routeId path parameter missing",
            details=[{"field": "routeId", "message": "routeId is required"}],
        )
    return route_id


@api_handler(methods="GET,POST,PUT,DELETE,OPTIONS")
def handler(event: dict[str, Any], headers: Headers) -> dict[str, Any]:
    config = get_config()
    dynamo_client = get_dynamo_client()
    table = config.fixed_routes_table
    method = event.get("httpMethod")

    if method == "GET":
        route_id = path_param(event, "routeId")
        if route_id:
            return json_response(200, get_route(route_id, dynamo_client, table).to_api(), headers)
        filters = FixedRouteFilters.model_validate(query_params(event))
        return json_response(200, list_routes(filters, dynamo_client, table), headers)

    if method == "POST":
        request = CreateFixedRouteRequest.model_validate(parse_body(event))
        route = create_route(request, get_google_maps_api_key(), dynamo_client, table)
        return json_response(
            201,
            {"message": "Route created successfully", "routeId": route.route_id, "route": route.to_api()},
            headers,
        )

    if method == "PUT":
        route_id = _require_route_id(event)
        request = UpdateFixedRouteRequest.model_validate(parse_body(event))
        route = update_route(route_id, request, None, dynamo_client, table)
        return json_response(200, {"message": "Route updated successfully", "route": route.to_api()}, headers)

    if method == "DELETE":
        route_id = _require_route_id(event)
        delete_route(route_id, dynamo_client, table)
        return json_response(200, {"message": "Route deleted successfully", "routeId": route_id}, headers)

    raise method_not_allowed(method)
