"""Vehicle lists: GET /v1/vehicles (public) and GET /admin/vehicles."""

from typing import Any

from core.clients import get_dynamo_client
from core.config import get_config
from core.http import Headers, api_handler, json_response, method_not_allowed
from core.services.vehicles import list_vehicles


@api_handler(methods="GET,OPTIONS")
def handler(event: dict[str, Any], headers: Headers) -> dict[str, Any]:
    if event.get("httpMethod") != "GET":
        raise method_not_allowed(event.get("httpMethod"))

    config = get_config()
    is_public = "/v1/vehicles" in (event.get("path") or event.get("resource") or "")
    vehicles = list_vehicles(get_dynamo_client(), config.pricing_table, public=is_public)
    return json_response(200, {"vehicles": vehicles, "count": len(vehicles)}, headers)
