"""Public quote endpoints: POST /v1/quotes and GET /v1/quotes/{quoteId}."""

from typing import Any

from core.clients import get_dynamo_client
from core.config import get_config
from core.http import (
    Headers,
    api_handler,
    json_response,
    method_not_allowed,
    parse_body,
    path_param,
    route_not_found,
)
from core.models.quote import QuoteRequest
from core.services.quotes import calculate_quote, get_public_quote, store_quote


@api_handler(methods="GET,POST,OPTIONS", public=True)
def handler(event: dict[str, Any], headers: Headers) -> dict[str, Any]:
    config = get_config()
    dynamo_client = get_dynamo_client()
    method = event.get("httpMethod")

    if method == "POST":
        request = QuoteRequest.model_validate(parse_body(event))
        quote = calculate_quote(request, dynamo_client, config)
        store_quote(quote, dynamo_client, config.table_name)
        return json_response(201, quote.to_api(), headers)

    if method == "GET":
        quote_id = path_param(event, "quoteId")
        if not quote_id:
            raise route_not_found(event)
        quote = get_public_quote(quote_id, dynamo_client, config.table_name)
        return json_response(200, quote.to_api(), headers)

    raise method_not_allowed(method)
