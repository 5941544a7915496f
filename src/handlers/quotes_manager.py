"""Admin quote endpoints: list, detail and CSV export."""

from typing import Any

from core.clients import get_dynamo_client
from core.config import get_config
from core.errors import NotFoundError
from core.http import Headers, api_handler, json_response, method_not_allowed, path_param, query_params, route_not_found
from core.models.quote import QuoteExportFilters, QuoteListFilters
from core.services.csv_export import generate_csv, generate_csv_filename
from core.services.quote_queries import (
    get_all_quotes_for_export,
    get_quote_by_id,
    query_quotes,
    with_default_date_range,
)


@api_handler(methods="GET,OPTIONS")
def handler(event: dict[str, Any], headers: Headers) -> dict[str, Any]:
    if event.get("httpMethod") != "GET":
        raise method_not_allowed(event.get("httpMethod"))

    config = get_config()
    dynamo_client = get_dynamo_client()
    resource = event.get("resource") or event.get("path") or ""

    if resource.endswith("/admin/quotes/export"):
        filters = with_default_date_range(QuoteExportFilters.model_validate(query_params(event)))
        quotes = get_all_quotes_for_export(filters, dynamo_client, config.table_name)
        filename = generate_csv_filename()
        return {
            "statusCode": 200,
            "headers": {
                **headers,
                "Content-Type": "text/csv",
                "Content-Disposition": f'attachment; filename="{filename}"',
            },
            "body": generate_csv(quotes),
        }

    quote_id = path_param(event, "quoteId")
    if quote_id:
        quote = get_quote_by_id(quote_id, dynamo_client, config.table_name)
        if quote is None:
            raise NotFoundError(f"Quote {quote_id} not found")
        return json_response(200, quote, headers)

    if resource.endswith("/admin/quotes"):
        filters = with_default_date_range(QuoteListFilters.model_validate(query_params(event)))
        return json_response(200, query_quotes(filters, dynamo_client, config.table_name), headers)

    raise route_not_found(event)
