"""API Gateway proxy request/response helpers shared by every HTTP handler."""

import functools
import json
import logging
from collections.abc import Callable
from typing import Any

import pydantic

from core.config import get_config
from core.errors import DurdleError, ErrorCode, ValidationError
from core.logging import configure_logging, set_correlation_id

logger = logging.getLogger(__name__)

Headers = dict[str, str]
Response = dict[str, Any]
RouteFunc = Callable[[dict[str, Any], Headers], Response]


def cors_headers(event: dict[str, Any], methods: str, public: bool = False) -> Headers:
    """Public endpoints answer any origin; admin endpoints echo an allowed origin with credentials."""
    if public:
        return {
            "Content-Type": "application/json",
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Headers": "Content-Type,Authorization",
            "Access-Control-Allow-Methods": methods,
        }

    request_headers = event.get("headers") or {}
    origin = request_headers.get("origin") or request_headers.get("Origin") or ""
    allowed = get_config().allowed_origins
    allowed_origin = origin if origin in allowed else (allowed[0] if allowed else "")

    return {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": allowed_origin,
        "Access-Control-Allow-Headers": "Content-Type,Authorization",
        "Access-Control-Allow-Methods": methods,
        "Access-Control-Allow-Credentials": "true",
    }


def json_response(status_code: int, body: Any, headers: Headers | None = None) -> Response:
    return {
        "statusCode": status_code,
        "headers": dict(headers or {}),
        "body": json.dumps(body, default=str),
    }


def error_response(error: DurdleError, headers: Headers | None = None) -> Response:
    payload: dict[str, Any] = {"code": error.code.value, "message": error.user_message}
    if error.details:
        payload["details"] = error.details
    return json_response(error.status_code, {"error": payload}, headers)


def parse_body(event: dict[str, Any]) -> dict[str, Any]:
    raw = event.get("body")
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Malformed JSON body: {e}", code=ErrorCode.INVALID_REQUEST) from e
    if not isinstance(body, dict):
        raise ValidationError("JSON body must be an object", code=ErrorCode.INVALID_REQUEST)
    return body


def validation_error_from_pydantic(exc: pydantic.ValidationError) -> ValidationError:
    details = [
        {
            "field": ".".join(str(p) for p in err["loc"]) or "unknown",
            "message": err["msg"],
            "code": err["type"],
        }
        for err in exc.errors()
    ]
    return ValidationError(f"Request validation failed: {len(details)} error(s)", details=details)


def path_param(event: dict[str, Any], name: str) -> str | None:
    return (event.get("pathParameters") or {}).get(name)


def query_params(event: dict[str, Any]) -> dict[str, str]:
    return dict(event.get("queryStringParameters") or {})


def method_not_allowed(method: str | None) -> DurdleError:
    return DurdleError(f"Method {method} not allowed", code=ErrorCode.METHOD_NOT_ALLOWED)


def route_not_found(event: dict[str, Any]) -> DurdleError:
    return DurdleError(
        f"No route for {event.get('httpMethod')} {event.get('resource') or event.get('path')}",
        code=ErrorCode.NOT_FOUND,
    )


def api_handler(methods: str = "GET,OPTIONS", public: bool = False) -> Callable[[RouteFunc], Callable[..., Response]]:
    """Wrap a route function as a Lambda proxy handler.

    The wrapped function receives ``(event, headers)`` and returns a response
    dict. OPTIONS preflight is answered here, ``DurdleError`` becomes its
    status code and anything else a logged 500.
    """

    def decorator(func: RouteFunc) -> Callable[..., Response]:
        @functools.wraps(func)
        def wrapper(event: dict[str, Any], context: Any) -> Response:
            configure_logging()
            set_correlation_id(getattr(context, "aws_request_id", None))
            headers = cors_headers(event, methods, public)

            if event.get("httpMethod") == "OPTIONS":
                return {"statusCode": 200, "headers": headers, "body": ""}

            logger.info(
                "%s %s",
                event.get("httpMethod"),
                event.get("resource") or event.get("path"),
                extra={"event": "request_received", "path_parameters": event.get("pathParameters")},
            )

            try:
                return func(event, headers)
            except pydantic.ValidationError as e:
                error = validation_error_from_pydantic(e)
                logger.warning("Validation failed: %s", error.details)
                return error_response(error, headers)
            except DurdleError as e:
                log = logger.error if e.status_code >= 500 else logger.warning
                log("%s: %s", e.code.value, e.message, extra={"event": "handler_error"})
                return error_response(e, headers)
            except Exception:
                logger.exception("Unhandled error in %s", func.__name__)
                return error_response(DurdleError("Unhandled error"), headers)

        return wrapper

    return decorator
