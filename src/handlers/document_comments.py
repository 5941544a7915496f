"""Comments on admin documents: /admin/documents/{documentPath}/comments[/{commentId}]."""

from typing import Any
from urllib.parse import unquote

from core.clients import get_dynamo_client
from core.config import get_config
from core.errors import ValidationError
from core.http import Headers, api_handler, json_response, method_not_allowed, parse_body, path_param
from core.models.comment import CreateCommentRequest, UpdateCommentRequest
from core.services.comments import create_comment, delete_comment, list_comments, update_comment


def _required(event: dict[str, Any], name: str) -> str:
    value = path_param(event, name)
    if not value:
        raise ValidationError(f"{name} path parameter missing", details=[{"field": name, "message": f"{name} is required"}])
    return unquote(value)


@api_handler(methods="GET,POST,PUT,DELETE,OPTIONS")
def handler(event: dict[str, Any], headers: Headers) -> dict[str, Any]:
    config = get_config()
    dynamo_client = get_dynamo_client()
    table = config.comments_table
    method = event.get("httpMethod")

    if method == "GET":
        comments = list_comments(_required(event, "documentPath"), dynamo_client, table)
        return json_response(200, {"comments": [c.to_api() for c in comments], "count": len(comments)}, headers)

    if method == "POST":
        document_path = _required(event, "documentPath")
        request = CreateCommentRequest.model_validate(parse_body(event))
        comment = create_comment(document_path, request, dynamo_client, table)
        return json_response(201, {"message": "Comment created successfully", "comment": comment.to_api()}, headers)

    if method == "PUT":
        document_path = _required(event, "documentPath")
        comment_id = _required(event, "commentId")
        request = UpdateCommentRequest.model_validate(parse_body(event))
        comment = update_comment(document_path, comment_id, request, dynamo_client, table)
        return json_response(200, {"message": "Comment updated successfully", "comment": comment.to_api()}, headers)

    if method == "DELETE":
        document_path = _required(event, "documentPath")
        comment_id = _required(event, "commentId")
        delete_comment(document_path, comment_id, dynamo_client, table)
        return json_response(200, {"message": "Comment deleted successfully", "commentId": comment_id}, headers)

    raise method_not_allowed(method)
