"""Review comments on admin documents, keyed by ``documentPath`` + ``commentId``."""

import logging
import uuid
from typing import Any

from botocore.exceptions import ClientError

from core.db.dynamo import from_item, to_attr, to_expression_values, to_item
from core.errors import NotFoundError, ValidationError
from core.models.base import isoformat_utc, utc_now
from core.models.comment import Comment, CommentStatus, CreateCommentRequest, UpdateCommentRequest

logger = logging.getLogger(__name__)


def _comment_key(document_path: str, comment_id: str) -> dict[str, Any]:
    return {"documentPath": to_attr(document_path), "commentId": to_attr(comment_id)}


def list_comments(document_path: str, dynamo_client: Any, comments_table: str) -> list[Comment]:
    comments: list[Comment] = []
    last_key = None

    while True:
        kwargs: dict[str, Any] = {
            "TableName": comments_table,
            "KeyConditionExpression": "documentPath = :documentPath",
            "ExpressionAttributeValues": to_expression_values({":documentPath": document_path}),
        }
        if last_key:
            kwargs["ExclusiveStartKey"] = last_key

        response = dynamo_client.query(**kwargs)
        comments.extend(Comment.model_validate(from_item(item)) for item in response.get("Items", []))

        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            break

    return sorted(comments, key=lambda c: c.created)


def create_comment(
    document_path: str, request: CreateCommentRequest, dynamo_client: Any, comments_table: str
) -> Comment:
    now = isoformat_utc(utc_now())
    comment = Comment(
        comment_id=str(uuid.uuid4()),
        document_path=document_path,
        username=request.username,
        comment=request.comment,
        status=CommentStatus.ACTIVE,
        created=now,
        updated=now,
    )
    dynamo_client.put_item(TableName=comments_table, Item=to_item(comment.model_dump(by_alias=True, mode="json")))

    logger.info("Comment created on %s", document_path, extra={"event": "comment_created"})
    return comment


def update_comment(
    document_path: str,
    comment_id: str,
    request: UpdateCommentRequest,
    dynamo_client: Any,
    comments_table: str,
) -> Comment:
    changes = request.model_dump(exclude_none=True, mode="json")
    if not changes:
        raise ValidationError("No fields to update", details=[{"field": "body", "message": "No fields to update"}])

    changes["updated"] = isoformat_utc(utc_now())
    names = {f"#{field}": field for field in changes}
    values = {f":{field}": value for field, value in changes.items()}

    try:
        response = dynamo_client.update_item(
            TableName=comments_table,
            Key=_comment_key(document_path, comment_id),
            UpdateExpression="SET " + ", ".join(f"#{field} = :{field}" for field in changes),
            ConditionExpression="attribute_exists(commentId)",
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=to_expression_values(values),
            ReturnValues="ALL_NEW",
        )
    except ClientError as e:
        if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
            raise NotFoundError(f"Comment {comment_id} not found on {document_path}") from e
        raise

    return Comment.model_validate(from_item(response["Attributes"]))


def delete_comment(document_path: str, comment_id: str, dynamo_client: Any, comments_table: str) -> None:
    try:
        dynamo_client.delete_item(
            TableName=comments_table,
            Key=_comment_key(document_path, comment_id),
            ConditionExpression="attribute_exists(commentId)",
        )
    except ClientError as e:
        if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
            raise NotFoundError(f"Comment {comment_id} not found on {document_path}") from e
        raise

    logger.info("Comment deleted on %s", document_path, extra={"event": "comment_deleted"})
