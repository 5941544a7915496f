from enum import Enum

from pydantic import Field

from core.models.base import ApiModel


class CommentStatus(str, Enum):
    ACTIVE = "active"
    RESOLVED = "resolved"


class Comment(ApiModel):
    comment_id: str
    document_path: str
    username: str
    comment: str
    status: CommentStatus = CommentStatus.ACTIVE
    created: str
    updated: str


class CreateCommentRequest(ApiModel):
    username: str = Field(..., min_length=1)
    comment: str = Field(..., min_length=1)


class UpdateCommentRequest(ApiModel):
    status: CommentStatus | None = None
    comment: str | None = Field(default=None, min_length=1)
