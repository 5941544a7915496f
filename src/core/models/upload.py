import re

from pydantic import Field, field_validator

from core.models.base import ApiModel

ALLOWED_MIME_TYPES: dict[str, tuple[str, ...]] = {
    "image/jpeg": ("jpg", "jpeg"),
    "image/jpg": ("jpg", "jpeg"),
    "image/png": ("png",),
    "image/webp": ("webp",),
    "image/gif": ("gif",),
}

DEFAULT_FOLDER = "vehicles"
_FOLDER_UNSAFE = re.compile(r"[^a-z0-9_-]+")


def sanitise_folder(folder: str | None) -> str:
    """Lowercase, collapse anything outside ``[a-z0-9_-]`` to ``-``, trim to 63 chars."""
    cleaned = _FOLDER_UNSAFE.sub("-", (folder or "").lower()).strip("-_")[:63]
    return cleaned or DEFAULT_FOLDER


class UploadRequest(ApiModel):
    file_name: str = Field(..., min_length=1)
    file_type: str = Field(..., min_length=1)
    folder: str = DEFAULT_FOLDER

    @field_validator("folder", mode="before")
    @classmethod
    def folder_is_safe(cls, value: str | None) -> str:
        return sanitise_folder(value)


class PresignedUpload(ApiModel):
    upload_url: str
    key: str
    public_url: str
    expires_in: int
