"""Presigned S3 uploads under the tenant prefix."""

import logging
import uuid
from typing import Any

from core.errors import ValidationError
from core.models.upload import ALLOWED_MIME_TYPES, PresignedUpload, UploadRequest
from core.tenant import build_tenant_s3_key, get_tenant_id_s3

logger = logging.getLogger(__name__)

UPLOAD_EXPIRY_SECONDS = 300


def _extension(file_name: str) -> str:
    _, dot, ext = file_name.rpartition(".")
    return ext.lower() if dot else ""


def create_presigned_upload(
    request: UploadRequest, s3_client: Any, bucket: str, region: str
) -> PresignedUpload:
    allowed_extensions = ALLOWED_MIME_TYPES.get(request.file_type.lower())
    if allowed_extensions is None:
        raise ValidationError(
            f"Unsupported file type {request.file_type}",
            details=[{"field": "fileType", "message": "Invalid file type. Allowed: JPEG, PNG, WebP, GIF"}],
        )

    ext = _extension(request.file_name)
    if ext not in allowed_extensions:
        raise ValidationError(
            f"Extension .{ext} does not match {request.file_type}",
            details=[{"field": "fileName", "message": "File extension does not match MIME type"}],
        )

    key = build_tenant_s3_key(get_tenant_id_s3(), request.folder, f"{uuid.uuid4()}.{ext}")
    upload_url = s3_client.generate_presigned_url(
        "put_object",
        Params={"Bucket": bucket, "Key": key, "ContentType": request.file_type},
        ExpiresIn=UPLOAD_EXPIRY_SECONDS,
    )

    logger.info("Presigned upload issued for %s", key, extra={"event": "presigned_upload", "folder": request.folder})
    return PresignedUpload(
        upload_url=upload_url,
        key=key,
        public_url=f"https://{bucket}.s3.{region}.amazonaws.com/{key}",
        expires_in=UPLOAD_EXPIRY_SECONDS,
    )
