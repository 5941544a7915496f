"""POST /admin/uploads/presigned: presigned PUT URL for a vehicle image."""

from typing import Any

from core.clients import get_s3_client
from core.config import get_config
from core.http import Headers, api_handler, json_response, method_not_allowed, parse_body
from core.models.upload import UploadRequest
from core.services.uploads import create_presigned_upload


@api_handler(methods="POST,OPTIONS")
def handler(event: dict[str, Any], headers: Headers) -> dict[str, Any]:
    if event.get("httpMethod") != "POST":
        raise method_not_allowed(event.get("httpMethod"))

    config = get_config()
    request = UploadRequest.model_validate(parse_body(event))
    upload = create_presigned_upload(request, get_s3_client(), config.images_bucket, config.aws_region)
    return json_response(200, upload.to_api(), headers)
