"""
GET /import?fileName=<name>.csv

Returns a pre-signed PUT URL so the client can upload a CSV file straight
into the ``uploaded/`` prefix of the import bucket.
"""

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from product_service.aws_clients import AWSClientFactory
from product_service.config import get_settings
from product_service.logging_config import (
    bind_invocation,
    configure_logging,
    log_execution_time,
)
from product_service.responses import bad_request, internal_error, ok

configure_logging(level=get_settings().log_level, service_name="import-service")
logger = logging.getLogger(__name__)

CSV_CONTENT_TYPE = "text/csv"


def generate_upload_url(s3_client, bucket: str, key: str, expires_in: int) -> str:
    """Sign a PUT for exactly this key. Signing is local; S3 is not contacted."""
    return s3_client.generate_presigned_url(
        "put_object",
        Params={"Bucket": bucket, "Key": key, "ContentType": CSV_CONTENT_TYPE},
        ExpiresIn=expires_in,
    )


@log_execution_time(logger)
def import_products_file(event: dict, context: Any) -> dict:
    bind_invocation(event, context)
    settings = get_settings()

    file_name = (event.get("queryStringParameters") or {}).get("fileName")
    if not file_name:
        return bad_request("Missing required parameter: fileName")

    if not settings.s3_bucket_name:
        logger.error("S3_BUCKET_NAME environment variable is not set")
        return internal_error("Server configuration error")

    if not file_name.lower().endswith(".csv"):
        return bad_request("Invalid file type. Only CSV files are allowed")

    key = f"{settings.upload_prefix}{file_name}"

    try:
        url = generate_upload_url(
            AWSClientFactory.get_s3_client(),
            settings.s3_bucket_name,
            key,
            settings.url_expiration,
        )
    except (ClientError, BotoCoreError) as e:
        logger.error(
            f"Error generating signed URL: {e}",
            extra={"s3_bucket": settings.s3_bucket_name, "s3_key": key},
        )
        return internal_error("Failed to generate upload URL")

    logger.info(
        "Issued upload URL",
        extra={"s3_bucket": settings.s3_bucket_name, "s3_key": key},
    )
    return ok({"url": url})
