from __future__ import annotations

import logging
import os
import uuid
from typing import BinaryIO

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from app.core.config import Settings, settings
from app.core.errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".pdf", ".doc", ".docx"}
ALLOWED_CONTENT_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/octet-stream",
}


def _get_s3_client(config: Settings | None = None):
    config = config or settings
    return boto3.client(
        "s3",
        endpoint_url=config.s3_endpoint,
        aws_access_key_id=config.s3_access_key,
        aws_secret_access_key=config.s3_secret_key,
        region_name=config.s3_region,
        config=Config(signature_version="s3v4"),
    )


def ensure_bucket_exists(bucket: str, config: Settings | None = None) -> None:
    s3 = _get_s3_client(config)
    try:
        s3.head_bucket(Bucket=bucket)
    except ClientError:
        logger.info("Creating bucket %s", bucket)
        s3.create_bucket(Bucket=bucket)


def check_attachment(original_name: str | None, content_type: str | None, size: int, max_bytes: int) -> None:
    """Only PDF and Word documents up to `max_bytes` are accepted as abstract attachments."""
    if not original_name:
        raise ValidationError("No file uploaded")
    ext = os.path.splitext(original_name)[1].lower()
    if ext not in ALLOWED_EXTENSIONS or (content_type and content_type not in ALLOWED_CONTENT_TYPES):
        raise ValidationError("Only PDF and Word documents are allowed", {"filename": original_name})
    if size > max_bytes:
        raise ValidationError("File exceeds the upload size limit", {"size": size, "max_bytes": max_bytes})


def upload_stream(fileobj: BinaryIO, original_name: str, content_type: str, config: Settings | None = None) -> str:
    """
    Upload an attachment to the configured bucket and return its object key.
    """
    config = config or settings
    s3 = _get_s3_client(config)
    bucket = config.s3_bucket

    safe_name = original_name.replace("/", "_").replace("\\", "_")
    object_key = f"abstracts/{uuid.uuid4()}-{safe_name}"

    s3.upload_fileobj(
        Fileobj=fileobj,
        Bucket=bucket,
        Key=object_key,
        ExtraArgs={"ContentType": content_type},
    )
    logger.info("Stored attachment %s in bucket %s", object_key, bucket)

    return object_key
