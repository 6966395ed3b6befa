import logging

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from app.api.deps import get_settings
from app.core.config import Settings
from app.schemas.file import BucketResponse, UploadResponse
from app.services.storage import check_attachment, ensure_bucket_exists, upload_stream

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["files"])


@router.post("/ensure-bucket", response_model=BucketResponse)
def ensure_bucket(settings: Settings = Depends(get_settings)):
    try:
        ensure_bucket_exists(settings.s3_bucket, settings)
    except (BotoCoreError, ClientError) as e:
        logger.exception("Bucket check failed for %s", settings.s3_bucket)
        raise HTTPException(status_code=500, detail="Storage is unavailable") from e
    return BucketResponse(bucket=settings.s3_bucket)


@router.post("/upload", response_model=UploadResponse)
async def upload_file(file: UploadFile = File(...), settings: Settings = Depends(get_settings)):
    """
    Upload an abstract attachment (PDF/Word). The returned object key goes into `file_url`.
    """
    file.file.seek(0, 2)
    size = file.file.tell()
    file.file.seek(0)
    check_attachment(file.filename, file.content_type, size, settings.upload_max_bytes)

    try:
        await run_in_threadpool(ensure_bucket_exists, settings.s3_bucket, settings)
        object_key = await run_in_threadpool(
            upload_stream,
            file.file,
            file.filename,
            file.content_type or "application/octet-stream",
            settings,
        )
    except (BotoCoreError, ClientError) as e:
        logger.exception("Upload of %s failed", file.filename)
        raise HTTPException(status_code=500, detail="File upload failed") from e

    return UploadResponse(
        bucket=settings.s3_bucket,
        object_key=object_key,
        original_name=file.filename,
        content_type=file.content_type,
        size=size,
    )
