"""Media upload endpoints.

POST /v1/media/{bucket} - multipart upload; returns the public URL.
"""

import logging

from fastapi import APIRouter, File, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from green_community.routes.deps import AuthUser
from green_community.schemas.media import MediaUploadOut
from green_community.services.media import read_upload, save_upload

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


@router.post("/{bucket}", response_model=MediaUploadOut, status_code=status.HTTP_201_CREATED)
async def upload_media(bucket: str, user: AuthUser, file: UploadFile = File(...)) -> MediaUploadOut:
    """Upload an image (or video, for stories) into a bucket."""
    data = await read_upload(file, bucket)
    result = await run_in_threadpool(
        save_upload,
        bucket=bucket,
        filename=file.filename,
        content_type=file.content_type,
        data=data,
    )
    logger.info(f"[media] upload by user_id={user.user_id} url={result.url}")
    return result
