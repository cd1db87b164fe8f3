"""Media upload service.

Files are written to `<media_dir>/<bucket>/<epoch_ms>-<random>.<ext>` and
served back under `media_base_url` by the StaticFiles mount in main.py.

Buckets:
- stories: image or video, up to story_media_max_bytes
- blog-covers: image, up to blog_cover_max_bytes
- challenge-proofs: image, up to proof_image_max_bytes
- avatars: image, up to avatar_max_bytes
"""

from dataclasses import dataclass
import logging
import mimetypes
from pathlib import Path
import secrets
import time

from fastapi import UploadFile

from green_community.schemas.media import MediaUploadOut
from green_community.services.errors import InvalidInputError, NotFoundError
from green_community.settings import Settings, get_settings

logger = logging.getLogger("uvicorn.error")

UPLOAD_CHUNK_BYTES = 1024 * 1024


@dataclass(frozen=True)
class BucketPolicy:
    media_types: tuple[str, ...]
    max_bytes_setting: str


BUCKETS: dict[str, BucketPolicy] = {
    "stories": BucketPolicy(("image", "video"), "story_media_max_bytes"),
    "blog-covers": BucketPolicy(("image",), "blog_cover_max_bytes"),
    "challenge-proofs": BucketPolicy(("image",), "proof_image_max_bytes"),
    "avatars": BucketPolicy(("image",), "avatar_max_bytes"),
}


def get_bucket_policy(bucket: str) -> BucketPolicy:
    policy = BUCKETS.get(bucket)
    if policy is None:
        raise NotFoundError(
            "Unknown media bucket",
            code="UNKNOWN_BUCKET",
            detail={"bucket": bucket, "allowed": sorted(BUCKETS)},
        )
    return policy


def validate_upload(
    bucket: str,
    content_type: str | None,
    size_bytes: int,
    settings: Settings | None = None,
) -> str:
    """Check type and size against the bucket policy.

    Returns:
        The media type ("image" or "video").

    Raises:
        NotFoundError: Unknown bucket.
        InvalidInputError: Wrong file type, empty file or file too large.
    """
    settings = settings or get_settings()
    media_type = check_content_type(bucket, content_type)

    max_bytes = max_upload_bytes(bucket, settings)
    if size_bytes <= 0:
        raise InvalidInputError("Uploaded file is empty", code="EMPTY_FILE")
    if size_bytes > max_bytes:
        raise _too_large(bucket, size_bytes, max_bytes)
    return media_type


def check_content_type(bucket: str, content_type: str | None) -> str:
    """Return the media type of `content_type` if the bucket accepts it."""
    policy = get_bucket_policy(bucket)
    media_type = (content_type or "").split("/", 1)[0].lower()
    if media_type not in policy.media_types:
        allowed = " or ".join(policy.media_types)
        raise InvalidInputError(
            f"Please upload an {allowed} file",
            code="INVALID_FILE_TYPE",
            detail={"bucket": bucket, "content_type": content_type},
        )
    return media_type


def max_upload_bytes(bucket: str, settings: Settings | None = None) -> int:
    settings = settings or get_settings()
    return getattr(settings, get_bucket_policy(bucket).max_bytes_setting)


def _too_large(bucket: str, size_bytes: int, max_bytes: int) -> InvalidInputError:
    return InvalidInputError(
        f"File size must be less than {max_bytes // (1024 * 1024)}MB",
        code="FILE_TOO_LARGE",
        detail={"bucket": bucket, "size_bytes": size_bytes, "max_bytes": max_bytes},
    )


async def read_upload(upload: UploadFile, bucket: str, settings: Settings | None = None) -> bytes:
    """Read an upload in chunks, rejecting it as soon as it passes the bucket limit.

    The content type is checked before any bytes are read.
    """
    check_content_type(bucket, upload.content_type)
    max_bytes = max_upload_bytes(bucket, settings)

    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await upload.read(UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            raise _too_large(bucket, total, max_bytes)
        chunks.append(chunk)
    return b"".join(chunks)


def _extension(filename: str | None, content_type: str | None) -> str:
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[-1].lower()
        if ext.isalnum() and len(ext) <= 8:
            return ext
    guessed = mimetypes.guess_extension(content_type or "") or ".bin"
    return guessed.lstrip(".")


def build_object_name(filename: str | None, content_type: str | None) -> str:
    """`<epoch_ms>-<random>.<ext>` object name for a stored upload."""
    millis = int(time.time() * 1000)
    return f"{millis}-{secrets.token_hex(4)}.{_extension(filename, content_type)}"


def save_upload(
    *,
    bucket: str,
    filename: str | None,
    content_type: str | None,
    data: bytes,
    settings: Settings | None = None,
) -> MediaUploadOut:
    """Validate and persist an upload, returning its public URL."""
    settings = settings or get_settings()
    media_type = validate_upload(bucket, content_type, len(data), settings)

    target_dir = Path(settings.media_dir) / bucket
    target_dir.mkdir(parents=True, exist_ok=True)
    name = build_object_name(filename, content_type)
    (target_dir / name).write_bytes(data)

    url = f"{settings.media_base_url.rstrip('/')}/{bucket}/{name}"
    logger.info(f"[media] stored bucket={bucket} name={name} bytes={len(data)}")
    return MediaUploadOut(url=url, media_type=media_type, bucket=bucket, size_bytes=len(data))
