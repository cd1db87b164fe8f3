"""Tests for upload validation, object naming and the media route."""

import re

import pytest
from httpx import ASGITransport, AsyncClient

from green_community.main import app
from green_community.routes.deps import get_current_user
from green_community.services.auth import CurrentUser
from green_community.services.errors import InvalidInputError, NotFoundError
from green_community.services import media as media_service
from green_community.services.media import build_object_name, read_upload, save_upload, validate_upload
from green_community.settings import Settings

MIB = 1024 * 1024


@pytest.fixture
def settings(tmp_path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    monkeypatch.setenv("MEDIA_DIR", str(tmp_path))
    return Settings()


def test_story_bucket_accepts_video(settings: Settings):
    assert validate_upload("stories", "video/mp4", 3 * MIB, settings) == "video"
    assert validate_upload("stories", "image/png", 10 * MIB, settings) == "image"


def test_image_only_buckets_reject_video(settings: Settings):
    for bucket in ("blog-covers", "challenge-proofs", "avatars"):
        with pytest.raises(InvalidInputError) as exc:
            validate_upload(bucket, "video/mp4", 1024, settings)
        assert exc.value.code == "INVALID_FILE_TYPE"


def test_size_limits_per_bucket(settings: Settings):
    with pytest.raises(InvalidInputError) as exc:
        validate_upload("stories", "image/jpeg", 10 * MIB + 1, settings)
    assert exc.value.code == "FILE_TOO_LARGE"

    with pytest.raises(InvalidInputError):
        validate_upload("blog-covers", "image/jpeg", 5 * MIB + 1, settings)

    assert validate_upload("challenge-proofs", "image/jpeg", 10 * MIB, settings) == "image"


def test_unknown_bucket(settings: Settings):
    with pytest.raises(NotFoundError):
        validate_upload("secrets", "image/png", 10, settings)


def test_object_name_shape():
    name = build_object_name("My Photo.JPG", "image/jpeg")
    assert re.fullmatch(r"\d{13}-[0-9a-f]{8}\.jpg", name)
    assert build_object_name(None, "image/png").endswith(".png")


def test_save_upload_writes_file(settings: Settings, tmp_path):
    result = save_upload(
        bucket="avatars",
        filename="me.png",
        content_type="image/png",
        data=b"\x89PNG fake",
        settings=settings,
    )
    assert result.url.startswith("/media/avatars/")
    assert result.media_type == "image"
    stored = list((tmp_path / "avatars").iterdir())
    assert len(stored) == 1
    assert stored[0].read_bytes() == b"\x89PNG fake"


@pytest.fixture
async def client():
    app.dependency_overrides[get_current_user] = lambda: CurrentUser(
        user_id="u1", email="leaf@example.com", eco_name="Leaf"
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_upload_rejects_wrong_type(client: AsyncClient):
    response = await client.post(
        "/v1/media/avatars",
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_FILE_TYPE"


@pytest.mark.asyncio
async def test_upload_unknown_bucket_is_404(client: AsyncClient):
    response = await client.post(
        "/v1/media/secrets",
        files={"file": ("a.png", b"x", "image/png")},
    )
    assert response.status_code == 404


class ChunkedUpload:
    """Stand-in UploadFile that serves fixed-size chunks and counts reads."""

    def __init__(self, content_type: str, total_bytes: int, chunk_bytes: int):
        self.content_type = content_type
        self.remaining = total_bytes
        self.chunk_bytes = chunk_bytes
        self.reads = 0

    async def read(self, size: int = -1) -> bytes:
        self.reads += 1
        n = min(self.remaining, self.chunk_bytes, size if size > 0 else self.remaining)
        self.remaining -= n
        return b"x" * n


@pytest.mark.asyncio
async def test_read_upload_stops_once_over_limit():
    settings = Settings(avatar_max_bytes=3 * MIB)
    upload = ChunkedUpload("image/png", total_bytes=1024 * MIB, chunk_bytes=MIB)

    with pytest.raises(InvalidInputError) as exc:
        await read_upload(upload, "avatars", settings)

    assert exc.value.code == "FILE_TOO_LARGE"
    assert upload.reads == 4
    assert upload.remaining == 1020 * MIB


@pytest.mark.asyncio
async def test_read_upload_checks_type_before_reading():
    upload = ChunkedUpload("video/mp4", total_bytes=MIB, chunk_bytes=MIB)

    with pytest.raises(InvalidInputError) as exc:
        await read_upload(upload, "avatars", Settings())

    assert exc.value.code == "INVALID_FILE_TYPE"
    assert upload.reads == 0


@pytest.mark.asyncio
async def test_read_upload_joins_chunks():
    upload = ChunkedUpload("video/mp4", total_bytes=2 * MIB + 5, chunk_bytes=MIB)

    data = await read_upload(upload, "stories", Settings())

    assert len(data) == 2 * MIB + 5


@pytest.mark.asyncio
async def test_upload_over_limit_is_400(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(media_service, "get_settings", lambda: Settings(avatar_max_bytes=8))

    response = await client.post(
        "/v1/media/avatars",
        files={"file": ("big.png", b"0123456789", "image/png")},
    )
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "FILE_TOO_LARGE"
    assert error["detail"]["max_bytes"] == 8


@pytest.mark.asyncio
async def test_upload_stores_file(
    client: AsyncClient, settings: Settings, monkeypatch: pytest.MonkeyPatch, tmp_path
):
    monkeypatch.setattr(media_service, "get_settings", lambda: settings)

    response = await client.post(
        "/v1/media/challenge-proofs",
        files={"file": ("proof.jpg", b"\xff\xd8 fake jpeg", "image/jpeg")},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["bucket"] == "challenge-proofs"
    assert body["size_bytes"] == len(b"\xff\xd8 fake jpeg")
    assert len(list((tmp_path / "challenge-proofs").iterdir())) == 1
