"""Tests for story sharing, likes and comments."""

from contextlib import asynccontextmanager

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import IntegrityError

from green_community.main import app
from green_community.models import Story
from green_community.routes.deps import get_current_user
from green_community.schemas import LikeResult
from green_community.services import stories as story_service
from green_community.services.auth import CurrentUser
from green_community.services.errors import ConflictError
from green_community.services.stories import share_text


def test_share_text_truncates_long_content():
    content = "a" * 150
    assert share_text(content) == "a" * 100 + "..."


def test_share_text_keeps_short_content():
    assert share_text("Planted 3 trees today") == "Planted 3 trees today"
    assert share_text("b" * 100) == "b" * 100


@pytest.fixture
async def client():
    app.dependency_overrides[get_current_user] = lambda: CurrentUser(
        user_id="u1", email="leaf@example.com", eco_name="Leaf"
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_like_toggle_route(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from green_community.routes import stories as story_routes

    liked: set[str] = set()

    async def fake_toggle_like(*, story_id: str, user_id: str) -> LikeResult:
        if user_id in liked:
            liked.remove(user_id)
        else:
            liked.add(user_id)
        return LikeResult(liked=user_id in liked, likes_count=len(liked))

    monkeypatch.setattr(story_routes.story_service, "toggle_like", fake_toggle_like)

    first = await client.post("/v1/stories/s1/like")
    assert first.json() == {"liked": True, "likes_count": 1}
    second = await client.post("/v1/stories/s1/like")
    assert second.json() == {"liked": False, "likes_count": 0}


@pytest.mark.asyncio
async def test_story_media_type_must_be_image_or_video(client: AsyncClient):
    response = await client.post(
        "/v1/stories",
        json={"content": "Look!", "media_url": "/media/stories/x.gif", "media_type": "gif"},
    )
    assert response.status_code == 400


class LikeRaceSession:
    """No like row visible yet, but the insert hits the unique pair constraint."""

    def __init__(self):
        self.statements: list = []

    async def execute(self, statement):
        self.statements.append(statement)
        return self

    def scalar_one_or_none(self):
        return None

    def add(self, obj) -> None:
        pass

    async def flush(self) -> None:
        raise IntegrityError("INSERT INTO story_likes", {}, Exception("uq_story_likes_pair"))


@pytest.mark.asyncio
async def test_concurrent_like_is_409(monkeypatch: pytest.MonkeyPatch):
    session = LikeRaceSession()

    @asynccontextmanager
    async def fake_get_session():
        yield session

    async def get_story(session, story_id: str) -> Story:
        return Story(id=story_id, user_id="u2", content="Planted 20 saplings today", likes_count=0)

    monkeypatch.setattr(story_service, "get_session", fake_get_session)
    monkeypatch.setattr(story_service, "_get_story", get_story)

    with pytest.raises(ConflictError) as exc:
        await story_service.toggle_like(story_id="s1", user_id="u1")

    assert exc.value.code == "ALREADY_LIKED"
    assert len(session.statements) == 1
