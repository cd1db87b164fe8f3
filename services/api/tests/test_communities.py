"""Tests for community categories, listing filters and membership routes."""

import pytest
from httpx import ASGITransport, AsyncClient

from green_community.main import app
from green_community.models import CommunityCategory
from green_community.routes.deps import get_current_user
from green_community.schemas.communities import CommunityList, MembershipResult
from green_community.services.auth import CurrentUser
from green_community.services.communities import list_categories, parse_category_filter
from green_community.services.errors import ConflictError


def test_category_labels_are_title_cased():
    assert CommunityCategory.PLASTIC_MANAGEMENT.label == "Plastic Management"
    assert CommunityCategory.BIODIVERSITY.label == "Biodiversity"
    options = list_categories()
    assert len(options) == 25
    assert options[0].value == "plastic_management"


def test_parse_category_filter():
    assert parse_category_filter(None) is None
    assert parse_category_filter("all") is None
    assert parse_category_filter("  ") is None
    assert parse_category_filter("zero_waste") is CommunityCategory.ZERO_WASTE
    with pytest.raises(ValueError):
        parse_category_filter("space_mining")


@pytest.fixture
async def client():
    app.dependency_overrides[get_current_user] = lambda: CurrentUser(
        user_id="u1", email="leaf@example.com", eco_name="Leaf"
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_categories_endpoint(client: AsyncClient):
    response = await client.get("/v1/communities/categories")
    assert response.status_code == 200
    assert {"value": "climate_action", "label": "Climate Action"} in response.json()


@pytest.mark.asyncio
async def test_unknown_category_is_400(client: AsyncClient):
    response = await client.get("/v1/communities", params={"category": "space_mining"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_CATEGORY"


@pytest.mark.asyncio
async def test_all_category_is_ignored(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from green_community.routes import communities as community_routes

    seen: dict = {}

    async def fake_list_communities(*, category=None, viewer_id=None) -> CommunityList:
        seen["category"] = category
        return CommunityList(communities=[], total_communities=0, total_members=0)

    monkeypatch.setattr(community_routes.community_service, "list_communities", fake_list_communities)

    response = await client.get("/v1/communities", params={"category": "all"})
    assert response.status_code == 200
    assert seen["category"] is None


@pytest.mark.asyncio
async def test_blank_community_name_is_rejected(client: AsyncClient):
    response = await client.post(
        "/v1/communities",
        json={"name": "   ", "description": "Trees!", "category": "tree_plantation"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_join_twice_is_409(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from green_community.routes import communities as community_routes

    members: set[str] = set()

    async def fake_join(*, community_id: str, user_id: str) -> MembershipResult:
        if user_id in members:
            raise ConflictError("Already a member of this community", code="ALREADY_MEMBER")
        members.add(user_id)
        return MembershipResult(community_id=community_id, is_member=True, member_count=len(members))

    monkeypatch.setattr(community_routes.community_service, "join_community", fake_join)

    first = await client.post("/v1/communities/c1/join")
    assert first.status_code == 200
    assert first.json() == {"community_id": "c1", "is_member": True, "member_count": 1}

    second = await client.post("/v1/communities/c1/join")
    assert second.status_code == 409
    assert second.json()["error"]["code"] == "ALREADY_MEMBER"
