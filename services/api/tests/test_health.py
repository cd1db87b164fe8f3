"""Tests for health endpoint and the API error envelope."""

import pytest
from httpx import ASGITransport, AsyncClient

from green_community.main import app
from green_community.schemas import HomeStats


@pytest.fixture
async def client():
    """Create test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test health endpoint returns ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


@pytest.mark.asyncio
async def test_home_stats_endpoint(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    """Home stats route returns the service payload."""
    from green_community.routes import home as home_routes

    async def fake_get_home_stats() -> HomeStats:
        return HomeStats(communities=4, stories=12, blogs=3, challenges=7)

    monkeypatch.setattr(home_routes, "get_home_stats", fake_get_home_stats)

    response = await client.get("/v1/home/stats")
    assert response.status_code == 200
    assert response.json() == {"communities": 4, "stories": 12, "blogs": 3, "challenges": 7}


@pytest.mark.asyncio
async def test_protected_route_without_token_is_401(client: AsyncClient):
    response = await client.get("/v1/auth/me")
    assert response.status_code == 401
    body = response.json()
    assert body["error"]["code"] == "NOT_AUTHENTICATED"
    assert body["error"]["message"] == "Not authenticated"


@pytest.mark.asyncio
async def test_validation_error_uses_error_envelope(client: AsyncClient):
    response = await client.post("/v1/auth/signup", json={"email": "a@b.co", "password": "123"})
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "INVALID_INPUT"
    assert error["detail"]["errors"]
