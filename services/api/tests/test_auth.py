"""Tests for password hashing, session resolution helpers and auth routes."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from green_community.main import app
from green_community.models import Profile
from green_community.routes.deps import get_current_user
from green_community.services.auth import (
    CurrentUser,
    hash_password,
    new_session_token,
    session_expiry,
    verify_password,
)
from green_community.services.errors import AuthError, ConflictError


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def test_hash_and_verify_password():
    hashed = hash_password("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong-pass", hashed)


def test_verify_password_with_malformed_hash_is_false():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_session_tokens_are_unique_and_expire_in_future():
    assert new_session_token() != new_session_token()
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert session_expiry(now) - now == timedelta(days=7)


@pytest.mark.asyncio
async def test_signin_sets_session_cookie(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from green_community.routes import auth as auth_routes

    expires = datetime(2026, 1, 8, tzinfo=timezone.utc)

    async def fake_sign_in(*, email: str, password: str):
        assert email == "leaf@example.com"
        profile = Profile(id="p1", user_id="u1", eco_name="Leaf", green_points=40)
        return "tok-123", expires, profile

    monkeypatch.setattr(auth_routes.auth_service, "sign_in", fake_sign_in)

    response = await client.post(
        "/v1/auth/signin",
        json={"email": "  Leaf@Example.com ", "password": "secret1"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["token"] == "tok-123"
    assert body["profile"]["eco_name"] == "Leaf"
    assert body["profile"]["green_points"] == 40
    assert "session_token=tok-123" in response.headers["set-cookie"]


@pytest.mark.asyncio
async def test_signin_bad_credentials_is_401(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from green_community.routes import auth as auth_routes

    async def fake_sign_in(*, email: str, password: str):
        raise AuthError("Invalid email or password", code="INVALID_CREDENTIALS")

    monkeypatch.setattr(auth_routes.auth_service, "sign_in", fake_sign_in)

    response = await client.post("/v1/auth/signin", json={"email": "x@y.z", "password": "nope12"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_signup_duplicate_email_is_409(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from green_community.routes import auth as auth_routes

    async def fake_sign_up(**kwargs):
        raise ConflictError("Email is already registered", code="EMAIL_TAKEN")

    monkeypatch.setattr(auth_routes.auth_service, "sign_up", fake_sign_up)

    response = await client.post(
        "/v1/auth/signup",
        json={"email": "leaf@example.com", "password": "secret1", "eco_name": "Leaf"},
    )
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "EMAIL_TAKEN"


@pytest.mark.asyncio
async def test_me_with_overridden_user(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from green_community.routes import auth as auth_routes

    app.dependency_overrides[get_current_user] = lambda: CurrentUser(
        user_id="u1", email="leaf@example.com", eco_name="Leaf"
    )

    async def fake_get_profile(user_id: str) -> Profile:
        return Profile(id="p1", user_id=user_id, eco_name="Leaf", green_points=250)

    monkeypatch.setattr(auth_routes, "get_profile", fake_get_profile)

    response = await client.get("/v1/auth/me")
    assert response.status_code == 200
    assert response.json()["user_id"] == "u1"
    assert response.json()["green_points"] == 250


@pytest.mark.asyncio
async def test_bearer_token_is_resolved(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from green_community.routes import deps

    seen: list[str] = []

    async def fake_resolve_session(token: str) -> CurrentUser:
        seen.append(token)
        return CurrentUser(user_id="u9", email="n@x.io", eco_name="Nine")

    async def fake_get_profile(user_id: str) -> Profile:
        return Profile(id="p9", user_id=user_id, eco_name="Nine", green_points=0)

    from green_community.routes import auth as auth_routes

    monkeypatch.setattr(deps, "resolve_session", fake_resolve_session)
    monkeypatch.setattr(auth_routes, "get_profile", fake_get_profile)

    response = await client.get("/v1/auth/me", headers={"Authorization": "Bearer abc"})
    assert response.status_code == 200
    assert seen == ["abc"]


@pytest.mark.asyncio
@pytest.mark.parametrize("password", ["x" * 100, "é" * 40])
async def test_signup_password_over_bcrypt_limit_is_400(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch, password: str
):
    from green_community.routes import auth as auth_routes

    called = []

    async def fake_sign_up(**kwargs):
        called.append(kwargs)

    monkeypatch.setattr(auth_routes.auth_service, "sign_up", fake_sign_up)

    response = await client.post(
        "/v1/auth/signup",
        json={"email": "leaf@example.com", "password": password, "eco_name": "Leaf"},
    )
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "INVALID_INPUT"
    assert error["detail"]["errors"][0]["loc"] == ["body", "password"]
    assert called == []


def test_hash_password_at_byte_limit():
    password = "p" * 72
    assert verify_password(password, hash_password(password))
