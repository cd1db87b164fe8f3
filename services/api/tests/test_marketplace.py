"""Tests for marketplace buy-check."""

from contextlib import asynccontextmanager

import pytest
from httpx import ASGITransport, AsyncClient

from green_community.main import app
from green_community.models import Product
from green_community.routes.deps import get_current_user
from green_community.schemas.marketplace import BuyCheck
from green_community.services import marketplace as marketplace_service
from green_community.services.auth import CurrentUser
from green_community.services.errors import NotFoundError


class BalanceSession:
    def __init__(self, product: Product | None, balance: int | None):
        self.product = product
        self.balance = balance

    async def get(self, model, ident):
        return self.product

    async def scalar(self, statement):
        return self.balance


def _use_session(monkeypatch: pytest.MonkeyPatch, product: Product | None, balance: int | None) -> None:
    @asynccontextmanager
    async def fake_get_session():
        yield BalanceSession(product, balance)

    monkeypatch.setattr(marketplace_service, "get_session", fake_get_session)


def _product(points: int) -> Product:
    return Product(id="p1", shop_id="s1", name="Steel Bottle", category="kitchen", price_in_points=points)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("balance", "affordable", "expected_balance"),
    [(150, True, 150), (149, False, 149), (None, False, 0)],
)
async def test_buy_check_compares_balance(
    monkeypatch: pytest.MonkeyPatch, balance, affordable: bool, expected_balance: int
):
    _use_session(monkeypatch, _product(150), balance)

    check = await marketplace_service.buy_check(product_id="p1", user_id="u1")

    assert check == BuyCheck(product_id="p1", affordable=affordable, required=150, balance=expected_balance)


@pytest.mark.asyncio
async def test_buy_check_unknown_product(monkeypatch: pytest.MonkeyPatch):
    _use_session(monkeypatch, None, 500)

    with pytest.raises(NotFoundError) as exc:
        await marketplace_service.buy_check(product_id="gone", user_id="u1")
    assert exc.value.code == "PRODUCT_NOT_FOUND"


@pytest.fixture
async def client():
    app.dependency_overrides[get_current_user] = lambda: CurrentUser(
        user_id="u1", email="leaf@example.com", eco_name="Leaf"
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_buy_check_route(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    _use_session(monkeypatch, _product(300), 120)

    response = await client.post("/v1/marketplace/products/p1/buy-check")
    assert response.status_code == 200
    assert response.json() == {"product_id": "p1", "affordable": False, "required": 300, "balance": 120}


@pytest.mark.asyncio
async def test_buy_check_route_requires_auth():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.post("/v1/marketplace/products/p1/buy-check")
    assert response.status_code == 401
