"""Tests for checkout: points debit, order/payment records and the checkout route."""

from contextlib import asynccontextmanager
import json

import pytest
from httpx import ASGITransport, AsyncClient

from green_community.main import app
from green_community.models import Order, OrderItem, OrderStatus, Payment, PaymentMethod, Profile
from green_community.routes.deps import get_current_user
from green_community.schemas.marketplace import CartItemOut, CartOut, CheckoutResult, ProductOut, ShippingAddress
from green_community.services import cart as cart_service
from green_community.services import checkout as checkout_service
from green_community.services.auth import CurrentUser
from green_community.services.checkout import (
    INSUFFICIENT_POINTS_MESSAGE,
    checkout,
    ensure_affordable,
    new_transaction_id,
)
from green_community.services.errors import ConflictError, InvalidInputError, NotFoundError

ADDRESS = {
    "full_name": "Asha Green",
    "phone": "9999999999",
    "email": "asha@example.com",
    "address": "12 Banyan Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "pincode": "560001",
}


def test_ensure_affordable():
    ensure_affordable(500, 500)
    with pytest.raises(ConflictError) as exc:
        ensure_affordable(499, 500)
    assert exc.value.code == "INSUFFICIENT_POINTS"
    assert exc.value.message == INSUFFICIENT_POINTS_MESSAGE
    assert exc.value.detail == {"required": 500, "balance": 499}


def test_transaction_id_format():
    txn = new_transaction_id()
    assert txn.startswith("TXN_")
    assert txn[4:].isdigit()


@pytest.mark.asyncio
async def test_checkout_rejects_empty_cart(monkeypatch: pytest.MonkeyPatch):
    async def empty_cart(user_id: str) -> CartOut:
        return CartOut(items=[], total_points=0, total_items=0, total_amount=0, source="table")

    monkeypatch.setattr(cart_service, "get_cart", empty_cart)

    with pytest.raises(InvalidInputError) as exc:
        await checkout(user_id="u1", shipping_address=ShippingAddress(**ADDRESS))
    assert exc.value.code == "EMPTY_CART"


@pytest.fixture
async def client():
    app.dependency_overrides[get_current_user] = lambda: CurrentUser(
        user_id="u1", email="leaf@example.com", eco_name="Leaf"
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_checkout_requires_full_address(client: AsyncClient):
    response = await client.post(
        "/v1/checkout",
        json={"shipping_address": {**ADDRESS, "pincode": "  "}, "payment_method": "green_points"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_checkout_insufficient_points_is_409(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from green_community.routes import checkout as checkout_routes

    async def fake_checkout(**kwargs) -> CheckoutResult:
        ensure_affordable(40, 150)
        raise AssertionError("unreachable")

    monkeypatch.setattr(checkout_routes, "checkout", fake_checkout)

    response = await client.post("/v1/checkout", json={"shipping_address": ADDRESS})
    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "INSUFFICIENT_POINTS"
    assert error["message"] == "Insufficient Green Points. Complete more challenges!"


@pytest.mark.asyncio
async def test_checkout_success_payload(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    from green_community.routes import checkout as checkout_routes

    captured: dict = {}

    async def fake_checkout(**kwargs) -> CheckoutResult:
        captured.update(kwargs)
        return CheckoutResult(
            order_id="o1",
            status="confirmed",
            payment_method=kwargs["payment_method"],
            transaction_id="TXN_1700000000000",
            total_points=150,
            total_amount=599.0,
            remaining_points=350,
        )

    monkeypatch.setattr(checkout_routes, "checkout", fake_checkout)

    response = await client.post("/v1/checkout", json={"shipping_address": ADDRESS, "payment_method": "upi"})
    assert response.status_code == 201
    assert captured["payment_method"] is PaymentMethod.UPI
    body = response.json()
    assert body["status"] == "confirmed"
    assert body["remaining_points"] == 350


class _Result:
    def __init__(self, value):
        self._value = value

    def scalar_one_or_none(self):
        return self._value


class RecordingSession:
    """Stand-in AsyncSession holding one locked profile and recording writes."""

    def __init__(self, profile: Profile | None):
        self.profile = profile
        self.added: list = []
        self.statements: list = []

    async def execute(self, statement):
        self.statements.append(statement)
        return _Result(self.profile)

    def add(self, obj) -> None:
        self.added.append(obj)

    async def flush(self) -> None:
        for i, obj in enumerate(self.added):
            if getattr(obj, "id", None) is None:
                obj.id = f"{type(obj).__name__.lower()}-{i}"

    def of_type(self, model) -> list:
        return [obj for obj in self.added if isinstance(obj, model)]


def _cart_item(product_id: str, points: int, price: float, quantity: int) -> CartItemOut:
    return CartItemOut(
        id=f"row-{product_id}",
        product_id=product_id,
        quantity=quantity,
        product=ProductOut(
            id=product_id,
            shop_id="s1",
            name=f"Product {product_id}",
            category="kitchen",
            price_in_points=points,
            price=price,
        ),
    )


@pytest.fixture
def checkout_env(monkeypatch: pytest.MonkeyPatch):
    """Cart of 2 x 50pt + 1 x 150pt (250 pts, 997.0) and a 400pt profile."""
    items = [_cart_item("p1", 50, 199.0, 2), _cart_item("p2", 150, 599.0, 1)]
    session = RecordingSession(Profile(id="pr1", user_id="u1", eco_name="Leaf", green_points=400))
    cleared: list[str] = []

    async def get_cart(user_id: str) -> CartOut:
        return cart_service.build_cart(items, "table")

    async def clear_cart(user_id: str) -> None:
        cleared.append(user_id)

    @asynccontextmanager
    async def fake_get_session():
        yield session

    monkeypatch.setattr(cart_service, "get_cart", get_cart)
    monkeypatch.setattr(cart_service, "clear_cart", clear_cart)
    monkeypatch.setattr(checkout_service, "get_session", fake_get_session)
    return session, cleared


@pytest.mark.asyncio
async def test_checkout_with_points_debits_cart_total(checkout_env):
    session, cleared = checkout_env

    result = await checkout(
        user_id="u1",
        shipping_address=ShippingAddress(**ADDRESS),
        notes="  leave at door ",
    )

    assert result.total_points == 250
    assert result.total_amount == 997.0
    assert result.remaining_points == 150
    assert session.profile.green_points == 150
    assert result.status is OrderStatus.CONFIRMED

    [order] = session.of_type(Order)
    assert order.id == result.order_id
    assert order.status == "confirmed"
    assert order.total_points_used == 250
    assert order.total_amount == 997.0
    assert order.notes == "leave at door"
    assert json.loads(order.shipping_address_json)["pincode"] == "560001"

    items = session.of_type(OrderItem)
    assert [(i.product_id, i.quantity, i.points_per_item, i.price_per_item) for i in items] == [
        ("p1", 2, 50, 199.0),
        ("p2", 1, 150, 599.0),
    ]
    assert all(i.order_id == order.id for i in items)

    [payment] = session.of_type(Payment)
    assert payment.payment_method == "green_points"
    assert payment.points_used == 250
    assert payment.amount == 0
    assert payment.status == "completed"
    assert payment.transaction_id == result.transaction_id

    assert cleared == ["u1"]


@pytest.mark.asyncio
async def test_checkout_with_upi_keeps_points(checkout_env):
    session, cleared = checkout_env

    result = await checkout(
        user_id="u1",
        shipping_address=ShippingAddress(**ADDRESS),
        payment_method=PaymentMethod.UPI,
    )

    assert result.remaining_points == 400
    assert session.profile.green_points == 400

    [order] = session.of_type(Order)
    assert order.total_points_used == 0
    assert order.notes is None

    [payment] = session.of_type(Payment)
    assert payment.payment_method == "upi"
    assert payment.amount == 997.0
    assert payment.points_used == 0
    assert cleared == ["u1"]


@pytest.mark.asyncio
async def test_checkout_insufficient_points_writes_nothing(checkout_env):
    session, cleared = checkout_env
    session.profile.green_points = 249

    with pytest.raises(ConflictError) as exc:
        await checkout(user_id="u1", shipping_address=ShippingAddress(**ADDRESS))

    assert exc.value.detail == {"required": 250, "balance": 249}
    assert session.profile.green_points == 249
    assert session.added == []
    assert cleared == []


@pytest.mark.asyncio
async def test_checkout_without_profile_is_404(checkout_env):
    session, cleared = checkout_env
    session.profile = None

    with pytest.raises(NotFoundError) as exc:
        await checkout(user_id="u1", shipping_address=ShippingAddress(**ADDRESS))

    assert exc.value.code == "PROFILE_NOT_FOUND"
    assert cleared == []
