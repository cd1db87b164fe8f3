"""Tests for cart totals and the table -> Redis fallback path."""

import logging

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from green_community.schemas.marketplace import CartItemOut, ProductOut
from green_community.services import cart as cart_service
from green_community.services.errors import ConflictError
from green_community.settings import Settings


def _item(product_id: str, points: int, price: float, quantity: int, item_id: str | None = None) -> CartItemOut:
    return CartItemOut(
        id=item_id or f"row-{product_id}",
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


def test_compute_totals():
    items = [_item("p1", 50, 199.0, 2), _item("p2", 150, 599.5, 1)]
    assert cart_service.compute_totals(items) == (250, 3, 997.5)


def test_compute_totals_empty():
    assert cart_service.compute_totals([]) == (0, 0, 0)


def _table_down(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception('relation "shopping_cart" does not exist'))


@pytest.mark.asyncio
async def test_get_cart_falls_back_when_table_fails(monkeypatch: pytest.MonkeyPatch, caplog):
    async def table_items(user_id: str):
        _table_down()

    async def fallback_items(user_id: str):
        return [_item("p1", 50, 199.0, 2, item_id="local_p1")]

    monkeypatch.setattr(cart_service, "_table_items", table_items)
    monkeypatch.setattr(cart_service, "_fallback_items", fallback_items)
    monkeypatch.setattr(cart_service, "get_settings", lambda: Settings(cart_fallback_enabled=True))

    with caplog.at_level(logging.WARNING, logger="uvicorn.error"):
        cart = await cart_service.get_cart("u1")

    assert cart.source == "fallback"
    assert cart.items[0].id == "local_p1"
    assert cart.total_points == 100
    assert any("using fallback store" in r.message for r in caplog.records)


@pytest.mark.asyncio
async def test_get_cart_uses_table_when_available(monkeypatch: pytest.MonkeyPatch):
    async def table_items(user_id: str):
        return [_item("p2", 150, 599.0, 1)]

    async def fallback_items(user_id: str):
        raise AssertionError("fallback must not be used")

    monkeypatch.setattr(cart_service, "_table_items", table_items)
    monkeypatch.setattr(cart_service, "_fallback_items", fallback_items)

    cart = await cart_service.get_cart("u1")
    assert cart.source == "table"
    assert cart.total_items == 1


@pytest.mark.asyncio
async def test_fallback_disabled_propagates_error(monkeypatch: pytest.MonkeyPatch):
    async def table_items(user_id: str):
        _table_down()

    monkeypatch.setattr(cart_service, "_table_items", table_items)
    monkeypatch.setattr(cart_service, "get_settings", lambda: Settings(cart_fallback_enabled=False))

    with pytest.raises(OperationalError):
        await cart_service.get_cart("u1")


@pytest.mark.asyncio
async def test_zero_quantity_update_removes_from_fallback(monkeypatch: pytest.MonkeyPatch):
    removed: list[tuple[str, str]] = []

    async def table_set_quantity(user_id: str, product_id: str, quantity: int):
        _table_down()

    async def remove_fallback_cart_item(user_id: str, product_id: str):
        removed.append((user_id, product_id))

    async def fallback_items(user_id: str):
        return []

    async def require_product(product_id: str):
        raise AssertionError("removal must not look up the product")

    monkeypatch.setattr(cart_service, "_table_set_quantity", table_set_quantity)
    monkeypatch.setattr(cart_service, "remove_fallback_cart_item", remove_fallback_cart_item)
    monkeypatch.setattr(cart_service, "_fallback_items", fallback_items)
    monkeypatch.setattr(cart_service, "_require_product", require_product)
    monkeypatch.setattr(cart_service, "get_settings", lambda: Settings(cart_fallback_enabled=True))

    cart = await cart_service.set_item_quantity(user_id="u1", product_id="p1", quantity=0)
    assert removed == [("u1", "p1")]
    assert cart.items == []
    assert cart.source == "fallback"


@pytest.mark.asyncio
async def test_add_item_accumulates_in_fallback(monkeypatch: pytest.MonkeyPatch):
    store: dict[str, int] = {"p1": 2}

    async def table_add(user_id: str, product_id: str, quantity: int):
        _table_down()

    async def get_fallback_cart(user_id: str) -> dict[str, int]:
        return dict(store)

    async def set_fallback_cart_item(user_id: str, product_id: str, quantity: int):
        store[product_id] = quantity

    async def fallback_items(user_id: str):
        return [_item(pid, 10, 1.0, qty, item_id=f"local_{pid}") for pid, qty in store.items()]

    async def require_product(product_id: str):
        return None

    monkeypatch.setattr(cart_service, "_table_add", table_add)
    monkeypatch.setattr(cart_service, "get_fallback_cart", get_fallback_cart)
    monkeypatch.setattr(cart_service, "set_fallback_cart_item", set_fallback_cart_item)
    monkeypatch.setattr(cart_service, "_fallback_items", fallback_items)
    monkeypatch.setattr(cart_service, "_require_product", require_product)
    monkeypatch.setattr(cart_service, "get_settings", lambda: Settings(cart_fallback_enabled=True))

    cart = await cart_service.add_item(user_id="u1", product_id="p1", quantity=3)
    assert store == {"p1": 5}
    assert cart.total_items == 5


@pytest.mark.asyncio
async def test_add_item_integrity_error_is_conflict_not_fallback(monkeypatch: pytest.MonkeyPatch, caplog):
    written: list[tuple[str, str, int]] = []

    async def table_add(user_id: str, product_id: str, quantity: int):
        raise IntegrityError(
            "INSERT INTO shopping_cart", {}, Exception("duplicate key uq_shopping_cart_pair")
        )

    async def get_fallback_cart(user_id: str) -> dict[str, int]:
        return {}

    async def set_fallback_cart_item(user_id: str, product_id: str, quantity: int):
        written.append((user_id, product_id, quantity))

    async def require_product(product_id: str):
        return None

    monkeypatch.setattr(cart_service, "_table_add", table_add)
    monkeypatch.setattr(cart_service, "get_fallback_cart", get_fallback_cart)
    monkeypatch.setattr(cart_service, "set_fallback_cart_item", set_fallback_cart_item)
    monkeypatch.setattr(cart_service, "_require_product", require_product)
    monkeypatch.setattr(cart_service, "get_settings", lambda: Settings(cart_fallback_enabled=True))

    with caplog.at_level(logging.WARNING, logger="uvicorn.error"):
        with pytest.raises(ConflictError) as exc_info:
            await cart_service.add_item(user_id="u1", product_id="p1", quantity=1)

    assert exc_info.value.code == "CART_CONFLICT"
    assert exc_info.value.status_code == 409
    assert written == []
    assert not any("using fallback store" in r.message for r in caplog.records)


@pytest.mark.asyncio
async def test_clear_cart_continues_when_table_fails(monkeypatch: pytest.MonkeyPatch, caplog):
    cleared: list[str] = []

    async def table_clear(user_id: str):
        _table_down()

    async def clear_fallback_cart(user_id: str):
        cleared.append(user_id)

    monkeypatch.setattr(cart_service, "_table_clear", table_clear)
    monkeypatch.setattr(cart_service, "clear_fallback_cart", clear_fallback_cart)

    with caplog.at_level(logging.WARNING, logger="uvicorn.error"):
        await cart_service.clear_cart("u1")

    assert cleared == ["u1"]
    assert any("clear failed on shopping_cart" in r.message for r in caplog.records)


@pytest.mark.asyncio
async def test_clear_cart_continues_when_redis_missing(monkeypatch: pytest.MonkeyPatch, caplog):
    cleared: list[str] = []

    async def table_clear(user_id: str):
        cleared.append(user_id)

    async def clear_fallback_cart(user_id: str):
        raise RuntimeError("Redis not initialized. Call init_redis() first.")

    monkeypatch.setattr(cart_service, "_table_clear", table_clear)
    monkeypatch.setattr(cart_service, "clear_fallback_cart", clear_fallback_cart)

    with caplog.at_level(logging.WARNING, logger="uvicorn.error"):
        await cart_service.clear_cart("u1")

    assert cleared == ["u1"]
    assert any("clear failed on fallback store" in r.message for r in caplog.records)
