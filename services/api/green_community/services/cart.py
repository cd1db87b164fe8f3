"""Shopping cart service with a Redis fallback.

Every operation first goes to the `shopping_cart` table. When the table is
unavailable (any SQLAlchemyError other than an IntegrityError) and
`cart_fallback_enabled` is set, the operation is served from the Redis hash
`cart:<user_id>` instead, and a warning is logged. Fallback items carry
synthetic ids `local_<product_id>`.
An IntegrityError means the table is healthy but the write lost a race
(duplicate line or a product deleted mid-request); it is a 409 CART_CONFLICT.

Product details always come from the products table; an unknown product id
is a 404 on writes and is silently dropped on fallback reads.
"""

import logging
from typing import Awaitable, Callable, TypeVar

from redis.exceptions import RedisError
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from green_community.models import CartItem, Product, Shop
from green_community.schemas.marketplace import CartItemOut, CartOut
from green_community.services.errors import ConflictError, NotFoundError
from green_community.services.marketplace import product_out
from green_community.settings import get_settings
from green_community.stores.postgres import get_session
from green_community.stores.redis import (
    clear_fallback_cart,
    get_fallback_cart,
    remove_fallback_cart_item,
    set_fallback_cart_item,
)

logger = logging.getLogger("uvicorn.error")

SOURCE_TABLE = "table"
SOURCE_FALLBACK = "fallback"
FALLBACK_ID_PREFIX = "local_"

T = TypeVar("T")


def compute_totals(items: list[CartItemOut]) -> tuple[int, int, float]:
    """Return (total_points, total_items, total_amount) for cart items."""
    total_points = sum(i.product.price_in_points * i.quantity for i in items)
    total_items = sum(i.quantity for i in items)
    total_amount = round(sum((i.product.price or 0) * i.quantity for i in items), 2)
    return total_points, total_items, total_amount


def build_cart(items: list[CartItemOut], source: str) -> CartOut:
    total_points, total_items, total_amount = compute_totals(items)
    return CartOut(
        items=items,
        total_points=total_points,
        total_items=total_items,
        total_amount=total_amount,
        source=source,
    )


async def _with_fallback(
    op: str,
    user_id: str,
    primary: Callable[[], Awaitable[T]],
    fallback: Callable[[], Awaitable[T]],
) -> T:
    try:
        return await primary()
    except IntegrityError as e:
        logger.info(f"[cart] {op} conflicted on shopping_cart user_id={user_id}: {e.orig}")
        raise ConflictError(
            "Cart changed while updating, please retry",
            code="CART_CONFLICT",
        ) from e
    except SQLAlchemyError as e:
        if not get_settings().cart_fallback_enabled:
            raise
        logger.warning(f"[cart] {op} failed on shopping_cart, using fallback store user_id={user_id}: {e}")
        return await fallback()


async def _require_product(product_id: str) -> None:
    async with get_session() as session:
        exists = await session.scalar(select(Product.id).where(Product.id == product_id))
    if exists is None:
        raise NotFoundError("Product not found", code="PRODUCT_NOT_FOUND", detail={"product_id": product_id})


# ============================================================
# Table store
# ============================================================


async def _table_items(user_id: str) -> list[CartItemOut]:
    async with get_session() as session:
        rows = (
            await session.execute(
                select(CartItem, Product, Shop)
                .join(Product, Product.id == CartItem.product_id)
                .join(Shop, Shop.id == Product.shop_id)
                .where(CartItem.user_id == user_id)
                .order_by(CartItem.created_at.asc())
            )
        ).all()

    return [
        CartItemOut(
            id=item.id,
            product_id=item.product_id,
            quantity=item.quantity,
            product=product_out(product, shop),
        )
        for item, product, shop in rows
    ]


async def _find_cart_row(session, user_id: str, product_id: str) -> CartItem | None:
    result = await session.execute(
        select(CartItem).where(CartItem.user_id == user_id, CartItem.product_id == product_id)
    )
    return result.scalar_one_or_none()


async def _table_set_quantity(user_id: str, product_id: str, quantity: int) -> None:
    async with get_session() as session:
        existing = await _find_cart_row(session, user_id, product_id)
        if quantity <= 0:
            if existing:
                await session.delete(existing)
            return
        if existing:
            existing.quantity = quantity
        else:
            session.add(CartItem(user_id=user_id, product_id=product_id, quantity=quantity))


async def _table_add(user_id: str, product_id: str, quantity: int) -> None:
    async with get_session() as session:
        existing = await _find_cart_row(session, user_id, product_id)
        if existing:
            existing.quantity = (existing.quantity or 0) + quantity
        else:
            session.add(CartItem(user_id=user_id, product_id=product_id, quantity=quantity))


async def _table_clear(user_id: str) -> None:
    async with get_session() as session:
        await session.execute(delete(CartItem).where(CartItem.user_id == user_id))


# ============================================================
# Fallback store
# ============================================================


async def _fallback_items(user_id: str) -> list[CartItemOut]:
    quantities = await get_fallback_cart(user_id)
    if not quantities:
        return []

    async with get_session() as session:
        rows = (
            await session.execute(
                select(Product, Shop)
                .join(Shop, Shop.id == Product.shop_id)
                .where(Product.id.in_(list(quantities)))
            )
        ).all()

    by_id = {product.id: (product, shop) for product, shop in rows}
    items = []
    for product_id, quantity in quantities.items():
        if quantity <= 0 or product_id not in by_id:
            continue
        product, shop = by_id[product_id]
        items.append(
            CartItemOut(
                id=f"{FALLBACK_ID_PREFIX}{product_id}",
                product_id=product_id,
                quantity=quantity,
                product=product_out(product, shop),
            )
        )
    return items


async def _fallback_set_quantity(user_id: str, product_id: str, quantity: int) -> None:
    if quantity <= 0:
        await remove_fallback_cart_item(user_id, product_id)
    else:
        await set_fallback_cart_item(user_id, product_id, quantity)


async def _fallback_add(user_id: str, product_id: str, quantity: int) -> None:
    current = (await get_fallback_cart(user_id)).get(product_id, 0)
    await set_fallback_cart_item(user_id, product_id, current + quantity)


# ============================================================
# Public operations
# ============================================================


async def get_cart(user_id: str) -> CartOut:
    async def primary() -> CartOut:
        return build_cart(await _table_items(user_id), SOURCE_TABLE)

    async def fallback() -> CartOut:
        return build_cart(await _fallback_items(user_id), SOURCE_FALLBACK)

    return await _with_fallback("read", user_id, primary, fallback)


async def set_item_quantity(*, user_id: str, product_id: str, quantity: int) -> CartOut:
    """Upsert a cart line to an absolute quantity; quantity <= 0 removes it."""
    if quantity > 0:
        await _require_product(product_id)

    async def primary() -> CartOut:
        await _table_set_quantity(user_id, product_id, quantity)
        return build_cart(await _table_items(user_id), SOURCE_TABLE)

    async def fallback() -> CartOut:
        await _fallback_set_quantity(user_id, product_id, quantity)
        return build_cart(await _fallback_items(user_id), SOURCE_FALLBACK)

    return await _with_fallback("update", user_id, primary, fallback)


async def add_item(*, user_id: str, product_id: str, quantity: int = 1) -> CartOut:
    """Add quantity to a cart line, creating it if needed."""
    await _require_product(product_id)

    async def primary() -> CartOut:
        await _table_add(user_id, product_id, quantity)
        return build_cart(await _table_items(user_id), SOURCE_TABLE)

    async def fallback() -> CartOut:
        await _fallback_add(user_id, product_id, quantity)
        return build_cart(await _fallback_items(user_id), SOURCE_FALLBACK)

    return await _with_fallback("add", user_id, primary, fallback)


async def remove_item(*, user_id: str, product_id: str) -> CartOut:
    return await set_item_quantity(user_id=user_id, product_id=product_id, quantity=0)


async def clear_cart(user_id: str) -> None:
    """Empty the cart in both stores.

    Either store being unavailable is logged and skipped.
    """
    try:
        await _table_clear(user_id)
    except SQLAlchemyError as e:
        logger.warning(f"[cart] clear failed on shopping_cart user_id={user_id}: {e}")

    try:
        await clear_fallback_cart(user_id)
    except (RuntimeError, RedisError) as e:
        logger.warning(f"[cart] clear failed on fallback store user_id={user_id}: {e}")
