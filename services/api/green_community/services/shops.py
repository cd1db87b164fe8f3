"""Shop owner service: shop profile, product management and sales analytics."""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from green_community.models import Order, OrderItem, OrderStatus, Product, Shop
from green_community.schemas.marketplace import OrderSummary, ProductOut, ShopAnalytics, ShopOut
from green_community.services.errors import ConflictError, NotFoundError
from green_community.services.marketplace import product_out
from green_community.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

ANALYTICS_WINDOW_DAYS = 30
TOP_PRODUCTS_LIMIT = 5
RECENT_ORDERS_LIMIT = 10

_PRODUCT_FIELDS = ("name", "description", "category", "price_in_points", "price", "image_url")


async def _owned_shop(session, user_id: str) -> Shop:
    shop = (await session.execute(select(Shop).where(Shop.owner_id == user_id))).scalar_one_or_none()
    if shop is None:
        raise NotFoundError("You don't have a shop yet", code="SHOP_NOT_FOUND")
    return shop


async def get_my_shop(user_id: str) -> ShopOut:
    async with get_session() as session:
        shop = await _owned_shop(session, user_id)
    return ShopOut.model_validate(shop)


async def create_shop(*, user_id: str, data: dict[str, Any]) -> ShopOut:
    """Create the caller's shop; an owner may have only one.

    Raises:
        ConflictError: The caller already owns a shop.
    """
    async with get_session() as session:
        existing = await session.scalar(select(Shop.id).where(Shop.owner_id == user_id))
        if existing is not None:
            raise ConflictError("You already have a shop", code="SHOP_EXISTS", detail={"shop_id": existing})

        shop = Shop(
            owner_id=user_id,
            name=data["name"].strip(),
            description=data.get("description"),
            location=data.get("location"),
            category=data.get("category"),
            image_url=data.get("image_url"),
            rating=0,
        )
        session.add(shop)
        try:
            await session.flush()
        except IntegrityError as e:
            raise ConflictError("You already have a shop", code="SHOP_EXISTS") from e
        await session.refresh(shop)

    logger.info(f"[shops] created shop_id={shop.id} owner={user_id}")
    return ShopOut.model_validate(shop)


# ============================================================
# Products
# ============================================================


async def list_my_products(user_id: str) -> list[ProductOut]:
    """The caller's shop products, newest first."""
    async with get_session() as session:
        shop = await _owned_shop(session, user_id)
        products = (
            (await session.execute(select(Product).where(Product.shop_id == shop.id).order_by(Product.created_at.desc())))
            .scalars()
            .all()
        )
    return [product_out(p, shop) for p in products]


async def _owned_product(session, shop: Shop, product_id: str) -> Product:
    product = await session.get(Product, product_id)
    if product is None or product.shop_id != shop.id:
        raise NotFoundError("Product not found", code="PRODUCT_NOT_FOUND", detail={"product_id": product_id})
    return product


async def create_product(*, user_id: str, data: dict[str, Any]) -> ProductOut:
    async with get_session() as session:
        shop = await _owned_shop(session, user_id)
        product = Product(shop_id=shop.id, **{k: data[k] for k in _PRODUCT_FIELDS if k in data})
        session.add(product)
        await session.flush()
        await session.refresh(product)

    logger.info(f"[shops] product created id={product.id} shop_id={shop.id} points={product.price_in_points}")
    return product_out(product, shop)


async def update_product(*, user_id: str, product_id: str, data: dict[str, Any]) -> ProductOut:
    async with get_session() as session:
        shop = await _owned_shop(session, user_id)
        product = await _owned_product(session, shop, product_id)
        for field in _PRODUCT_FIELDS:
            if field in data:
                setattr(product, field, data[field])
        await session.flush()
        await session.refresh(product)

    return product_out(product, shop)


async def delete_product(*, user_id: str, product_id: str) -> None:
    async with get_session() as session:
        shop = await _owned_shop(session, user_id)
        product = await _owned_product(session, shop, product_id)
        await session.delete(product)

    logger.info(f"[shops] product deleted id={product_id} shop_id={shop.id}")


# ============================================================
# Analytics
# ============================================================


def summarize_orders(orders: list[Order]) -> dict[str, Any]:
    """Aggregate counters over a list of distinct orders."""
    return {
        "total_orders": len(orders),
        "total_revenue": round(sum(o.total_amount or 0 for o in orders), 2),
        "total_points_earned": sum(o.total_points_used or 0 for o in orders),
        "pending_orders": sum(1 for o in orders if o.status == OrderStatus.PENDING.value),
        "completed_orders": sum(1 for o in orders if o.status == OrderStatus.DELIVERED.value),
    }


async def get_analytics(user_id: str, *, now: datetime | None = None) -> ShopAnalytics:
    """Sales metrics over orders from the last 30 days containing the shop's products."""
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(days=ANALYTICS_WINDOW_DAYS)

    async with get_session() as session:
        shop = await _owned_shop(session, user_id)

        rows = (
            await session.execute(
                select(Order, Product.name)
                .join(OrderItem, OrderItem.order_id == Order.id)
                .join(Product, Product.id == OrderItem.product_id)
                .where(Product.shop_id == shop.id, Order.created_at >= since)
                .order_by(Order.created_at.desc())
            )
        ).all()

        top_products = (
            (
                await session.execute(
                    select(Product)
                    .where(Product.shop_id == shop.id)
                    .order_by(Product.created_at.desc())
                    .limit(TOP_PRODUCTS_LIMIT)
                )
            )
            .scalars()
            .all()
        )

    orders: dict[str, Order] = {}
    product_names: dict[str, list[str]] = {}
    for order, product_name in rows:
        orders.setdefault(order.id, order)
        product_names.setdefault(order.id, []).append(product_name)

    distinct = list(orders.values())
    recent = [
        OrderSummary(
            id=o.id,
            status=o.status,
            total_points_used=o.total_points_used or 0,
            total_amount=o.total_amount or 0,
            created_at=o.created_at,
            product_names=product_names.get(o.id, []),
        )
        for o in distinct[:RECENT_ORDERS_LIMIT]
    ]

    return ShopAnalytics(
        shop_id=shop.id,
        window_days=ANALYTICS_WINDOW_DAYS,
        **summarize_orders(distinct),
        top_products=[product_out(p, shop) for p in top_products],
        recent_orders=recent,
    )
