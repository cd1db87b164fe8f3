"""Order history, tracking and status updates."""

import json
import logging

from sqlalchemy import select

from green_community.models import Order, OrderItem, OrderStatus, Payment, Product, Shop
from green_community.schemas.marketplace import (
    OrderItemOut,
    OrderOut,
    OrderTracking,
    PaymentOut,
    ShippingAddress,
    ShopSummary,
    TrackingStep,
)
from green_community.services.errors import ForbiddenError, InvalidInputError, NotFoundError
from green_community.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

# Progression shown to buyers; cancelled is terminal and outside the line
TRACKING_FLOW: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)


def tracking_steps(status: str) -> list[TrackingStep]:
    """Build the tracking timeline for an order status.

    Steps up to and including the current one are completed; the current
    step is flagged. A cancelled (or unknown) status shows no progress.
    """
    values = [s.value for s in TRACKING_FLOW]
    current_index = values.index(status) if status in values else -1
    return [
        TrackingStep(
            status=step.value,
            label=step.value.capitalize(),
            completed=current_index >= 0 and i <= current_index,
            current=i == current_index,
        )
        for i, step in enumerate(TRACKING_FLOW)
    ]


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError as e:
        raise InvalidInputError(
            "Unknown order status",
            code="INVALID_STATUS",
            detail={"status": value, "allowed": [s.value for s in OrderStatus]},
        ) from e


def _shipping_address(raw: str | None) -> ShippingAddress | None:
    if not raw:
        return None
    try:
        return ShippingAddress(**json.loads(raw))
    except (ValueError, TypeError):
        return None


async def list_orders(user_id: str) -> list[OrderOut]:
    """The caller's orders newest first, with items (product + shop) and payments."""
    async with get_session() as session:
        orders = (
            (await session.execute(select(Order).where(Order.user_id == user_id).order_by(Order.created_at.desc())))
            .scalars()
            .all()
        )
        if not orders:
            return []

        order_ids = [o.id for o in orders]
        item_rows = (
            await session.execute(
                select(OrderItem, Product, Shop)
                .outerjoin(Product, Product.id == OrderItem.product_id)
                .outerjoin(Shop, Shop.id == Product.shop_id)
                .where(OrderItem.order_id.in_(order_ids))
                .order_by(OrderItem.created_at.asc())
            )
        ).all()
        payments = (
            (
                await session.execute(
                    select(Payment).where(Payment.order_id.in_(order_ids)).order_by(Payment.created_at.asc())
                )
            )
            .scalars()
            .all()
        )

    items_by_order: dict[str, list[OrderItemOut]] = {}
    for item, product, shop in item_rows:
        items_by_order.setdefault(item.order_id, []).append(
            OrderItemOut(
                id=item.id,
                product_id=item.product_id,
                quantity=item.quantity,
                price_per_item=item.price_per_item or 0,
                points_per_item=item.points_per_item or 0,
                product_name=product.name if product else None,
                product_category=product.category if product else None,
                product_image_url=product.image_url if product else None,
                shop=ShopSummary(name=shop.name, location=shop.location, rating=shop.rating) if shop else None,
            )
        )

    payments_by_order: dict[str, list[PaymentOut]] = {}
    for payment in payments:
        payments_by_order.setdefault(payment.order_id, []).append(PaymentOut.model_validate(payment))

    return [
        OrderOut(
            id=o.id,
            user_id=o.user_id,
            status=o.status,
            total_amount=o.total_amount or 0,
            total_points_used=o.total_points_used or 0,
            shipping_address=_shipping_address(o.shipping_address_json),
            notes=o.notes,
            created_at=o.created_at,
            updated_at=o.updated_at,
            items=items_by_order.get(o.id, []),
            payments=payments_by_order.get(o.id, []),
        )
        for o in orders
    ]


async def get_tracking(*, order_id: str, user_id: str) -> OrderTracking:
    async with get_session() as session:
        order = await session.get(Order, order_id)
        if order is None or order.user_id != user_id:
            raise NotFoundError("Order not found", code="ORDER_NOT_FOUND", detail={"order_id": order_id})
        status = order.status

    return OrderTracking(
        order_id=order_id,
        status=status,
        cancelled=status == OrderStatus.CANCELLED.value,
        steps=tracking_steps(status),
    )


async def update_status(*, order_id: str, user_id: str, status: OrderStatus) -> OrderTracking:
    """Set an order's status. Only owners of shops whose products are in the order may do so.

    Raises:
        NotFoundError: Unknown order.
        ForbiddenError: Caller owns none of the shops in the order.
    """
    async with get_session() as session:
        order = await session.get(Order, order_id)
        if order is None:
            raise NotFoundError("Order not found", code="ORDER_NOT_FOUND", detail={"order_id": order_id})

        owned = await session.scalar(
            select(OrderItem.id)
            .join(Product, Product.id == OrderItem.product_id)
            .join(Shop, Shop.id == Product.shop_id)
            .where(OrderItem.order_id == order_id, Shop.owner_id == user_id)
            .limit(1)
        )
        if owned is None:
            raise ForbiddenError("Only the shop owner can update this order", code="NOT_SHOP_OWNER")

        previous = order.status
        order.status = status.value
        await session.flush()

    logger.info(f"[orders] status order_id={order_id} {previous} -> {status.value} by={user_id}")
    return OrderTracking(
        order_id=order_id,
        status=status.value,
        cancelled=status == OrderStatus.CANCELLED,
        steps=tracking_steps(status.value),
    )
