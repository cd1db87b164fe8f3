"""Checkout service.

Flow:
1. Load the cart (table or fallback); an empty cart is rejected
2. Compute totals from current product prices
3. In one transaction: lock the profile row, check and debit Green Points
   (green_points payments only), create the order, its items and a payment
4. Clear the cart in both stores
"""

import json
import logging
import time

from sqlalchemy import select

from green_community.models import Order, OrderItem, OrderStatus, Payment, PaymentMethod, Profile
from green_community.schemas.marketplace import CartOut, CheckoutResult, ShippingAddress
from green_community.services import cart as cart_service
from green_community.services.errors import ConflictError, InvalidInputError, NotFoundError
from green_community.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

PAYMENT_COMPLETED = "completed"
INSUFFICIENT_POINTS_MESSAGE = "Insufficient Green Points. Complete more challenges!"


def new_transaction_id() -> str:
    return f"TXN_{int(time.time() * 1000)}"


def ensure_affordable(balance: int, total_points: int) -> None:
    """Raise ConflictError when a points balance cannot cover the order."""
    if balance < total_points:
        raise ConflictError(
            INSUFFICIENT_POINTS_MESSAGE,
            code="INSUFFICIENT_POINTS",
            detail={"required": total_points, "balance": balance},
        )


async def checkout(
    *,
    user_id: str,
    shipping_address: ShippingAddress,
    payment_method: PaymentMethod = PaymentMethod.GREEN_POINTS,
    notes: str | None = None,
) -> CheckoutResult:
    """Place an order for everything in the caller's cart.

    Raises:
        InvalidInputError: Empty cart.
        ConflictError: Not enough Green Points.
        NotFoundError: Caller has no profile.
    """
    cart: CartOut = await cart_service.get_cart(user_id)
    if not cart.items:
        raise InvalidInputError("Your cart is empty", code="EMPTY_CART")

    pay_with_points = payment_method == PaymentMethod.GREEN_POINTS
    total_points = cart.total_points
    total_amount = cart.total_amount
    transaction_id = new_transaction_id()

    async with get_session() as session:
        profile = (
            await session.execute(select(Profile).where(Profile.user_id == user_id).with_for_update())
        ).scalar_one_or_none()
        if profile is None:
            raise NotFoundError("Profile not found", code="PROFILE_NOT_FOUND", detail={"user_id": user_id})

        balance = profile.green_points or 0
        if pay_with_points:
            ensure_affordable(balance, total_points)
            profile.green_points = balance - total_points

        order = Order(
            user_id=user_id,
            status=OrderStatus.CONFIRMED.value,
            total_amount=total_amount,
            total_points_used=total_points if pay_with_points else 0,
            shipping_address_json=json.dumps(shipping_address.model_dump()),
            notes=notes.strip() if notes and notes.strip() else None,
        )
        session.add(order)
        await session.flush()

        for item in cart.items:
            session.add(
                OrderItem(
                    order_id=order.id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price_per_item=item.product.price or 0,
                    points_per_item=item.product.price_in_points,
                )
            )

        session.add(
            Payment(
                order_id=order.id,
                payment_method=payment_method.value,
                amount=0 if pay_with_points else total_amount,
                points_used=total_points if pay_with_points else 0,
                status=PAYMENT_COMPLETED,
                transaction_id=transaction_id,
            )
        )
        await session.flush()
        order_id = order.id
        remaining = profile.green_points or 0

    await cart_service.clear_cart(user_id)

    logger.info(
        f"[checkout] order_id={order_id} user_id={user_id} method={payment_method.value} "
        f"items={cart.total_items} points={total_points} amount={total_amount} source={cart.source}"
    )
    return CheckoutResult(
        order_id=order_id,
        status=OrderStatus.CONFIRMED,
        payment_method=payment_method,
        transaction_id=transaction_id,
        total_points=total_points,
        total_amount=total_amount,
        remaining_points=remaining,
    )
