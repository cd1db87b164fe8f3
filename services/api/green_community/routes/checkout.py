"""Checkout endpoint."""

from fastapi import APIRouter, status

from green_community.routes.deps import AuthUser
from green_community.schemas.marketplace import CheckoutRequest, CheckoutResult
from green_community.services.checkout import checkout

router = APIRouter()


@router.post("", response_model=CheckoutResult, status_code=status.HTTP_201_CREATED)
async def place_order(body: CheckoutRequest, user: AuthUser) -> CheckoutResult:
    """Turn the caller's cart into a confirmed order.

    Errors:
        400 EMPTY_CART, 409 INSUFFICIENT_POINTS
    """
    return await checkout(
        user_id=user.user_id,
        shipping_address=body.shipping_address,
        payment_method=body.payment_method,
        notes=body.notes,
    )
