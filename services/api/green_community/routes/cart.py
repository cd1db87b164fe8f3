"""Shopping cart endpoints.

Responses include `source` ("table" or "fallback") so clients can tell when
the cart is being served from the fallback store.
"""

from fastapi import APIRouter

from green_community.routes.deps import AuthUser
from green_community.schemas.marketplace import CartItemAdd, CartItemUpdate, CartOut
from green_community.services import cart as cart_service

router = APIRouter()


@router.get("", response_model=CartOut)
async def get_cart(user: AuthUser) -> CartOut:
    return await cart_service.get_cart(user.user_id)


@router.post("/items", response_model=CartOut)
async def add_item(body: CartItemAdd, user: AuthUser) -> CartOut:
    return await cart_service.add_item(user_id=user.user_id, product_id=body.product_id, quantity=body.quantity)


@router.put("/items/{product_id}", response_model=CartOut)
async def set_item_quantity(product_id: str, body: CartItemUpdate, user: AuthUser) -> CartOut:
    """Set an absolute quantity; zero or less removes the item."""
    return await cart_service.set_item_quantity(user_id=user.user_id, product_id=product_id, quantity=body.quantity)


@router.delete("/items/{product_id}", response_model=CartOut)
async def remove_item(product_id: str, user: AuthUser) -> CartOut:
    return await cart_service.remove_item(user_id=user.user_id, product_id=product_id)
