"""Order history and tracking endpoints."""

from fastapi import APIRouter

from green_community.routes.deps import AuthUser
from green_community.schemas.marketplace import OrderOut, OrderStatusUpdate, OrderTracking
from green_community.services import orders as order_service

router = APIRouter()


@router.get("", response_model=list[OrderOut])
async def list_orders(user: AuthUser) -> list[OrderOut]:
    return await order_service.list_orders(user.user_id)


@router.get("/{order_id}/tracking", response_model=OrderTracking)
async def get_tracking(order_id: str, user: AuthUser) -> OrderTracking:
    return await order_service.get_tracking(order_id=order_id, user_id=user.user_id)


@router.patch("/{order_id}/status", response_model=OrderTracking)
async def update_status(order_id: str, body: OrderStatusUpdate, user: AuthUser) -> OrderTracking:
    """Shop owners move orders through the fulfilment flow."""
    new_status = order_service.parse_status(body.status)
    return await order_service.update_status(order_id=order_id, user_id=user.user_id, status=new_status)
