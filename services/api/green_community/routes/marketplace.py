"""Marketplace browse endpoints."""

from fastapi import APIRouter, Query

from green_community.routes.deps import AuthUser
from green_community.schemas.marketplace import BuyCheck, ProductOut, ShopOut
from green_community.services import marketplace as marketplace_service

router = APIRouter()


@router.get("/shops", response_model=list[ShopOut])
async def list_shops(
    search: str | None = Query(default=None, max_length=100, description="Matches name or description"),
    category: str | None = Query(default=None, max_length=50),
) -> list[ShopOut]:
    """Shops ordered by rating (highest first)."""
    return await marketplace_service.list_shops(search=search, category=category)


@router.get("/products", response_model=list[ProductOut])
async def list_products(
    category: str | None = Query(default=None, max_length=50),
    shop_id: str | None = Query(default=None),
) -> list[ProductOut]:
    """Products ordered by point price (cheapest first)."""
    return await marketplace_service.list_products(category=category, shop_id=shop_id)


@router.post("/products/{product_id}/buy-check", response_model=BuyCheck)
async def buy_check(product_id: str, user: AuthUser) -> BuyCheck:
    return await marketplace_service.buy_check(product_id=product_id, user_id=user.user_id)
