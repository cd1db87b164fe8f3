"""Marketplace browse service: shops, products and affordability checks."""

import logging

from sqlalchemy import or_, select

from green_community.models import Product, Profile, Shop
from green_community.schemas.marketplace import BuyCheck, ProductOut, ShopOut, ShopSummary
from green_community.services.errors import NotFoundError
from green_community.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")


def product_out(product: Product, shop: Shop | None) -> ProductOut:
    """Product payload with its shop summary embedded."""
    item = ProductOut.model_validate(product)
    if shop is not None:
        item.shop = ShopSummary(name=shop.name, location=shop.location, rating=shop.rating)
    return item


async def list_shops(*, search: str | None = None, category: str | None = None) -> list[ShopOut]:
    """Shops ordered by rating desc; `search` matches name or description (ILIKE)."""
    async with get_session() as session:
        query = select(Shop).order_by(Shop.rating.desc(), Shop.name)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.where(or_(Shop.name.ilike(pattern), Shop.description.ilike(pattern)))
        if category and category.strip().lower() != "all":
            query = query.where(Shop.category == category.strip())
        shops = (await session.execute(query)).scalars().all()

    return [ShopOut.model_validate(s) for s in shops]


async def list_products(*, category: str | None = None, shop_id: str | None = None) -> list[ProductOut]:
    """Products ordered by price_in_points asc, with shop name/location/rating."""
    async with get_session() as session:
        query = (
            select(Product, Shop)
            .join(Shop, Shop.id == Product.shop_id)
            .order_by(Product.price_in_points.asc(), Product.name)
        )
        if category and category.strip().lower() != "all":
            query = query.where(Product.category == category.strip())
        if shop_id:
            query = query.where(Product.shop_id == shop_id)
        rows = (await session.execute(query)).all()

    return [product_out(product, shop) for product, shop in rows]


async def buy_check(*, product_id: str, user_id: str) -> BuyCheck:
    """Compare the product's point price against the caller's balance."""
    async with get_session() as session:
        product = await session.get(Product, product_id)
        if product is None:
            raise NotFoundError("Product not found", code="PRODUCT_NOT_FOUND", detail={"product_id": product_id})

        balance = await session.scalar(select(Profile.green_points).where(Profile.user_id == user_id))

    balance = balance or 0
    return BuyCheck(
        product_id=product_id,
        affordable=balance >= product.price_in_points,
        required=product.price_in_points,
        balance=balance,
    )
