"""Shop owner endpoints: shop profile, products and analytics."""

from fastapi import APIRouter, Response, status

from green_community.routes.deps import AuthUser
from green_community.schemas.marketplace import ProductIn, ProductOut, ShopAnalytics, ShopCreate, ShopOut
from green_community.services import shops as shop_service

router = APIRouter()


@router.get("/mine", response_model=ShopOut)
async def get_my_shop(user: AuthUser) -> ShopOut:
    return await shop_service.get_my_shop(user.user_id)


@router.post("", response_model=ShopOut, status_code=status.HTTP_201_CREATED)
async def create_shop(body: ShopCreate, user: AuthUser) -> ShopOut:
    return await shop_service.create_shop(user_id=user.user_id, data=body.model_dump())


@router.get("/mine/products", response_model=list[ProductOut])
async def list_products(user: AuthUser) -> list[ProductOut]:
    return await shop_service.list_my_products(user.user_id)


@router.post("/mine/products", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
async def create_product(body: ProductIn, user: AuthUser) -> ProductOut:
    return await shop_service.create_product(user_id=user.user_id, data=body.model_dump())


@router.put("/mine/products/{product_id}", response_model=ProductOut)
async def update_product(product_id: str, body: ProductIn, user: AuthUser) -> ProductOut:
    return await shop_service.update_product(user_id=user.user_id, product_id=product_id, data=body.model_dump())


@router.delete("/mine/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: str, user: AuthUser) -> Response:
    await shop_service.delete_product(user_id=user.user_id, product_id=product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/mine/analytics", response_model=ShopAnalytics)
async def get_analytics(user: AuthUser) -> ShopAnalytics:
    """Last 30 days of orders containing the shop's products."""
    return await shop_service.get_analytics(user.user_id)
