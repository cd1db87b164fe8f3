"""API routes."""

from fastapi import APIRouter

from green_community.routes import (
    auth,
    blogs,
    cart,
    challenges,
    checkout,
    communities,
    home,
    marketplace,
    media,
    orders,
    profiles,
    shops,
    stories,
)

api_router = APIRouter()

# Accounts
api_router.include_router(auth.router, prefix="/v1/auth", tags=["auth"])
api_router.include_router(profiles.router, prefix="/v1/profiles", tags=["profiles"])

# Community content
api_router.include_router(home.router, prefix="/v1/home", tags=["home"])
api_router.include_router(communities.router, prefix="/v1/communities", tags=["communities"])
api_router.include_router(stories.router, prefix="/v1/stories", tags=["stories"])
api_router.include_router(blogs.router, prefix="/v1/blogs", tags=["blogs"])
api_router.include_router(challenges.router, prefix="/v1/challenges", tags=["challenges"])
api_router.include_router(media.router, prefix="/v1/media", tags=["media"])

# Marketplace
api_router.include_router(marketplace.router, prefix="/v1/marketplace", tags=["marketplace"])
api_router.include_router(cart.router, prefix="/v1/cart", tags=["cart"])
api_router.include_router(checkout.router, prefix="/v1/checkout", tags=["checkout"])
api_router.include_router(orders.router, prefix="/v1/orders", tags=["orders"])
api_router.include_router(shops.router, prefix="/v1/shops", tags=["shops"])
