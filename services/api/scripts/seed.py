#!/usr/bin/env python3
"""Seed database with initial data.

Creates:
- Eco challenges with point rewards
- Starter communities across categories
- Marketplace shops with point-priced products

Seed script is idempotent (rows are matched by title/name and skipped when present).

Usage:
    cd services/api
    python -m scripts.seed
"""

import asyncio
import os
import sys

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from green_community.models import Challenge, Community, CommunityCategory, Product, Shop
from green_community.settings import Settings

load_dotenv()

# ============================================================
# Challenges
# ============================================================

CHALLENGES = [
    {
        "title": "Plastic-Free Week",
        "description": "Go a full week without buying single-use plastic. Share a photo of your reusable kit.",
        "category": "waste_reduction",
        "difficulty": "intermediate",
        "points": 150,
    },
    {
        "title": "Plant a Tree",
        "description": "Plant a native sapling in your neighbourhood or a community garden.",
        "category": "tree_plantation",
        "difficulty": "beginner",
        "points": 100,
    },
    {
        "title": "Car-Free Commute",
        "description": "Walk, cycle or take public transport to work or school for five days.",
        "category": "green_transport",
        "difficulty": "intermediate",
        "points": 120,
    },
    {
        "title": "Start a Compost Bin",
        "description": "Set up a compost bin for kitchen scraps and keep it running for two weeks.",
        "category": "zero_waste",
        "difficulty": "beginner",
        "points": 80,
    },
    {
        "title": "Beach or River Cleanup",
        "description": "Organise or join a cleanup and collect at least one full bag of litter.",
        "category": "ocean_cleanup",
        "difficulty": "advanced",
        "points": 200,
    },
    {
        "title": "Energy Audit",
        "description": "Track your household electricity use for a week and cut it by 10%.",
        "category": "renewable_energy",
        "difficulty": "advanced",
        "points": 180,
    },
    {
        "title": "Meatless Monday",
        "description": "Cook plant-based meals every Monday for a month.",
        "category": "food_sustainability",
        "difficulty": "beginner",
        "points": 60,
    },
]

# ============================================================
# Communities
# ============================================================

COMMUNITIES = [
    {
        "name": "Plastic Free Pioneers",
        "description": "Swapping single-use plastic for reusable alternatives, one habit at a time.",
        "category": CommunityCategory.PLASTIC_MANAGEMENT,
    },
    {
        "name": "Urban Tree Planters",
        "description": "Planting and caring for trees in our cities.",
        "category": CommunityCategory.TREE_PLANTATION,
    },
    {
        "name": "Zero Waste Kitchen",
        "description": "Recipes, composting and bulk-buying tips for a waste-free kitchen.",
        "category": CommunityCategory.ZERO_WASTE,
    },
    {
        "name": "Solar Neighbours",
        "description": "Sharing experience with rooftop solar, batteries and community energy.",
        "category": CommunityCategory.RENEWABLE_ENERGY,
    },
    {
        "name": "Cycle Commuters",
        "description": "Routes, gear and advocacy for cycling to work.",
        "category": CommunityCategory.GREEN_TRANSPORT,
    },
]

# ============================================================
# Shops & products
# ============================================================

SHOPS = [
    {
        "name": "EcoEssentials",
        "description": "Reusable everyday essentials for a low-waste home.",
        "location": "Bengaluru",
        "category": "home",
        "rating": 4.7,
        "products": [
            {"name": "Bamboo Toothbrush Set", "category": "personal_care", "price_in_points": 50, "price": 199.0},
            {"name": "Stainless Steel Bottle", "category": "kitchen", "price_in_points": 150, "price": 599.0},
            {"name": "Beeswax Food Wraps", "category": "kitchen", "price_in_points": 120, "price": 449.0},
        ],
    },
    {
        "name": "Green Threads",
        "description": "Organic cotton and upcycled fashion.",
        "location": "Pune",
        "category": "fashion",
        "rating": 4.5,
        "products": [
            {"name": "Organic Cotton Tote", "category": "accessories", "price_in_points": 80, "price": 299.0},
            {"name": "Upcycled Denim Pouch", "category": "accessories", "price_in_points": 110, "price": 399.0},
        ],
    },
    {
        "name": "Seed & Soil",
        "description": "Native seeds, compost and gardening kits.",
        "location": "Mysuru",
        "category": "garden",
        "rating": 4.8,
        "products": [
            {"name": "Native Seed Pack", "category": "garden", "price_in_points": 40, "price": 149.0},
            {"name": "Home Compost Starter Kit", "category": "garden", "price_in_points": 300, "price": 1199.0},
        ],
    },
]


async def seed_database() -> None:
    settings = Settings()
    engine = create_async_engine(settings.async_database_url, echo=False, connect_args=settings.asyncpg_connect_args)
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        print("Seeding database...")

        print("\nCreating challenges...")
        await seed_challenges(session)

        print("\nCreating communities...")
        await seed_communities(session)

        print("\nCreating shops and products...")
        await seed_shops(session)

        await session.commit()
        print("\nDatabase seeded successfully!")

    await engine.dispose()


async def seed_challenges(session: AsyncSession) -> None:
    for c in CHALLENGES:
        result = await session.execute(select(Challenge).where(Challenge.title == c["title"]))
        if result.scalar_one_or_none():
            print(f"  skip  {c['title']} (exists)")
            continue
        session.add(Challenge(**c))
        print(f"  added {c['title']} ({c['points']} pts)")
    await session.flush()


async def seed_communities(session: AsyncSession) -> None:
    for c in COMMUNITIES:
        result = await session.execute(select(Community).where(Community.name == c["name"]))
        if result.scalar_one_or_none():
            print(f"  skip  {c['name']} (exists)")
            continue
        session.add(Community(**c, member_count=0))
        print(f"  added {c['name']} ({c['category'].label})")
    await session.flush()


async def seed_shops(session: AsyncSession) -> None:
    for s in SHOPS:
        shop_def = {k: v for k, v in s.items() if k != "products"}

        result = await session.execute(select(Shop).where(Shop.name == shop_def["name"]))
        shop = result.scalar_one_or_none()
        if shop:
            print(f"  skip  {shop.name} (exists)")
        else:
            # Seeded shops have no owner until claimed
            shop = Shop(**shop_def, owner_id=None)
            session.add(shop)
            await session.flush()
            print(f"  added {shop.name}")

        for p in s["products"]:
            result = await session.execute(
                select(Product).where(Product.shop_id == shop.id, Product.name == p["name"])
            )
            if result.scalar_one_or_none():
                continue
            session.add(Product(shop_id=shop.id, description="", **p))
            print(f"    + {p['name']} ({p['price_in_points']} pts)")
        await session.flush()


if __name__ == "__main__":
    asyncio.run(seed_database())
