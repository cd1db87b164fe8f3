"""Home page endpoints."""

from fastapi import APIRouter

from green_community.schemas import HomeStats
from green_community.services.home import get_home_stats

router = APIRouter()


@router.get("/stats", response_model=HomeStats)
async def home_stats() -> HomeStats:
    """Counts of communities, stories, blogs and challenges."""
    return await get_home_stats()
