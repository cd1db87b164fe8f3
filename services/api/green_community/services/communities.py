"""Community service: listing, creation and membership.

member_count is denormalized on the community row and adjusted in the same
transaction as the membership insert/delete.
"""

import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError

from green_community.models import Community, CommunityCategory, CommunityMembership
from green_community.schemas.communities import CategoryOption, CommunityList, CommunityOut, MembershipResult
from green_community.services.errors import ConflictError, NotFoundError
from green_community.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")


def list_categories() -> list[CategoryOption]:
    """All community categories with display labels."""
    return [CategoryOption(value=c.value, label=c.label) for c in CommunityCategory]


def parse_category_filter(category: str | None) -> CommunityCategory | None:
    """Map a query-string category to the enum; None/"all"/"" mean no filter.

    Raises:
        ValueError: For an unknown category.
    """
    if category is None:
        return None
    value = category.strip().lower()
    if value in ("", "all"):
        return None
    return CommunityCategory(value)


async def list_communities(
    *,
    category: CommunityCategory | None = None,
    viewer_id: str | None = None,
) -> CommunityList:
    """List communities ordered by member_count desc."""
    async with get_session() as session:
        query = select(Community).order_by(Community.member_count.desc(), Community.created_at.desc())
        if category is not None:
            query = query.where(Community.category == category)
        communities = (await session.execute(query)).scalars().all()

        joined: set[str] = set()
        if viewer_id and communities:
            result = await session.execute(
                select(CommunityMembership.community_id).where(
                    CommunityMembership.user_id == viewer_id,
                    CommunityMembership.community_id.in_([c.id for c in communities]),
                )
            )
            joined = set(result.scalars().all())

    items = []
    for community in communities:
        item = CommunityOut.model_validate(community)
        item.is_member = community.id in joined
        items.append(item)

    return CommunityList(
        communities=items,
        total_communities=len(items),
        total_members=sum(c.member_count or 0 for c in items),
    )


async def create_community(
    *,
    name: str,
    description: str,
    category: CommunityCategory,
    created_by: str,
) -> CommunityOut:
    async with get_session() as session:
        community = Community(
            name=name.strip(),
            description=description.strip(),
            category=category,
            created_by=created_by,
            member_count=0,
        )
        session.add(community)
        await session.flush()
        await session.refresh(community)

    logger.info(f"[communities] created id={community.id} category={category.value} by={created_by}")
    return CommunityOut.model_validate(community)


async def _get_community(session, community_id: str) -> Community:
    community = await session.get(Community, community_id)
    if community is None:
        raise NotFoundError(
            "Community not found",
            code="COMMUNITY_NOT_FOUND",
            detail={"community_id": community_id},
        )
    return community


async def join_community(*, community_id: str, user_id: str) -> MembershipResult:
    """Insert a membership row and bump member_count.

    Raises:
        NotFoundError: Unknown community.
        ConflictError: Already a member.
    """
    async with get_session() as session:
        community = await _get_community(session, community_id)

        existing = await session.execute(
            select(CommunityMembership.id).where(
                CommunityMembership.community_id == community_id,
                CommunityMembership.user_id == user_id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("Already a member of this community", code="ALREADY_MEMBER")

        session.add(CommunityMembership(community_id=community_id, user_id=user_id))
        try:
            await session.flush()
        except IntegrityError as e:
            raise ConflictError("Already a member of this community", code="ALREADY_MEMBER") from e

        await session.execute(
            update(Community)
            .where(Community.id == community_id)
            .values(member_count=func.coalesce(Community.member_count, 0) + 1)
        )
        await session.refresh(community)
        member_count = community.member_count

    logger.info(f"[communities] join community_id={community_id} user_id={user_id}")
    return MembershipResult(community_id=community_id, is_member=True, member_count=member_count)


async def leave_community(*, community_id: str, user_id: str) -> MembershipResult:
    """Delete the membership row and decrement member_count (floored at 0).

    Raises:
        NotFoundError: Unknown community or not a member.
    """
    async with get_session() as session:
        community = await _get_community(session, community_id)

        result = await session.execute(
            select(CommunityMembership).where(
                CommunityMembership.community_id == community_id,
                CommunityMembership.user_id == user_id,
            )
        )
        membership = result.scalar_one_or_none()
        if membership is None:
            raise NotFoundError("Not a member of this community", code="NOT_A_MEMBER")

        await session.delete(membership)
        await session.execute(
            update(Community)
            .where(Community.id == community_id)
            .values(member_count=func.greatest(func.coalesce(Community.member_count, 0) - 1, 0))
        )
        await session.flush()
        await session.refresh(community)
        member_count = community.member_count

    logger.info(f"[communities] leave community_id={community_id} user_id={user_id}")
    return MembershipResult(community_id=community_id, is_member=False, member_count=member_count)
