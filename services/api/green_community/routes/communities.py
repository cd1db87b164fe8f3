"""Community endpoints.

Routers are thin: call services for business logic.
"""

from fastapi import APIRouter, Query, status

from green_community.routes.deps import AuthUser, OptionalUser
from green_community.schemas.communities import CategoryOption, CommunityCreate, CommunityList, CommunityOut, MembershipResult
from green_community.services import communities as community_service
from green_community.services.errors import InvalidInputError

router = APIRouter()


@router.get("", response_model=CommunityList)
async def list_communities(
    user: OptionalUser,
    category: str | None = Query(
        default=None,
        description="Category filter; 'all' disables filtering",
        examples=["all", "zero_waste", "climate_action"],
    ),
) -> CommunityList:
    try:
        parsed = community_service.parse_category_filter(category)
    except ValueError as e:
        raise InvalidInputError(
            "Unknown community category",
            code="INVALID_CATEGORY",
            detail={"category": category},
        ) from e
    return await community_service.list_communities(
        category=parsed,
        viewer_id=user.user_id if user else None,
    )


@router.get("/categories", response_model=list[CategoryOption])
async def list_categories() -> list[CategoryOption]:
    return community_service.list_categories()


@router.post("", response_model=CommunityOut, status_code=status.HTTP_201_CREATED)
async def create_community(body: CommunityCreate, user: AuthUser) -> CommunityOut:
    return await community_service.create_community(
        name=body.name,
        description=body.description,
        category=body.category,
        created_by=user.user_id,
    )


@router.post("/{community_id}/join", response_model=MembershipResult)
async def join_community(community_id: str, user: AuthUser) -> MembershipResult:
    return await community_service.join_community(community_id=community_id, user_id=user.user_id)


@router.delete("/{community_id}/join", response_model=MembershipResult)
async def leave_community(community_id: str, user: AuthUser) -> MembershipResult:
    return await community_service.leave_community(community_id=community_id, user_id=user.user_id)
