"""Ranked users.

GET  /api/users -- paginated leaderboard
POST /api/users -- contribute a user (same pipeline as /api/contribute)
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Query

from rankedin.config import settings
from rankedin.dependencies import DbSession, GitHub
from rankedin.middleware.rate_limiter import WriteRateLimit
from rankedin.models import EntityKind, RankedUser
from rankedin.routers.contribute import ERROR_RESPONSES
from rankedin.schemas.common import Pagination
from rankedin.schemas.contribution import ContributionResponse
from rankedin.schemas.user import RankedUserResponse, UserCreate, UserListResponse
from rankedin.services.contribution import contribute
from rankedin.services.listing import (
    USER_SEARCH_COLUMNS,
    USER_SORT_FIELDS,
    SortOrder,
    list_entities,
)

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/users", response_model=UserListResponse)
async def list_users(
    db: DbSession,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=settings.max_page_limit)] = settings.default_page_limit,
    search: Optional[str] = None,
    sort_by: Annotated[str, Query(alias="sortBy")] = "totalStars",
    order: SortOrder = SortOrder.desc,
) -> UserListResponse:
    users, total = await list_entities(
        db,
        RankedUser,
        sort_fields=USER_SORT_FIELDS,
        search_columns=USER_SEARCH_COLUMNS,
        page=page,
        limit=limit,
        search=search,
        sort_by=sort_by,
        order=order,
    )
    return UserListResponse(
        users=[RankedUserResponse.model_validate(user) for user in users],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("/users", response_model=ContributionResponse, responses=ERROR_RESPONSES)
async def add_user(
    body: UserCreate,
    db: DbSession,
    github: GitHub,
    _rate: WriteRateLimit,
) -> ContributionResponse:
    result = await contribute(db, github, EntityKind.user, body.username)
    return ContributionResponse.from_result(result)
