"""Ranked repositories.

GET  /api/repositories -- paginated leaderboard
POST /api/repositories -- contribute a repository (same pipeline as /api/contribute)
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Query

from rankedin.config import settings
from rankedin.dependencies import DbSession, GitHub
from rankedin.middleware.rate_limiter import WriteRateLimit
from rankedin.models import EntityKind, RankedRepository
from rankedin.routers.contribute import ERROR_RESPONSES
from rankedin.schemas.common import Pagination
from rankedin.schemas.contribution import ContributionResponse
from rankedin.schemas.repository import (
    RankedRepositoryResponse,
    RepositoryCreate,
    RepositoryListResponse,
)
from rankedin.services.contribution import contribute
from rankedin.services.listing import (
    REPOSITORY_SEARCH_COLUMNS,
    REPOSITORY_SORT_FIELDS,
    SortOrder,
    list_entities,
)

router = APIRouter(prefix="/api", tags=["repositories"])


@router.get("/repositories", response_model=RepositoryListResponse)
async def list_repositories(
    db: DbSession,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=settings.max_page_limit)] = settings.default_page_limit,
    search: Optional[str] = None,
    sort_by: Annotated[str, Query(alias="sortBy")] = "stars",
    order: SortOrder = SortOrder.desc,
) -> RepositoryListResponse:
    repositories, total = await list_entities(
        db,
        RankedRepository,
        sort_fields=REPOSITORY_SORT_FIELDS,
        search_columns=REPOSITORY_SEARCH_COLUMNS,
        page=page,
        limit=limit,
        search=search,
        sort_by=sort_by,
        order=order,
    )
    return RepositoryListResponse(
        repositories=[RankedRepositoryResponse.model_validate(r) for r in repositories],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("/repositories", response_model=ContributionResponse, responses=ERROR_RESPONSES)
async def add_repository(
    body: RepositoryCreate,
    db: DbSession,
    github: GitHub,
    _rate: WriteRateLimit,
) -> ContributionResponse:
    result = await contribute(db, github, EntityKind.repo, body.full_name)
    return ContributionResponse.from_result(result)
