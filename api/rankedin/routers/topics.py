"""Ranked topics.

GET  /api/topics -- paginated leaderboard
POST /api/topics -- contribute a topic (same pipeline as /api/contribute)
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Query

from rankedin.config import settings
from rankedin.dependencies import DbSession, GitHub
from rankedin.middleware.rate_limiter import WriteRateLimit
from rankedin.models import EntityKind, RankedTopic
from rankedin.routers.contribute import ERROR_RESPONSES
from rankedin.schemas.common import Pagination
from rankedin.schemas.contribution import ContributionResponse
from rankedin.schemas.topic import RankedTopicResponse, TopicCreate, TopicListResponse
from rankedin.services.contribution import contribute
from rankedin.services.listing import (
    TOPIC_SEARCH_COLUMNS,
    TOPIC_SORT_FIELDS,
    SortOrder,
    list_entities,
)

router = APIRouter(prefix="/api", tags=["topics"])


@router.get("/topics", response_model=TopicListResponse)
async def list_topics(
    db: DbSession,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=settings.max_page_limit)] = settings.default_page_limit,
    search: Optional[str] = None,
    sort_by: Annotated[str, Query(alias="sortBy")] = "score",
    order: SortOrder = SortOrder.desc,
) -> TopicListResponse:
    topics, total = await list_entities(
        db,
        RankedTopic,
        sort_fields=TOPIC_SORT_FIELDS,
        search_columns=TOPIC_SEARCH_COLUMNS,
        page=page,
        limit=limit,
        search=search,
        sort_by=sort_by,
        order=order,
    )
    return TopicListResponse(
        topics=[RankedTopicResponse.model_validate(t) for t in topics],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("/topics", response_model=ContributionResponse, responses=ERROR_RESPONSES)
async def add_topic(
    body: TopicCreate,
    db: DbSession,
    github: GitHub,
    _rate: WriteRateLimit,
) -> ContributionResponse:
    result = await contribute(db, github, EntityKind.topic, body.name)
    return ContributionResponse.from_result(result)
