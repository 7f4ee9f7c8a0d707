"""GitHub search passthrough.

GET /api/search?q=...&type=users|repos|topics|all -- live GitHub search results

Each section is fetched independently; a failing section degrades to an
empty result rather than failing the whole request.
"""

import enum
from typing import Annotated, Optional

import structlog
from fastapi import APIRouter, Query

from rankedin.dependencies import GitHub
from rankedin.exceptions import BadRequestError
from rankedin.middleware.rate_limiter import ReadRateLimit
from rankedin.services.github import GitHubError

log = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["search"])

EMPTY_RESULT = {"items": [], "total_count": 0}


class SearchType(str, enum.Enum):
    users = "users"
    repos = "repos"
    topics = "topics"
    all = "all"


@router.get("/search")
async def search_github(
    github: GitHub,
    _rate: ReadRateLimit,
    q: Optional[str] = None,
    type: SearchType = SearchType.all,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 30,
) -> dict:
    if not q or not q.strip():
        raise BadRequestError("Query parameter is required")
    query = q.strip()

    sections = {
        "users": (SearchType.users, lambda: github.search_users(query, page, per_page)),
        "repositories": (SearchType.repos, lambda: github.search_repositories(query, page, per_page)),
        "topics": (SearchType.topics, lambda: github.search_topics(query)),
    }

    results: dict = {}
    for key, (section_type, fetch) in sections.items():
        if type not in (section_type, SearchType.all):
            continue
        try:
            results[key] = await fetch()
        except GitHubError as e:
            log.warning("search_section_failed", section=key, error=str(e))
            results[key] = dict(EMPTY_RESULT)
    return results
