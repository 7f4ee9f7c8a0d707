"""Paginated, searchable leaderboard listings."""

import enum
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from rankedin.exceptions import BadRequestError
from rankedin.models import RankedRepository, RankedTopic, RankedUser


class SortOrder(str, enum.Enum):
    asc = "asc"
    desc = "desc"


# Sortable fields per table, keyed by their camelCase wire name
USER_SORT_FIELDS = {
    "totalStars": RankedUser.total_stars,
    "followers": RankedUser.followers,
    "following": RankedUser.following,
    "publicRepos": RankedUser.public_repos,
    "username": RankedUser.username,
    "name": RankedUser.name,
    "createdAt": RankedUser.created_at,
    "updatedAt": RankedUser.updated_at,
}

REPOSITORY_SORT_FIELDS = {
    "stars": RankedRepository.stars,
    "forks": RankedRepository.forks,
    "watchers": RankedRepository.watchers,
    "openIssues": RankedRepository.open_issues,
    "size": RankedRepository.size,
    "name": RankedRepository.name,
    "fullName": RankedRepository.full_name,
    "language": RankedRepository.language,
    "createdAt": RankedRepository.created_at,
    "updatedAt": RankedRepository.updated_at,
}

TOPIC_SORT_FIELDS = {
    "score": RankedTopic.score,
    "repositories": RankedTopic.repositories,
    "name": RankedTopic.name,
    "displayName": RankedTopic.display_name,
    "createdAt": RankedTopic.created_at,
    "updatedAt": RankedTopic.updated_at,
}

USER_SEARCH_COLUMNS = (RankedUser.username, RankedUser.name)
REPOSITORY_SEARCH_COLUMNS = (
    RankedRepository.name,
    RankedRepository.full_name,
    RankedRepository.owner,
    RankedRepository.description,
)
TOPIC_SEARCH_COLUMNS = (RankedTopic.name, RankedTopic.display_name, RankedTopic.description)

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Make %, _ and the escape character match literally in a LIKE pattern."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


async def list_entities(
    db: AsyncSession,
    model,
    *,
    sort_fields: dict,
    search_columns: tuple,
    page: int,
    limit: int,
    search: Optional[str],
    sort_by: str,
    order: SortOrder,
) -> tuple[list, int]:
    """One page of rows plus the total matching count.

    search is a case-insensitive substring match over search_columns.
    Rows are ordered by sort_by, then id, so pages never overlap.
    """
    column = sort_fields.get(sort_by)
    if column is None:
        allowed = ", ".join(sorted(sort_fields))
        raise BadRequestError(f"Invalid sortBy '{sort_by}'. Allowed: {allowed}")

    conditions = []
    if search and search.strip():
        pattern = f"%{escape_like(search.strip())}%"
        conditions.append(
            or_(*(col.ilike(pattern, escape=LIKE_ESCAPE) for col in search_columns))
        )

    ordering = column.asc() if order == SortOrder.asc else column.desc()
    rows_result = await db.execute(
        select(model)
        .where(*conditions)
        .order_by(ordering, model.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    total_result = await db.execute(select(func.count()).select_from(model).where(*conditions))
    return list(rows_result.scalars().all()), total_result.scalar_one()
