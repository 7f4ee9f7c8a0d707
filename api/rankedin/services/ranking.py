"""Leaderboard position queries.

rank = 1 + number of rows strictly better than the given metric value.
Users additionally break star ties on followers when a tie-break value is
supplied. Rows with identical metric (and tie-break) share a rank; no
secondary key such as insertion order is consulted.

All functions are read-only and leave transaction control to the caller.
"""

from typing import Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from rankedin.models import EntityKind, RankedRepository, RankedTopic, RankedUser


async def _count_where(db: AsyncSession, model, condition) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(condition))
    return result.scalar_one()


async def rank_user(
    db: AsyncSession, total_stars: int, followers: Optional[int] = None
) -> int:
    condition = RankedUser.total_stars > total_stars
    if followers is not None:
        condition = or_(
            condition,
            and_(RankedUser.total_stars == total_stars, RankedUser.followers > followers),
        )
    return await _count_where(db, RankedUser, condition) + 1


async def rank_repository(db: AsyncSession, stars: int) -> int:
    return await _count_where(db, RankedRepository, RankedRepository.stars > stars) + 1


async def rank_topic(db: AsyncSession, score: int) -> int:
    return await _count_where(db, RankedTopic, RankedTopic.score > score) + 1


async def compute_rank(
    db: AsyncSession,
    kind: EntityKind,
    value: int,
    tie_break: Optional[int] = None,
) -> int:
    """Rank a metric value among all persisted entities of one kind.

    tie_break only applies to users (followers); it is ignored otherwise.
    """
    if kind == EntityKind.user:
        return await rank_user(db, value, tie_break)
    if kind == EntityKind.repo:
        return await rank_repository(db, value)
    return await rank_topic(db, value)


async def count_entities(db: AsyncSession, kind: EntityKind) -> int:
    model = {
        EntityKind.user: RankedUser,
        EntityKind.repo: RankedRepository,
        EntityKind.topic: RankedTopic,
    }[kind]
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar_one()
