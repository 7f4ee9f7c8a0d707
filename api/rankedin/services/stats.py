"""Site-wide aggregate counts for the landing page."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rankedin.models import (
    GLOBAL_STATS_ID,
    GlobalStats,
    NewsletterSubscriber,
    RankedRepository,
    RankedTopic,
    RankedUser,
)

STAT_DESCRIPTIONS = {
    "users_ranked": "GitHub developers in our rankings",
    "repositories": "Open source projects tracked",
    "total_stars": "Combined stars across all repos",
    "active_topics": "Trending technologies tracked",
    "badge_requests": "Total badge requests served",
    "newsletter_subscribers": "Active newsletter subscribers",
}


def humanize_count(value: int) -> str:
    """1234 -> "1.2K", 2500000 -> "2.5M", small values unchanged."""
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return str(value)


async def collect_raw_stats(db: AsyncSession) -> dict[str, int]:
    users = (await db.execute(select(func.count()).select_from(RankedUser))).scalar_one()
    repositories = (
        await db.execute(select(func.count()).select_from(RankedRepository))
    ).scalar_one()
    total_stars = (
        await db.execute(select(func.coalesce(func.sum(RankedRepository.stars), 0)))
    ).scalar_one()
    topics = (await db.execute(select(func.count()).select_from(RankedTopic))).scalar_one()
    badge_requests = (
        await db.execute(
            select(GlobalStats.total_badge_requests).where(GlobalStats.id == GLOBAL_STATS_ID)
        )
    ).scalar_one_or_none()
    subscribers = (
        await db.execute(
            select(func.count())
            .select_from(NewsletterSubscriber)
            .where(NewsletterSubscriber.is_active.is_(True))
        )
    ).scalar_one()

    return {
        "users_ranked": users,
        "repositories": repositories,
        "total_stars": int(total_stars or 0),
        "active_topics": topics,
        "badge_requests": badge_requests or 0,
        "newsletter_subscribers": subscribers,
    }


async def collect_stats(db: AsyncSession) -> dict[str, dict]:
    """Each stat as {"value": humanized, "raw": int, "description": str}."""
    raw = await collect_raw_stats(db)
    return {
        key: {
            "value": humanize_count(count),
            "raw": count,
            "description": STAT_DESCRIPTIONS[key],
        }
        for key, count in raw.items()
    }
