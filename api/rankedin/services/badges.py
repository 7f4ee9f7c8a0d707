"""User rank badges, as JSON stats or an SVG image.

The SVG is rendered from templates/badge.svg.j2 with Jinja2 autoescaping, so
user-controlled text never reaches the markup unescaped (<, >, &, ' and "
become entities).
"""

import enum
import math
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rankedin.exceptions import BadRequestError, NotFoundError
from rankedin.models import GLOBAL_STATS_ID, GlobalStats, RankedUser
from rankedin.services.identifiers import normalize_username
from rankedin.services.ranking import rank_user

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(enabled_extensions=("svg", "j2"), default=True),
    keep_trailing_newline=True,
)


class BadgeStyle(str, enum.Enum):
    default = "default"
    flat = "flat"
    plastic = "plastic"


class BadgeFormat(str, enum.Enum):
    json = "json"
    svg = "svg"


PALETTES: dict[BadgeStyle, dict] = {
    # Modern dark theme
    BadgeStyle.default: {
        "gradient_start": "#1e293b",
        "gradient_end": "#334155",
        "accent": "#3b82f6",
        "username_fill": "#f1f5f9",
        "stars_fill": "#64748b",
        "shine": False,
    },
    BadgeStyle.flat: {
        "gradient_start": "#555",
        "gradient_end": "#333",
        "accent": "#4c1",
        "username_fill": "white",
        "stars_fill": "#ccc",
        "shine": False,
    },
    BadgeStyle.plastic: {
        "gradient_start": "#dfb317",
        "gradient_end": "#f59e0b",
        "accent": "#4c1",
        "username_fill": "#000",
        "stars_fill": "#000",
        "shine": True,
    },
}


@dataclass
class BadgeStats:
    username: str
    name: Optional[str]
    rank: int
    total_users: int
    percentile: int
    total_stars: int
    followers: int
    public_repos: int
    location: Optional[str]
    company: Optional[str]
    last_updated: datetime

    def as_dict(self) -> dict:
        return asdict(self)


def compute_percentile(rank: int, total: int) -> int:
    """Share of tracked users at or below this rank, as a whole percent.

    Rounds half up, so rank 1 of 1 is 100 and the last of 200 is 1.
    """
    if total <= 0:
        return 0
    return math.floor((total - rank + 1) / total * 100 + 0.5)


def wants_svg(format: Optional[BadgeFormat], accept: Optional[str]) -> bool:
    """An explicit format wins; otherwise SVG only when the Accept header asks for it."""
    if format is not None:
        return format == BadgeFormat.svg
    return bool(accept) and "image/svg+xml" in accept


async def get_badge_stats(db: AsyncSession, username: Optional[str]) -> BadgeStats:
    """Look up a tracked user and compute their current leaderboard position.

    Ranked on total_stars alone; followers are not consulted on this path.

    Raises:
        BadRequestError: username missing or blank.
        NotFoundError: the user is not tracked.
    """
    if not username or not username.strip():
        raise BadRequestError(
            "Username parameter is required. Use ?username=yourusername or ?name=yourusername"
        )

    normalized = normalize_username(username)
    result = await db.execute(select(RankedUser).where(RankedUser.username == normalized))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError(
            f"User '{username.strip()}' not found in our rankings. "
            "Please visit our website to add this user."
        )

    rank = await rank_user(db, user.total_stars)
    total_result = await db.execute(select(func.count()).select_from(RankedUser))
    total_users = total_result.scalar_one()

    return BadgeStats(
        username=user.username,
        name=user.name,
        rank=rank,
        total_users=total_users,
        percentile=compute_percentile(rank, total_users),
        total_stars=user.total_stars,
        followers=user.followers,
        public_repos=user.public_repos,
        location=user.location,
        company=user.company,
        last_updated=user.updated_at,
    )


def render_badge_svg(stats: BadgeStats, style: BadgeStyle = BadgeStyle.default) -> str:
    template = _env.get_template("badge.svg.j2")
    return template.render(
        palette=PALETTES[BadgeStyle(style)],
        username=stats.username,
        rank=f"{stats.rank:,}",
        stars=f"{stats.total_stars:,}",
        percentile=stats.percentile,
    )


async def record_badge_request(db: AsyncSession) -> None:
    """Bump the global badge counter by one and commit.

    A single column-expression UPDATE, so concurrent requests never lose an
    increment. The singleton row is created on first use; if another request
    creates it first, the UPDATE is retried.
    """
    stmt = (
        update(GlobalStats)
        .where(GlobalStats.id == GLOBAL_STATS_ID)
        .values(total_badge_requests=GlobalStats.total_badge_requests + 1)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    if result.rowcount == 0:
        db.add(GlobalStats(id=GLOBAL_STATS_ID, total_badge_requests=1))
        try:
            await db.commit()
            return
        except IntegrityError:
            await db.rollback()
            await db.execute(stmt)
    await db.commit()
