from datetime import datetime
from typing import Optional

from rankedin.schemas.common import CamelModel


class BadgeStatsResponse(CamelModel):
    username: str
    name: Optional[str] = None
    rank: int
    total_users: int
    percentile: int
    total_stars: int
    followers: int
    public_repos: int
    location: Optional[str] = None
    company: Optional[str] = None
    last_updated: datetime
