from .base import Base
from .global_stats import GLOBAL_STATS_ID, GlobalStats
from .kind import EntityKind
from .newsletter import NewsletterSubscriber
from .repository import RankedRepository
from .topic import RankedTopic
from .user import RankedUser

__all__ = [
    "Base",
    "EntityKind",
    "GLOBAL_STATS_ID",
    "GlobalStats",
    "NewsletterSubscriber",
    "RankedRepository",
    "RankedTopic",
    "RankedUser",
]
