"""RankedIn Pydantic schemas package.

Re-exports all request and response schemas for convenient importing:

    from rankedin.schemas import ContributionRequest, ContributionResponse, ...

Bodies use snake_case attributes in Python and camelCase keys on the wire.
"""

from rankedin.schemas.badge import BadgeStatsResponse
from rankedin.schemas.common import CamelModel, ErrorResponse, Pagination
from rankedin.schemas.contribution import (
    ContributionRequest,
    ContributionResponse,
    RepositoryRankInfo,
    TopicRankInfo,
    UserRankInfo,
)
from rankedin.schemas.newsletter import (
    NewsletterSubscribe,
    NewsletterSubscribeResponse,
    SubscriberCountResponse,
    SubscriberResponse,
)
from rankedin.schemas.repository import (
    RankedRepositoryResponse,
    RepositoryCreate,
    RepositoryListResponse,
)
from rankedin.schemas.stats import StatsResponse, StatValue
from rankedin.schemas.topic import RankedTopicResponse, TopicCreate, TopicListResponse
from rankedin.schemas.user import RankedUserResponse, UserCreate, UserListResponse

__all__ = [
    # Contribution
    "ContributionRequest",
    "ContributionResponse",
    "UserRankInfo",
    "RepositoryRankInfo",
    "TopicRankInfo",
    # Users
    "UserCreate",
    "RankedUserResponse",
    "UserListResponse",
    # Repositories
    "RepositoryCreate",
    "RankedRepositoryResponse",
    "RepositoryListResponse",
    # Topics
    "TopicCreate",
    "RankedTopicResponse",
    "TopicListResponse",
    # Badges and stats
    "BadgeStatsResponse",
    "StatValue",
    "StatsResponse",
    # Newsletter
    "NewsletterSubscribe",
    "NewsletterSubscribeResponse",
    "SubscriberResponse",
    "SubscriberCountResponse",
    # Common
    "CamelModel",
    "ErrorResponse",
    "Pagination",
]
