"""Schemas for the contribution pipeline (POST /api/contribute and the per-kind shortcuts)."""

from typing import Literal, Union

from pydantic import Field

from rankedin.models import EntityKind, RankedRepository, RankedTopic, RankedUser
from rankedin.schemas.common import CamelModel
from rankedin.schemas.repository import RankedRepositoryResponse
from rankedin.schemas.topic import RankedTopicResponse
from rankedin.schemas.user import RankedUserResponse


class ContributionRequest(CamelModel):
    type: EntityKind
    identifier: str = Field(min_length=1, max_length=140)


class UserRankInfo(CamelModel):
    type: Literal["user"] = "user"
    position: int
    total_stars: int
    followers: int


class RepositoryRankInfo(CamelModel):
    type: Literal["repository"] = "repository"
    position: int
    stars: int
    forks: int


class TopicRankInfo(CamelModel):
    type: Literal["topic"] = "topic"
    position: int
    score: int
    repositories: int
    degraded: bool = False


class ContributionResponse(CamelModel):
    message: str
    data: Union[RankedUserResponse, RankedRepositoryResponse, RankedTopicResponse]
    rank: int
    rank_info: Union[UserRankInfo, RepositoryRankInfo, TopicRankInfo] = Field(
        discriminator="type"
    )

    @classmethod
    def from_result(cls, result) -> "ContributionResponse":
        """Build the response from a services.contribution.ContributionResult."""
        entity = result.entity
        if isinstance(entity, RankedUser):
            data = RankedUserResponse.model_validate(entity)
            rank_info = UserRankInfo(
                position=result.rank,
                total_stars=entity.total_stars,
                followers=entity.followers,
            )
        elif isinstance(entity, RankedRepository):
            data = RankedRepositoryResponse.model_validate(entity)
            rank_info = RepositoryRankInfo(
                position=result.rank, stars=entity.stars, forks=entity.forks
            )
        elif isinstance(entity, RankedTopic):
            data = RankedTopicResponse.model_validate(entity)
            rank_info = TopicRankInfo(
                position=result.rank,
                score=entity.score,
                repositories=entity.repositories,
                degraded=result.degraded,
            )
        else:
            raise TypeError(f"Unsupported entity type: {type(entity).__name__}")
        return cls(message=result.message, data=data, rank=result.rank, rank_info=rank_info)
