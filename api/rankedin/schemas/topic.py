import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from rankedin.schemas.common import CamelModel, Pagination


class TopicCreate(CamelModel):
    name: str = Field(min_length=1, max_length=50)


class RankedTopicResponse(CamelModel):
    id: uuid.UUID
    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    featured: bool
    curated: bool
    score: int
    repositories: int
    created_at: datetime
    updated_at: datetime


class TopicListResponse(CamelModel):
    topics: list[RankedTopicResponse]
    pagination: Pagination
