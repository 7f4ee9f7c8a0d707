import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from rankedin.schemas.common import CamelModel, Pagination


class RepositoryCreate(CamelModel):
    full_name: str = Field(min_length=1, max_length=140)


class RankedRepositoryResponse(CamelModel):
    id: uuid.UUID
    name: str
    full_name: str
    owner: str
    description: Optional[str] = None
    language: Optional[str] = None
    stars: int
    forks: int
    watchers: int
    open_issues: int
    size: int
    is_private: bool
    html_url: str
    created_at: datetime
    updated_at: datetime


class RepositoryListResponse(CamelModel):
    repositories: list[RankedRepositoryResponse]
    pagination: Pagination
