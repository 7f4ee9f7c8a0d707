import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from rankedin.schemas.common import CamelModel, Pagination


class UserCreate(CamelModel):
    username: str = Field(min_length=1, max_length=39)


class RankedUserResponse(CamelModel):
    id: uuid.UUID
    username: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    company: Optional[str] = None
    blog: Optional[str] = None
    followers: int
    following: int
    public_repos: int
    total_stars: int
    created_at: datetime
    updated_at: datetime


class UserListResponse(CamelModel):
    users: list[RankedUserResponse]
    pagination: Pagination
