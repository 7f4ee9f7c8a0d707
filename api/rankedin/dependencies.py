from typing import Annotated

import redis.asyncio as aioredis
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rankedin.database import get_db
from rankedin.services.github import GitHubClient

DbSession = Annotated[AsyncSession, Depends(get_db)]


async def get_redis(request: Request) -> aioredis.Redis:
    """Inject the Redis client from app.state (set during lifespan startup)."""
    return request.app.state.redis


async def get_github(request: Request) -> GitHubClient:
    """Inject the shared GitHub client from app.state (set during lifespan startup)."""
    return request.app.state.github


RedisClient = Annotated[aioredis.Redis, Depends(get_redis)]
GitHub = Annotated[GitHubClient, Depends(get_github)]
