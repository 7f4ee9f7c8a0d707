from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI

from rankedin.config import settings
from rankedin.logging_config import configure_logging
from rankedin.metrics import metrics_endpoint
from rankedin.middleware.exception_handlers import register_exception_handlers
from rankedin.middleware.logging_middleware import RequestLoggingMiddleware
from rankedin.routers import (
    badges,
    contribute,
    newsletter,
    repositories,
    search,
    stats,
    topics,
    users,
)
from rankedin.services.github import GitHubClient


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Configure structured logging before anything else
    configure_logging()

    # Startup: shared Redis connection (rate limiter) and GitHub client
    app.state.redis = aioredis.from_url(
        settings.redis_url, encoding="utf-8", decode_responses=True
    )
    app.state.github = GitHubClient.from_settings()
    try:
        yield
    finally:
        await app.state.github.aclose()
        await app.state.redis.aclose()


app = FastAPI(title="RankedIn API", version="0.1.0", lifespan=lifespan)

# Register request logging middleware (runs on every request)
app.add_middleware(RequestLoggingMiddleware)

# Single {"error", "message"} envelope for every failure
register_exception_handlers(app)

app.include_router(contribute.router)
app.include_router(users.router)
app.include_router(repositories.router)
app.include_router(topics.router)
app.include_router(badges.router)
app.include_router(stats.router)
app.include_router(search.router)
app.include_router(newsletter.router)

# Prometheus metrics endpoint
app.get("/metrics")(metrics_endpoint)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
