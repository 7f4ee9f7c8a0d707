"""Shared fixtures: a throwaway SQLite database, fake GitHub and Redis, and an ASGI client."""

from datetime import datetime, timezone
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from rankedin.database import get_db
from rankedin.dependencies import get_github, get_redis
from rankedin.main import app
from rankedin.models import Base, RankedRepository, RankedTopic, RankedUser
from rankedin.services.github import GitHubAPIError, GitHubNotFoundError


class FakeGitHub:
    """In-memory stand-in for GitHubClient with the same coroutine surface."""

    def __init__(self) -> None:
        self.users: dict[str, dict] = {}
        self.user_stars: dict[str, int] = {}
        self.repos: dict[str, dict] = {}
        self.topics: dict[str, Optional[dict]] = {}
        self.failing: set[str] = set()  # method names that raise GitHubAPIError
        self.calls: list[tuple] = []
        self.on_user_lookup = None  # optional async hook(username)

    def add_user(self, login: str, followers: int = 0, total_stars: int = 0, **extra) -> dict:
        details = {
            "login": login,
            "name": extra.pop("name", login.title()),
            "avatar_url": f"https://avatars.example/{login}",
            "bio": None,
            "location": None,
            "company": None,
            "blog": None,
            "followers": followers,
            "following": extra.pop("following", 0),
            "public_repos": extra.pop("public_repos", 0),
        }
        details.update(extra)
        self.users[login.lower()] = details
        self.user_stars[login.lower()] = total_stars
        return details

    def add_repo(self, full_name: str, stars: int = 0, forks: int = 0, **extra) -> dict:
        owner, name = full_name.split("/")
        details = {
            "name": name,
            "full_name": full_name,
            "owner": {"login": owner},
            "description": extra.pop("description", None),
            "language": extra.pop("language", None),
            "stargazers_count": stars,
            "forks_count": forks,
            "watchers_count": stars,
            "open_issues_count": 0,
            "size": 100,
            "private": False,
            "html_url": f"https://github.com/{full_name}",
        }
        details.update(extra)
        self.repos[full_name.lower()] = details
        return details

    def _check(self, method: str) -> None:
        if method in self.failing:
            raise GitHubAPIError(f"{method} unavailable", status_code=503)

    async def get_user_details(self, username: str) -> dict:
        self.calls.append(("get_user_details", username))
        self._check("get_user_details")
        if self.on_user_lookup is not None:
            await self.on_user_lookup(username)
        if username.lower() not in self.users:
            raise GitHubNotFoundError(f"/users/{username}", status_code=404)
        return self.users[username.lower()]

    async def get_user_total_stars(self, username: str) -> int:
        self.calls.append(("get_user_total_stars", username))
        return self.user_stars.get(username.lower(), 0)

    async def get_repository_details(self, owner: str, repo: str) -> dict:
        self.calls.append(("get_repository_details", owner, repo))
        self._check("get_repository_details")
        key = f"{owner}/{repo}".lower()
        if key not in self.repos:
            raise GitHubNotFoundError(f"/repos/{owner}/{repo}", status_code=404)
        return self.repos[key]

    async def get_topic_details(self, name: str) -> Optional[dict]:
        self.calls.append(("get_topic_details", name))
        self._check("get_topic_details")
        return self.topics.get(name)

    async def search_users(self, query: str, page: int = 1, per_page: int = 30) -> dict:
        self.calls.append(("search_users", query))
        self._check("search_users")
        return {"items": [{"login": query}], "total_count": 1}

    async def search_repositories(self, query: str, page: int = 1, per_page: int = 30) -> dict:
        self.calls.append(("search_repositories", query))
        self._check("search_repositories")
        return {"items": [{"full_name": f"{query}/{query}"}], "total_count": 1}

    async def search_topics(self, query: str) -> dict:
        self.calls.append(("search_topics", query))
        self._check("search_topics")
        return {"items": [{"name": query}], "total_count": 1}


class FakeRedis:
    """Answers the rate limiter's token-bucket EVAL with a fixed verdict."""

    def __init__(self) -> None:
        self.allowed = True
        self.keys: list[str] = []

    async def eval(self, script, numkeys, key, *args):
        self.keys.append(key)
        return 1 if self.allowed else 0


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'rankedin.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def redis() -> FakeRedis:
    return FakeRedis()


@pytest_asyncio.fixture
async def client(session_factory, github, redis):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_github] = lambda: github
    app.dependency_overrides[get_redis] = lambda: redis
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def add_user(db, username: str, total_stars: int = 0, followers: int = 0, **extra) -> RankedUser:
    user = RankedUser(
        username=username,
        total_stars=total_stars,
        followers=followers,
        following=extra.pop("following", 0),
        public_repos=extra.pop("public_repos", 0),
        **extra,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def add_repository(db, full_name: str, stars: int = 0, **extra) -> RankedRepository:
    owner, name = full_name.split("/")
    repository = RankedRepository(
        name=name,
        full_name=full_name,
        owner=owner,
        stars=stars,
        forks=extra.pop("forks", 0),
        watchers=extra.pop("watchers", 0),
        open_issues=extra.pop("open_issues", 0),
        size=extra.pop("size", 0),
        html_url=extra.pop("html_url", f"https://github.com/{full_name}"),
        **extra,
    )
    db.add(repository)
    await db.commit()
    await db.refresh(repository)
    return repository


async def add_topic(db, name: str, score: int = 0, repositories: int = 0, **extra) -> RankedTopic:
    topic = RankedTopic(name=name, score=score, repositories=repositories, **extra)
    db.add(topic)
    await db.commit()
    await db.refresh(topic)
    return topic


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)
