"""Contribution pipeline: add a previously untracked GitHub entity to its ranking.

For every kind the steps are the same:
1. Duplicate check on the identity column -> ConflictError, GitHub untouched
2. Metric fetch from GitHub
3. Insert and commit
4. Rank the new row against its table

Users and repositories fail closed: GitHub 404 -> NotFoundError, any other
GitHub failure -> InternalError. Topics fail open: when the lookup raises or
finds no tagged repositories the row is still stored with score=0 and
repositories=0, and the result is flagged degraded.

The unique index on each identity column is the real guarantee against
duplicates. A concurrent insert that slips past step 1 fails on commit with
IntegrityError, which is rolled back and reported as ConflictError.
"""

from dataclasses import dataclass
from typing import Union

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rankedin.exceptions import ConflictError, InternalError, NotFoundError, RankingError
from rankedin.metrics import contributions
from rankedin.models import EntityKind, RankedRepository, RankedTopic, RankedUser
from rankedin.services.github import GitHubClient, GitHubError, GitHubNotFoundError
from rankedin.services.identifiers import parse_repository_full_name, parse_topic, parse_username
from rankedin.services.ranking import rank_repository, rank_topic, rank_user

log = structlog.get_logger(__name__)

RankedEntity = Union[RankedUser, RankedRepository, RankedTopic]


@dataclass
class ContributionResult:
    kind: EntityKind
    entity: RankedEntity
    rank: int
    message: str
    degraded: bool = False


async def _persist(db: AsyncSession, entity: RankedEntity, conflict_message: str) -> None:
    """Insert entity, mapping a uniqueness violation to ConflictError."""
    db.add(entity)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        log.info("contribution_conflict", stage="insert", message=conflict_message)
        raise ConflictError(conflict_message)
    # Load server-side timestamps without a lazy load in async context
    await db.refresh(entity)


async def contribute_user(
    db: AsyncSession, github: GitHubClient, identifier: str
) -> ContributionResult:
    username = parse_username(identifier)
    conflict_message = f"User {username} already exists in rankings"

    existing = await db.execute(select(RankedUser.id).where(RankedUser.username == username))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(conflict_message)

    try:
        details = await github.get_user_details(username)
    except GitHubNotFoundError:
        raise NotFoundError(f"User {username} not found on GitHub")
    except GitHubError as e:
        log.error("github_user_lookup_failed", username=username, error=str(e))
        raise InternalError(f"Failed to add user {username}")

    # Fail-soft: 0 when the repository walk breaks
    total_stars = await github.get_user_total_stars(username)
    followers = details.get("followers") or 0

    user = RankedUser(
        username=(details.get("login") or username).lower(),
        name=details.get("name"),
        avatar_url=details.get("avatar_url"),
        bio=details.get("bio"),
        location=details.get("location"),
        company=details.get("company"),
        blog=details.get("blog"),
        followers=followers,
        following=details.get("following") or 0,
        public_repos=details.get("public_repos") or 0,
        total_stars=total_stars,
    )
    await _persist(db, user, conflict_message)

    rank = await rank_user(db, total_stars, followers)
    return ContributionResult(
        kind=EntityKind.user,
        entity=user,
        rank=rank,
        message=f"User {username} successfully added to rankings",
    )


async def contribute_repository(
    db: AsyncSession, github: GitHubClient, identifier: str
) -> ContributionResult:
    owner, name = parse_repository_full_name(identifier)
    full_name = f"{owner}/{name}"
    conflict_message = f"Repository {full_name} already exists in rankings"

    existing = await db.execute(
        select(RankedRepository.id).where(
            func.lower(RankedRepository.full_name) == full_name.lower()
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(conflict_message)

    try:
        details = await github.get_repository_details(owner, name)
    except GitHubNotFoundError:
        raise NotFoundError(f"Repository {full_name} not found on GitHub")
    except GitHubError as e:
        log.error("github_repository_lookup_failed", full_name=full_name, error=str(e))
        raise InternalError(f"Failed to add repository {full_name}")

    stars = details.get("stargazers_count") or 0
    repository = RankedRepository(
        name=details.get("name") or name,
        full_name=details.get("full_name") or full_name,
        owner=(details.get("owner") or {}).get("login") or owner,
        description=details.get("description"),
        language=details.get("language"),
        stars=stars,
        forks=details.get("forks_count") or 0,
        watchers=details.get("watchers_count") or 0,
        open_issues=details.get("open_issues_count") or 0,
        size=details.get("size") or 0,
        is_private=bool(details.get("private")),
        html_url=details.get("html_url") or f"https://github.com/{full_name}",
    )
    await _persist(db, repository, conflict_message)

    rank = await rank_repository(db, stars)
    return ContributionResult(
        kind=EntityKind.repo,
        entity=repository,
        rank=rank,
        message=f"Repository {full_name} successfully added to rankings",
    )


async def contribute_topic(
    db: AsyncSession, github: GitHubClient, identifier: str
) -> ContributionResult:
    name = parse_topic(identifier)
    conflict_message = f"Topic {name} already exists in rankings"

    existing = await db.execute(select(RankedTopic.id).where(RankedTopic.name == name))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(conflict_message)

    try:
        details = await github.get_topic_details(name)
    except GitHubError as e:
        log.warning("topic_lookup_degraded", topic=name, error=str(e))
        details = None

    degraded = details is None
    if degraded:
        details = {
            "display_name": name[:1].upper() + name[1:],
            "description": f"Topic: {name}",
            "featured": False,
            "curated": False,
            "score": 0,
            "repositories": 0,
        }

    topic = RankedTopic(
        name=name,
        display_name=details.get("display_name"),
        description=details.get("description"),
        featured=bool(details.get("featured")),
        curated=bool(details.get("curated")),
        score=details.get("score") or 0,
        repositories=details.get("repositories") or 0,
    )
    await _persist(db, topic, conflict_message)

    rank = await rank_topic(db, topic.score)
    if degraded:
        message = f"Topic {name} added with default values"
    else:
        message = f"Topic {name} successfully added to rankings"
    return ContributionResult(
        kind=EntityKind.topic,
        entity=topic,
        rank=rank,
        message=message,
        degraded=degraded,
    )


_HANDLERS = {
    EntityKind.user: contribute_user,
    EntityKind.repo: contribute_repository,
    EntityKind.topic: contribute_topic,
}


async def contribute(
    db: AsyncSession,
    github: GitHubClient,
    kind: EntityKind,
    identifier: str,
) -> ContributionResult:
    """Run the contribution pipeline for one (kind, identifier) pair.

    Raises:
        BadRequestError: identifier is malformed for its kind.
        ConflictError: the identifier is already tracked.
        NotFoundError: GitHub does not know the user or repository.
        InternalError: GitHub failed for a user or repository lookup.
    """
    handler = _HANDLERS[EntityKind(kind)]
    try:
        result = await handler(db, github, identifier)
    except RankingError as e:
        contributions.labels(kind=EntityKind(kind).value, outcome=e.code).inc()
        raise
    except Exception:
        contributions.labels(kind=EntityKind(kind).value, outcome="error").inc()
        raise

    outcome = "degraded" if result.degraded else "created"
    contributions.labels(kind=result.kind.value, outcome=outcome).inc()
    log.info(
        "contribution_created",
        kind=result.kind.value,
        identifier=identifier,
        rank=result.rank,
        degraded=result.degraded,
    )
    return result
