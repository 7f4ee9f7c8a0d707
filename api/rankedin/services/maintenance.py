"""Offline integrity maintenance for the ranking tables.

Two idempotent repairs, run from scripts/cleanup_database.py and never on the
request path:

- Deduplication: for every identity value stored more than once, keep one
  canonical row and delete the rest. Users keep the most recently updated
  row, repositories the highest stars, topics the highest score. Ties fall
  back to the lowest id so repeated runs pick the same survivor.
- Clamping: any count-like column below zero is reset to zero.

Plus read-only checks used by scripts/validate_database.py.

Functions flush but never commit; the caller owns the transaction.
"""

from dataclasses import dataclass, field

import structlog
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rankedin.models import RankedRepository, RankedTopic, RankedUser

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DedupRule:
    model: type
    identity: str
    keep_first: tuple  # ORDER BY clauses; the first row survives


DEDUP_RULES = (
    DedupRule(RankedUser, "username", (RankedUser.updated_at.desc(), RankedUser.id)),
    DedupRule(RankedRepository, "full_name", (RankedRepository.stars.desc(), RankedRepository.id)),
    DedupRule(RankedTopic, "name", (RankedTopic.score.desc(), RankedTopic.id)),
)

NON_NEGATIVE_COLUMNS = {
    RankedUser: ("followers", "following", "public_repos", "total_stars"),
    RankedRepository: ("stars", "forks", "watchers", "open_issues", "size"),
    RankedTopic: ("score", "repositories"),
}


@dataclass
class ValidationReport:
    duplicates: dict[str, list[tuple[str, int]]] = field(default_factory=dict)
    negative_rows: dict[str, int] = field(default_factory=dict)
    incomplete_rows: dict[str, int] = field(default_factory=dict)
    totals: dict[str, int] = field(default_factory=dict)

    @property
    def is_clean(self) -> bool:
        return (
            not any(self.duplicates.values())
            and not any(self.negative_rows.values())
            and not any(self.incomplete_rows.values())
        )


async def find_duplicates(db: AsyncSession, rule: DedupRule) -> list[tuple[str, int]]:
    """Identity values stored more than once, with their row counts."""
    column = getattr(rule.model, rule.identity)
    result = await db.execute(
        select(column, func.count())
        .group_by(column)
        .having(func.count() > 1)
        .order_by(column)
    )
    return [(value, count) for value, count in result.all()]


async def deduplicate(db: AsyncSession, rule: DedupRule) -> int:
    """Delete every duplicate except the canonical row. Returns rows removed."""
    column = getattr(rule.model, rule.identity)
    removed = 0
    for value, _count in await find_duplicates(db, rule):
        result = await db.execute(
            select(rule.model.id)
            .where(column == value)
            .order_by(*rule.keep_first)
            .offset(1)
        )
        doomed = list(result.scalars().all())
        if not doomed:
            continue
        await db.execute(
            delete(rule.model)
            .where(rule.model.id.in_(doomed))
            .execution_options(synchronize_session=False)
        )
        removed += len(doomed)
        log.info(
            "duplicates_removed",
            table=rule.model.__tablename__,
            identity=value,
            removed=len(doomed),
        )
    return removed


async def deduplicate_all(db: AsyncSession) -> dict[str, int]:
    return {rule.model.__tablename__: await deduplicate(db, rule) for rule in DEDUP_RULES}


async def clamp_negative_values(db: AsyncSession) -> dict[str, int]:
    """Reset negative count columns to zero.

    Returns rows updated keyed by "table.column"; a second run reports zeros.
    """
    updated: dict[str, int] = {}
    for model, columns in NON_NEGATIVE_COLUMNS.items():
        for name in columns:
            column = getattr(model, name)
            result = await db.execute(
                update(model)
                .where(column < 0)
                .values({name: 0})
                .execution_options(synchronize_session=False)
            )
            key = f"{model.__tablename__}.{name}"
            updated[key] = result.rowcount or 0
            if updated[key]:
                log.info("negative_values_clamped", column=key, rows=updated[key])
    return updated


async def count_negative_rows(db: AsyncSession) -> dict[str, int]:
    counts = {}
    for model, columns in NON_NEGATIVE_COLUMNS.items():
        condition = or_(*(getattr(model, name) < 0 for name in columns))
        result = await db.execute(select(func.count()).select_from(model).where(condition))
        counts[model.__tablename__] = result.scalar_one()
    return counts


async def count_incomplete_rows(db: AsyncSession) -> dict[str, int]:
    users = await db.execute(
        select(func.count()).select_from(RankedUser).where(RankedUser.username == "")
    )
    repositories = await db.execute(
        select(func.count())
        .select_from(RankedRepository)
        .where(or_(RankedRepository.full_name == "", RankedRepository.html_url == ""))
    )
    topics = await db.execute(
        select(func.count()).select_from(RankedTopic).where(RankedTopic.name == "")
    )
    return {
        RankedUser.__tablename__: users.scalar_one(),
        RankedRepository.__tablename__: repositories.scalar_one(),
        RankedTopic.__tablename__: topics.scalar_one(),
    }


async def validate(db: AsyncSession) -> ValidationReport:
    """Read-only health report of the ranking tables."""
    report = ValidationReport()
    for rule in DEDUP_RULES:
        report.duplicates[rule.model.__tablename__] = await find_duplicates(db, rule)
    report.negative_rows = await count_negative_rows(db)
    report.incomplete_rows = await count_incomplete_rows(db)
    for model in (RankedUser, RankedRepository, RankedTopic):
        result = await db.execute(select(func.count()).select_from(model))
        report.totals[model.__tablename__] = result.scalar_one()
    stars = await db.execute(select(func.coalesce(func.sum(RankedRepository.stars), 0)))
    report.totals["repository_stars"] = int(stars.scalar_one() or 0)
    return report
