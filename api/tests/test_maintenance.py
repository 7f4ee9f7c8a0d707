"""Integrity maintenance: deduplication and negative-value clamping are idempotent."""

import pytest_asyncio
from conftest import add_repository, add_topic, add_user, utc
from sqlalchemy import select, text

from rankedin.models import RankedRepository, RankedTopic, RankedUser
from rankedin.services.maintenance import (
    clamp_negative_values,
    deduplicate_all,
    validate,
)


@pytest_asyncio.fixture
async def legacy_db(db):
    """A database whose identity columns lost their unique indexes (pre-constraint data)."""
    for index in (
        "uq_ranked_users_username",
        "uq_ranked_repositories_full_name",
        "uq_ranked_topics_name",
    ):
        await db.execute(text(f"DROP INDEX {index}"))
    await db.commit()
    return db


async def _snapshot(db, model, *columns):
    result = await db.execute(
        select(*(getattr(model, c) for c in columns)).order_by(model.id)
    )
    return [tuple(row) for row in result.all()]


class TestDeduplication:
    async def test_no_duplicates_is_a_noop(self, db):
        await add_user(db, "alice", total_stars=3)
        await add_repository(db, "a/b", stars=3)
        await add_topic(db, "t", score=3)

        removed = await deduplicate_all(db)
        await db.commit()

        assert removed == {"ranked_users": 0, "ranked_repositories": 0, "ranked_topics": 0}

    async def test_users_keep_most_recently_updated(self, legacy_db):
        db = legacy_db
        await add_user(db, "alice", total_stars=1, updated_at=utc(2024, 1, 1))
        newest = await add_user(db, "alice", total_stars=2, updated_at=utc(2025, 6, 1))
        await add_user(db, "alice", total_stars=3, updated_at=utc(2023, 1, 1))
        await add_user(db, "bob", total_stars=9)

        removed = await deduplicate_all(db)
        await db.commit()

        assert removed["ranked_users"] == 2
        rows = (await db.execute(select(RankedUser.id, RankedUser.username))).all()
        assert sorted(username for _, username in rows) == ["alice", "bob"]
        assert newest.id in {row_id for row_id, _ in rows}

    async def test_repositories_keep_highest_stars(self, legacy_db):
        db = legacy_db
        await add_repository(db, "facebook/react", stars=10)
        await add_repository(db, "facebook/react", stars=500)
        await add_repository(db, "facebook/react", stars=20)

        removed = await deduplicate_all(db)
        await db.commit()

        assert removed["ranked_repositories"] == 2
        stars = (await db.execute(select(RankedRepository.stars))).scalars().all()
        assert stars == [500]

    async def test_topics_keep_highest_score(self, legacy_db):
        db = legacy_db
        await add_topic(db, "python", score=7)
        await add_topic(db, "python", score=70)

        await deduplicate_all(db)
        await db.commit()

        scores = (await db.execute(select(RankedTopic.score))).scalars().all()
        assert scores == [70]

    async def test_rerun_keeps_same_survivor(self, legacy_db):
        db = legacy_db
        # Equal stars: the survivor is decided by id, so every run picks the same row
        await add_repository(db, "o/r", stars=5)
        await add_repository(db, "o/r", stars=5)
        await add_repository(db, "o/r", stars=5)

        await deduplicate_all(db)
        first = await _snapshot(db, RankedRepository, "id", "stars")
        await db.rollback()

        await deduplicate_all(db)
        second = await _snapshot(db, RankedRepository, "id", "stars")
        await db.commit()

        assert len(first) == 1
        assert second == first

        assert (await deduplicate_all(db))["ranked_repositories"] == 0


class TestClamping:
    async def test_negative_followers_reset_to_zero(self, db):
        await add_user(db, "broken", total_stars=10, followers=-3)

        updated = await clamp_negative_values(db)
        await db.commit()

        assert updated["ranked_users.followers"] == 1
        followers = (await db.execute(select(RankedUser.followers))).scalar_one()
        assert followers == 0

    async def test_every_count_column_is_clamped(self, db):
        await add_user(db, "u", total_stars=-1, followers=-1, following=-1, public_repos=-1)
        await add_repository(db, "o/r", stars=-5, forks=-1, watchers=-2, open_issues=-1, size=-9)
        await add_topic(db, "t", score=-4, repositories=-2)

        await clamp_negative_values(db)
        await db.commit()

        assert await _snapshot(
            db, RankedUser, "total_stars", "followers", "following", "public_repos"
        ) == [(0, 0, 0, 0)]
        assert await _snapshot(
            db, RankedRepository, "stars", "forks", "watchers", "open_issues", "size"
        ) == [(0, 0, 0, 0, 0)]
        assert await _snapshot(db, RankedTopic, "score", "repositories") == [(0, 0)]

    async def test_clamp_twice_equals_clamp_once(self, db):
        await add_user(db, "a", total_stars=5, followers=-3)
        await add_user(db, "b", total_stars=-2, followers=8)

        await clamp_negative_values(db)
        await db.commit()
        once = await _snapshot(db, RankedUser, "username", "total_stars", "followers")

        second = await clamp_negative_values(db)
        await db.commit()

        assert not any(second.values())
        assert await _snapshot(db, RankedUser, "username", "total_stars", "followers") == once

    async def test_positive_values_untouched(self, db):
        await add_user(db, "fine", total_stars=12, followers=4)

        updated = await clamp_negative_values(db)
        await db.commit()

        assert not any(updated.values())
        assert await _snapshot(db, RankedUser, "total_stars", "followers") == [(12, 4)]


class TestValidation:
    async def test_clean_database(self, db):
        await add_user(db, "alice", total_stars=1)
        await add_repository(db, "a/b", stars=40)

        report = await validate(db)

        assert report.is_clean
        assert report.totals["ranked_users"] == 1
        assert report.totals["repository_stars"] == 40

    async def test_reports_problems(self, legacy_db):
        db = legacy_db
        await add_user(db, "dup", total_stars=1)
        await add_user(db, "dup", total_stars=2)
        await add_repository(db, "o/r", stars=-1)
        await add_topic(db, "", score=0)

        report = await validate(db)

        assert not report.is_clean
        assert report.duplicates["ranked_users"] == [("dup", 2)]
        assert report.negative_rows["ranked_repositories"] == 1
        assert report.incomplete_rows["ranked_topics"] == 1


class TestScripts:
    async def test_dry_run_then_cleanup(self, legacy_db, engine):
        from scripts.cleanup_database import cleanup_database
        from scripts.validate_database import validate_database

        db = legacy_db
        await add_repository(db, "o/r", stars=10)
        await add_repository(db, "o/r", stars=20)
        await add_topic(db, "go", score=-4)
        url = engine.url.render_as_string(hide_password=False)

        preview = await cleanup_database(url, dry_run=True)
        assert preview["removed"]["ranked_repositories"] == 1
        assert preview["clamped"]["ranked_topics.score"] == 1
        assert not (await validate_database(url)).is_clean

        await cleanup_database(url)

        report = await validate_database(url)
        assert report.is_clean
        assert report.totals["ranked_repositories"] == 1
        assert report.totals["repository_stars"] == 20
