"""Repair the ranking tables: remove duplicates and clamp negative counts.

Runs both maintenance routines from rankedin.services.maintenance in a single
transaction, then prints a summary. Safe to re-run: a second pass over a
repaired database changes nothing.

- Users keep the most recently updated duplicate
- Repositories keep the highest-stars duplicate
- Topics keep the highest-score duplicate
- Negative followers/following/stars/forks/watchers/score/... reset to 0

Usage:
    cd api
    DATABASE_URL="postgresql+asyncpg://..." uv run python -m scripts.cleanup_database

    # Report what would change without committing:
    uv run python -m scripts.cleanup_database --dry-run
"""
import argparse
import asyncio
import sys
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Support running from both project root and api/ directory
_api_root = Path(__file__).parent.parent  # api/
if str(_api_root) not in sys.path:
    sys.path.insert(0, str(_api_root))

from rankedin.config import settings
from rankedin.logging_config import configure_logging
from rankedin.services.maintenance import clamp_negative_values, deduplicate_all


async def cleanup_database(database_url: str, dry_run: bool = False) -> dict:
    """Deduplicate then clamp; commit unless dry_run. Returns the per-step counts."""
    # Standalone engine so the script runs without the app's shared pool
    engine = create_async_engine(database_url, echo=False)
    session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    try:
        async with session_factory() as session:
            removed = await deduplicate_all(session)
            clamped = await clamp_negative_values(session)
            if dry_run:
                await session.rollback()
            else:
                await session.commit()
    finally:
        await engine.dispose()

    return {"removed": removed, "clamped": clamped}


def print_summary(summary: dict, dry_run: bool) -> None:
    prefix = "[dry run] " if dry_run else ""
    for table, count in summary["removed"].items():
        print(f"{prefix}{table}: {count} duplicate row(s) removed")
    changed = {column: rows for column, rows in summary["clamped"].items() if rows}
    if changed:
        for column, rows in changed.items():
            print(f"{prefix}{column}: {rows} negative value(s) reset to 0")
    else:
        print(f"{prefix}No negative values found")
    print(f"{prefix}Database cleanup complete")


def main() -> None:
    parser = argparse.ArgumentParser(description="Remove duplicate and invalid ranking rows.")
    parser.add_argument(
        "--database-url",
        default=settings.database_url,
        help="SQLAlchemy async URL (defaults to DATABASE_URL / settings)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Roll back instead of committing",
    )
    args = parser.parse_args()

    configure_logging()
    try:
        summary = asyncio.run(cleanup_database(args.database_url, dry_run=args.dry_run))
    except Exception as e:
        print(f"Cleanup failed: {e}", file=sys.stderr)
        sys.exit(1)
    print_summary(summary, args.dry_run)


if __name__ == "__main__":
    main()
