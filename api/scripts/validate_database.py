"""Report duplicate, negative and incomplete rows in the ranking tables.

Read-only counterpart of cleanup_database.py. Exits with status 1 when any
problem is found so it can gate a deploy.

Usage:
    cd api
    DATABASE_URL="postgresql+asyncpg://..." uv run python -m scripts.validate_database
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
from rankedin.services.maintenance import ValidationReport, validate


async def validate_database(database_url: str) -> ValidationReport:
    engine = create_async_engine(database_url, echo=False)
    session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    try:
        async with session_factory() as session:
            return await validate(session)
    finally:
        await engine.dispose()


def print_report(report: ValidationReport) -> None:
    print("Duplicates:")
    for table, duplicates in report.duplicates.items():
        if not duplicates:
            print(f"  {table}: none")
            continue
        for value, count in duplicates:
            print(f"  {table}: {value!r} stored {count} times")

    print("Negative values:")
    for table, count in report.negative_rows.items():
        print(f"  {table}: {count} row(s)")

    print("Missing required fields:")
    for table, count in report.incomplete_rows.items():
        print(f"  {table}: {count} row(s)")

    print("Totals:")
    for name, count in report.totals.items():
        print(f"  {name}: {count}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Validate ranking table integrity.")
    parser.add_argument(
        "--database-url",
        default=settings.database_url,
        help="SQLAlchemy async URL (defaults to DATABASE_URL / settings)",
    )
    args = parser.parse_args()

    report = asyncio.run(validate_database(args.database_url))
    print_report(report)
    if not report.is_clean:
        print("Validation found problems; run scripts.cleanup_database to repair.")
        sys.exit(1)
    print("Database validation passed")


if __name__ == "__main__":
    main()
