#!/usr/bin/env python3
"""
Cleanup script to remove test surveys from the database.

Deletes ``e2e-`` surveys, their responses and the test competitions they
belong to. Pass ``--competition-ids`` to limit deletion to one seeded batch.
"""
import argparse
import asyncio
import json
import sys

from pilotvoice.config import get_settings
from pilotvoice.database import create_engine, create_session_factory
from pilotvoice.services import TestDataService


async def list_test_surveys():
    """List all test surveys without deleting."""
    engine = create_engine(get_settings())
    try:
        async with create_session_factory(engine)() as session:
            surveys = await TestDataService(session).get_test_surveys()
    finally:
        await engine.dispose()

    if not surveys:
        print("No test surveys found.")
        return

    print(f"Found {len(surveys)} test survey(s):")
    for survey in surveys:
        print(f"  - {survey.slug} (competition {survey.competition_id})")


async def cleanup_test_data(competition_ids: list[int] | None = None, dry_run: bool = False, verbose: bool = False):
    """
    Remove test survey data from the database.

    Args:
        competition_ids: Only delete data for these competitions
        dry_run: If True, show what would be deleted without deleting
        verbose: If True, show per-table counts
    """
    engine = create_engine(get_settings())
    try:
        async with create_session_factory(engine)() as session:
            service = TestDataService(session)
            counts = await service.cleanup_test_data(competition_ids, dry_run=True)

            if not any(counts.values()):
                print("No test data found.")
                return

            print(f"Found {counts['competitions']} competition(s), {counts['surveys']} survey(s), "
                  f"{counts['survey_responses']} response(s).")

            if dry_run:
                print("\nDRY RUN MODE - No data will be deleted.")
                return

            if sys.stdin and sys.stdin.isatty():
                confirm = input("\nProceed with deletion? (yes/no): ")
                if confirm.lower() not in ["yes", "y"]:
                    print("Deletion cancelled.")
                    return

            deletion_counts = await service.cleanup_test_data(competition_ids)

            print("\nDeletion complete!")
            if verbose:
                print("\nDeleted records:")
                for entity, count in deletion_counts.items():
                    if count > 0:
                        print(f"  - {entity}: {count}")
            print(f"\nTotal: {sum(deletion_counts.values())} records removed.")
    except Exception as e:
        print(f"\nError during cleanup: {e}", file=sys.stderr)
        raise
    finally:
        await engine.dispose()


def main():
    """Main entry point for the cleanup script."""
    parser = argparse.ArgumentParser(description="Clean up test survey data from the database")
    parser.add_argument(
        "--competition-ids",
        type=json.loads,
        help='JSON list of competition ids to remove, e.g. "[12, 13]"'
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be deleted without actually deleting"
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List test surveys without deleting"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show detailed deletion information"
    )
    parser.add_argument(
        "-y", "--yes",
        action="store_true",
        help="Skip confirmation prompt (for automated scripts)"
    )

    args = parser.parse_args()

    if args.yes:
        sys.stdin = None

    if args.list:
        asyncio.run(list_test_surveys())
    else:
        asyncio.run(cleanup_test_data(args.competition_ids, dry_run=args.dry_run, verbose=args.verbose))


if __name__ == "__main__":
    main()
