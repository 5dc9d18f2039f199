#!/usr/bin/env python3
"""
Seed the database with test competitions and surveys.

Prints the created competition ids and survey slugs so browser tests can
target them, and optionally the ids as JSON for ``cleanup_test_surveys.py``.
"""
import argparse
import asyncio
import json
import sys
import time

from pilotvoice.config import get_settings
from pilotvoice.database import create_engine, create_session_factory
from pilotvoice.services import TestDataService


async def seed(suffix: str, as_json: bool = False):
    engine = create_engine(get_settings())
    session_factory = create_session_factory(engine)
    try:
        async with session_factory() as session:
            competition_ids, survey_slugs = await TestDataService(session).seed(suffix)
    except Exception as e:
        print(f"\nError during seeding: {e}", file=sys.stderr)
        raise
    finally:
        await engine.dispose()

    if as_json:
        print(json.dumps({"competitionIds": competition_ids, "surveySlugs": survey_slugs}))
        return

    print(f"Created {len(competition_ids)} competition(s): {competition_ids}")
    for slug in survey_slugs:
        print(f"  - /surveys/{slug}")


def main():
    """Main entry point for the seed script."""
    parser = argparse.ArgumentParser(description="Seed test competitions and surveys")
    parser.add_argument(
        "--suffix",
        default=str(int(time.time() * 1000)),
        help="Suffix appended to names and slugs (defaults to the current time in ms)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the created ids and slugs as JSON"
    )

    args = parser.parse_args()
    asyncio.run(seed(args.suffix, as_json=args.json))


if __name__ == "__main__":
    main()
