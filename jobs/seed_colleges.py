"""Seed the Supabase ``colleges`` table from the local JSON fixture.

Run: python -m jobs.seed_colleges
"""
from __future__ import annotations

import logging
import sys

from dotenv import load_dotenv

from ingest.college_seed import FixtureError, load_fixture, seed_colleges
from ingest.seed_config import ConfigurationError, load_seed_config
from ingest.supabase_client import SupabaseError, SupabaseTable

logger = logging.getLogger(__name__)


def main() -> int:
    """Run the seeder and return the process exit status."""
    load_dotenv()

    try:
        config = load_seed_config()
    except ConfigurationError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        print("Set them in .env file", file=sys.stderr)
        return 1

    try:
        colleges = load_fixture(config.fixture_path)
        print(f"📚 Found {len(colleges)} colleges to seed")

        with SupabaseTable(config.supabase_url, config.service_role_key, config.table) as table:
            result = seed_colleges(colleges, table, config.batch_size)
            print(f"\n🎉 Successfully seeded {result.processed} colleges!")
            if result.failed_batches:
                print(f"⚠️  Failed batches: {', '.join(map(str, result.failed_batches))}")

            try:
                total = table.count()
            except SupabaseError as exc:
                logger.warning("Count query failed: %s", exc)
                print(f"📊 Total colleges in database: unavailable ({exc})")
            else:
                print(f"📊 Total colleges in database: {total}")
    except FixtureError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 1
    except Exception as exc:
        print(f"❌ Seed failed: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
