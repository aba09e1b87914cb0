"""Run database migrations using region_timer.shared.migrations.runner.

Usage:
    region-timer-migrate          # Run all pending migrations
    region-timer-migrate --dry    # Show pending migrations without applying
"""

import asyncio
import logging
import sys

import asyncpg
from pydantic import ValidationError

from region_timer.api.core.config import get_settings
from region_timer.shared.migrations.runner import MigrationRunner

logger = logging.getLogger(__name__)


async def run(database_url: str, dry: bool) -> int:
    pool = await asyncpg.create_pool(database_url, min_size=1, max_size=2, statement_cache_size=0)

    try:
        runner = MigrationRunner(pool)

        if dry:
            pending = await runner.get_pending()
            applied = await runner.get_applied()
            print(f"Applied: {len(applied)} | Pending: {len(pending)}")
            for v in pending:
                print(f"  -> {v}")
            if not pending:
                print("Database is up to date.")
        else:
            newly_applied = await runner.run_pending()
            if not newly_applied:
                print("No pending migrations.")
            else:
                print(f"Applied {len(newly_applied)} migration(s).")
    finally:
        await pool.close()
    return 0


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    try:
        settings = get_settings()
    except ValidationError:
        print("ERROR: DATABASE_URL not set. Check .env or environment variables.")
        return 1

    return asyncio.run(run(settings.database_url, dry="--dry" in argv))


if __name__ == "__main__":
    sys.exit(main())
