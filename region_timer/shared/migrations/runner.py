"""Versioned SQL migrations for the region timer schema."""

from __future__ import annotations

import logging
from pathlib import Path

import asyncpg

logger = logging.getLogger(__name__)

# Default directory for migration SQL files
VERSIONS_DIR = Path(__file__).resolve().parent / "versions"


class MigrationRunner:
    """Apply ``NNN_description.sql`` files in prefix order, each exactly once.

    The file stem is the version. Applied versions live in
    ``schema_migrations``; a migration and its tracking row commit together.
    """

    TRACKING_TABLE = "schema_migrations"

    def __init__(self, pool: asyncpg.Pool, migrations_dir: Path | None = None) -> None:
        self.pool = pool
        self.migrations_dir = migrations_dir or VERSIONS_DIR

    def discover(self) -> list[Path]:
        """SQL files in the migrations directory, in apply order."""
        return sorted(self.migrations_dir.glob("*.sql"))

    async def get_applied(self) -> set[str]:
        """Versions recorded as applied (creates the tracking table on first use)."""
        async with self.pool.acquire() as conn:
            await conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self.TRACKING_TABLE} (
                    version    TEXT PRIMARY KEY,
                    name       TEXT NOT NULL,
                    applied_at TIMESTAMPTZ DEFAULT NOW()
                )
                """
            )
            rows = await conn.fetch(f"SELECT version FROM {self.TRACKING_TABLE}")  # noqa: S608
        return {row["version"] for row in rows}

    async def _pending_files(self) -> list[Path]:
        applied = await self.get_applied()
        return [path for path in self.discover() if path.stem not in applied]

    async def get_pending(self) -> list[str]:
        """Versions on disk that have not been applied yet."""
        return [path.stem for path in await self._pending_files()]

    async def run_pending(self) -> list[str]:
        """Apply every pending migration; returns the versions applied."""
        pending = await self._pending_files()
        if not pending:
            logger.info("Schema up to date (%s)", self.migrations_dir)
            return []

        for path in pending:
            await self._apply(path)

        versions = [path.stem for path in pending]
        logger.info("Applied %d migration(s): %s", len(versions), ", ".join(versions))
        return versions

    async def _apply(self, path: Path) -> None:
        sql = path.read_text(encoding="utf-8")
        logger.info("Applying migration: %s", path.stem)
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                await conn.execute(sql)
                await conn.execute(
                    f"INSERT INTO {self.TRACKING_TABLE} (version, name) VALUES ($1, $2)",
                    path.stem,
                    path.name,
                )
