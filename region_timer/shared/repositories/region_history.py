"""Repository for the region_history table.

At most one row in the whole table may have ``stop_time IS NULL``.
Starting any region closes whatever timer is open, and every mutation is a
single atomic unit on the storage side: ``start_timer`` runs inside one
transaction, ``stop_timer`` is one conditional UPDATE. Both take the same
transaction-scoped advisory lock and read the clock only after holding it,
so timestamps follow the order in which mutations commit.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

import asyncpg

from region_timer.shared.models.region import CurrentlyActiveRegion, Region
from region_timer.shared.models.region_history import RegionHistory

logger = logging.getLogger(__name__)

_COLUMNS = "id, region, start_time, stop_time, duration"

# Serializes timer mutations across all processes
_TIMER_LOCK_KEY = 0x52454749

# Whole seconds between $1 and start_time, truncated
_DURATION_SQL = "TRUNC(EXTRACT(EPOCH FROM ($1::timestamptz - start_time)))::BIGINT"

_STORAGE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def elapsed_seconds(start: datetime, end: datetime) -> int:
    """Whole seconds from *start* to *end*, truncated."""
    return int((end - start).total_seconds())


# ============================================
# Errors
# ============================================


class RepositoryError(Exception):
    """Base class for failures surfaced by a RegionRepository."""


class TimerNotRunning(RepositoryError):
    """No open timer exists for the requested region."""

    def __init__(self, region: Region) -> None:
        self.region = region
        super().__init__(f"No timer is running for region '{region.value}'")


class DatabaseError(RepositoryError):
    """Storage-layer fault; the original exception is chained as __cause__."""


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except _STORAGE_ERRORS as e:
        logger.exception(f"Storage failure during {operation}: {type(e).__name__}")
        raise DatabaseError(f"Database error: {e or repr(e)}") from e


# ============================================
# Interface
# ============================================


class RegionRepository(ABC):
    """Timer state operations; implementations must keep one active timer at most."""

    @abstractmethod
    async def start_timer(self, region: Region) -> None:
        """Close any open timer (any region) and open a new one for *region*."""

    @abstractmethod
    async def stop_timer(self, region: Region) -> int:
        """Close the open timer of *region* and return its duration in seconds.

        Raises TimerNotRunning when *region* has no open timer, even if
        another region's timer is running.
        """

    @abstractmethod
    async def get_history(self, region: Region) -> list[RegionHistory]:
        """All records of *region*, most recent start first."""

    @abstractmethod
    async def currently_active(self) -> CurrentlyActiveRegion:
        """The open timer's region and elapsed seconds, or the empty value."""


# ============================================
# PostgreSQL
# ============================================


def _to_history(row: asyncpg.Record) -> RegionHistory:
    data = dict(row)
    data["region"] = Region(data["region"])
    return RegionHistory(**data)


class PostgresRegionRepository(RegionRepository):
    """Pure SQL operations for region_history."""

    def __init__(self, pool: asyncpg.Pool, clock: Clock = utc_now) -> None:
        self.pool = pool
        self._clock = clock

    async def start_timer(self, region: Region) -> None:
        with _storage_errors("start_timer"):
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    await conn.execute("SELECT pg_advisory_xact_lock($1)", _TIMER_LOCK_KEY)
                    now = self._clock()
                    closed = await conn.execute(
                        f"""
                        UPDATE region_history
                        SET stop_time = $1,
                            duration = {_DURATION_SQL}
                        WHERE stop_time IS NULL
                        """,
                        now,
                    )
                    await conn.execute(
                        "INSERT INTO region_history (region, start_time) VALUES ($1, $2)",
                        region.value,
                        now,
                    )
        # result is like "UPDATE N"
        if closed != "UPDATE 0":
            logger.info(f"Closed running timer before starting {region.value}")
        logger.info(f"Timer started: {region.value}")

    async def stop_timer(self, region: Region) -> int:
        with _storage_errors("stop_timer"):
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    await conn.execute("SELECT pg_advisory_xact_lock($1)", _TIMER_LOCK_KEY)
                    now = self._clock()
                    row = await conn.fetchrow(
                        f"""
                        UPDATE region_history
                        SET stop_time = $1,
                            duration = {_DURATION_SQL}
                        WHERE region = $2 AND stop_time IS NULL
                        RETURNING duration
                        """,
                        now,
                        region.value,
                    )
        if row is None:
            raise TimerNotRunning(region)
        duration = row["duration"]
        logger.info(f"Timer stopped: {region.value} ({duration}s)")
        return duration

    async def get_history(self, region: Region) -> list[RegionHistory]:
        with _storage_errors("get_history"):
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(
                    f"SELECT {_COLUMNS} FROM region_history "
                    "WHERE region = $1 ORDER BY start_time DESC, id DESC",
                    region.value,
                )
        return [_to_history(row) for row in rows]

    async def currently_active(self) -> CurrentlyActiveRegion:
        with _storage_errors("currently_active"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT region, start_time FROM region_history "
                    "WHERE stop_time IS NULL LIMIT 1"
                )
        if row is None:
            return CurrentlyActiveRegion.nothing_active()
        return CurrentlyActiveRegion(
            region=Region(row["region"]),
            duration=elapsed_seconds(row["start_time"], self._clock()),
        )
