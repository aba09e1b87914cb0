"""In-memory RegionRepository used as a test double and for local runs.

No method awaits anything, so each operation completes without yielding to
the event loop and is atomic with respect to other coroutines.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from region_timer.shared.models.region import CurrentlyActiveRegion, Region
from region_timer.shared.models.region_history import RegionHistory
from region_timer.shared.repositories.region_history import (
    Clock,
    RegionRepository,
    TimerNotRunning,
    elapsed_seconds,
    utc_now,
)

logger = logging.getLogger(__name__)


class InMemoryRegionRepository(RegionRepository):
    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._records: list[RegionHistory] = []
        self._next_id = 1

    def _active(self) -> RegionHistory | None:
        return next((r for r in self._records if r.is_active), None)

    async def start_timer(self, region: Region) -> None:
        now = self._clock()
        active = self._active()
        if active is not None:
            active.stop_time = now
            active.duration = elapsed_seconds(active.start_time, now)
            logger.info(f"Closed running timer {active.region.value} before starting {region.value}")
        self._records.append(RegionHistory(id=self._next_id, region=region, start_time=now))
        self._next_id += 1
        logger.info(f"Timer started: {region.value}")

    async def stop_timer(self, region: Region) -> int:
        active = self._active()
        if active is None or active.region != region:
            raise TimerNotRunning(region)
        now = self._clock()
        active.stop_time = now
        active.duration = elapsed_seconds(active.start_time, now)
        logger.info(f"Timer stopped: {region.value} ({active.duration}s)")
        return active.duration

    async def get_history(self, region: Region) -> list[RegionHistory]:
        records = [replace(r) for r in self._records if r.region == region]
        records.sort(key=lambda r: (r.start_time, r.id), reverse=True)
        return records

    async def currently_active(self) -> CurrentlyActiveRegion:
        active = self._active()
        if active is None:
            return CurrentlyActiveRegion.nothing_active()
        return CurrentlyActiveRegion(
            region=active.region,
            duration=elapsed_seconds(active.start_time, self._clock()),
        )
