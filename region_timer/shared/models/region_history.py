"""Data model for the region_history table."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from region_timer.shared.models.region import Region


@dataclass
class RegionHistory:
    """One start/stop cycle of a region timer.

    ``stop_time`` and ``duration`` are both None while the timer runs.
    """

    id: int
    region: Region
    start_time: datetime
    stop_time: datetime | None = None
    duration: int | None = None  # whole seconds

    @property
    def is_active(self) -> bool:
        return self.stop_time is None
