"""Region identifiers and the currently-active view."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Region(str, Enum):
    """Closed set of tracked regions (stored and serialized lowercase)."""

    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"


@dataclass(frozen=True)
class CurrentlyActiveRegion:
    """The open timer's region and elapsed seconds, or both None when idle."""

    region: Region | None
    duration: int | None

    @classmethod
    def nothing_active(cls) -> CurrentlyActiveRegion:
        return cls(region=None, duration=None)

    @property
    def is_active(self) -> bool:
        return self.region is not None
