"""Shared data models for the region timer service."""

from .region import CurrentlyActiveRegion, Region
from .region_history import RegionHistory

__all__ = [
    "CurrentlyActiveRegion",
    "Region",
    "RegionHistory",
]
