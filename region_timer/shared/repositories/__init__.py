"""Repository layer for the region timer service."""

from .memory import InMemoryRegionRepository
from .region_history import (
    DatabaseError,
    PostgresRegionRepository,
    RegionRepository,
    RepositoryError,
    TimerNotRunning,
)

__all__ = [
    "DatabaseError",
    "InMemoryRegionRepository",
    "PostgresRegionRepository",
    "RegionRepository",
    "RepositoryError",
    "TimerNotRunning",
]
