"""Process-wide database manager for the API."""

import logging

from region_timer.api.core.config import Settings
from region_timer.shared.database import DatabaseManager, PoolConfig

logger = logging.getLogger(__name__)

# Global database manager instance
_db_manager: DatabaseManager | None = None


def get_database_manager() -> DatabaseManager:
    """Get the global database manager instance"""
    if _db_manager is None:
        raise RuntimeError("Database manager not initialized")
    return _db_manager


def init_database_manager(settings: Settings) -> DatabaseManager:
    """Initialize the global database manager"""
    global _db_manager
    config = PoolConfig(
        min_size=settings.db_min_size,
        max_size=settings.db_max_size,
        ssl=settings.database_ssl,
    )
    _db_manager = DatabaseManager(settings.database_url, config)
    return _db_manager
