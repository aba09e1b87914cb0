"""Dependency injection utilities for FastAPI"""

import asyncpg
from fastapi import Depends, HTTPException

from region_timer.api.core.database import get_database_manager
from region_timer.shared.repositories import PostgresRegionRepository, RegionRepository


def get_db_pool() -> asyncpg.Pool:
    try:
        db_manager = get_database_manager()
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail="Database not ready") from e
    if not db_manager.is_connected:
        raise HTTPException(status_code=503, detail="Database not ready")
    return db_manager.pool


def get_region_repository(pool: asyncpg.Pool = Depends(get_db_pool)) -> RegionRepository:
    """Get the region repository backed by the shared pool (dependency injection)"""
    return PostgresRegionRepository(pool)
