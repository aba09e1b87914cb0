"""Region timer API routes."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from region_timer.api.core.dependencies import get_region_repository
from region_timer.shared.models import Region
from region_timer.shared.repositories import (
    RegionRepository,
    RepositoryError,
    TimerNotRunning,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["regions"])


# ============================================
# Response Models
# ============================================


class StopTimerResponse(BaseModel):
    duration: int


class RegionHistoryResponse(BaseModel):
    region: Region
    start_time: datetime
    stop_time: datetime | None = None
    duration: int | None = None


class CurrentlyActiveResponse(BaseModel):
    region: Region | None = None
    duration: int | None = None


def _to_http_error(e: RepositoryError) -> HTTPException:
    if isinstance(e, TimerNotRunning):
        return HTTPException(status_code=422, detail=str(e))
    # Server faults keep their detail in the logs only
    return HTTPException(status_code=500, detail="Error while accessing data")


# ============================================
# Endpoints
# ============================================


@router.post("/{region}/start", response_class=Response)
async def start_timer(
    region: Region,
    repo: RegionRepository = Depends(get_region_repository),
) -> Response:
    """Start a timer for a region, stopping whatever timer is running."""
    try:
        await repo.start_timer(region)
    except RepositoryError as e:
        raise _to_http_error(e) from e
    return Response(status_code=200)


@router.post("/{region}/stop", response_model=StopTimerResponse)
async def stop_timer(
    region: Region,
    repo: RegionRepository = Depends(get_region_repository),
) -> StopTimerResponse:
    """Stop the running timer of a region and return its duration."""
    try:
        duration = await repo.stop_timer(region)
    except TimerNotRunning as e:
        logger.warning(str(e))
        raise _to_http_error(e) from e
    except RepositoryError as e:
        raise _to_http_error(e) from e
    return StopTimerResponse(duration=duration)


@router.get("/{region}/history", response_model=list[RegionHistoryResponse])
async def history_by_region(
    region: Region,
    repo: RegionRepository = Depends(get_region_repository),
) -> list[RegionHistoryResponse]:
    """All timer records of a region, most recent first."""
    try:
        history = await repo.get_history(region)
    except RepositoryError as e:
        raise _to_http_error(e) from e
    return [RegionHistoryResponse(**asdict(record)) for record in history]


@router.get("/currently_active", response_model=CurrentlyActiveResponse)
async def currently_active(
    repo: RegionRepository = Depends(get_region_repository),
) -> CurrentlyActiveResponse:
    """The running timer's region and elapsed seconds (nulls when idle)."""
    try:
        active = await repo.currently_active()
    except RepositoryError as e:
        raise _to_http_error(e) from e
    return CurrentlyActiveResponse(region=active.region, duration=active.duration)
