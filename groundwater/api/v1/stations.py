"""
FastAPI endpoints for stations and their time series.

Routes:
    GET /api/v1/stations                      — Paginated station list
    GET /api/v1/stations/{id}                 — Station detail with status
    GET /api/v1/stations/{id}/latest          — Most recent reading
    GET /api/v1/stations/{id}/timeseries      — Raw / daily / weekly series
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from groundwater.api.deps import get_service
from groundwater.core.config import settings
from groundwater.service import MonitoringService
from groundwater.timeseries.classifier import StationStatus
from groundwater.timeseries.models import Interval

router = APIRouter(
    prefix="/api/v1/stations",
    tags=["stations"],
)


@router.get("", summary="List stations")
async def list_stations(
    state: Optional[str] = None,
    district: Optional[str] = None,
    status: Optional[StationStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.STATION_PAGE_LIMIT, ge=1, le=500),
    service: MonitoringService = Depends(get_service),
) -> Dict[str, Any]:
    result = service.list_stations(
        state=state, district=district, status=status, page=page, limit=limit,
    )
    return result.to_dict()


@router.get("/{station_id}", summary="Station detail")
async def station_detail(
    station_id: str,
    service: MonitoringService = Depends(get_service),
) -> Dict[str, Any]:
    return service.station_detail(station_id).to_dict(detailed=True)


@router.get("/{station_id}/latest", summary="Latest reading")
async def latest_reading(
    station_id: str,
    service: MonitoringService = Depends(get_service),
) -> Dict[str, Any]:
    reading = service.latest_reading(station_id)
    return {
        "station_id": station_id,
        "reading": reading.to_dict() if reading else None,
    }


@router.get("/{station_id}/timeseries", summary="Time series with aggregates")
async def time_series(
    station_id: str,
    start: Optional[datetime] = Query(None, alias="from"),
    end: Optional[datetime] = Query(None, alias="to"),
    interval: Interval = Interval.DAILY,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.TIMESERIES_PAGE_LIMIT, ge=1, le=10000),
    service: MonitoringService = Depends(get_service),
) -> Dict[str, Any]:
    result = service.time_series(
        station_id, start, end, interval, page=page, limit=limit,
    )
    return result.to_dict()
