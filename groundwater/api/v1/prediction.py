"""
FastAPI endpoints for forecasting and scenario simulation.

Routes:
    GET /api/v1/prediction/forecast/{id}?horizon=30          — Linear-trend forecast
    GET /api/v1/prediction/simulate/{id}?scenario=<kind>     — Policy scenario
    GET /api/v1/prediction/scenarios                          — Supported scenarios
"""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query

from groundwater.api.deps import get_service
from groundwater.core.config import settings
from groundwater.ml.scenario import Scenario
from groundwater.service import MonitoringService

router = APIRouter(
    prefix="/api/v1/prediction",
    tags=["prediction"],
)


@router.get("/forecast/{station_id}", summary="Groundwater level forecast")
async def forecast(
    station_id: str,
    horizon: int = Query(30, ge=1, le=settings.FORECAST_MAX_HORIZON_DAYS),
    service: MonitoringService = Depends(get_service),
) -> Dict[str, Any]:
    """
    Project the station's level ``horizon`` days ahead (typically 30/60/90).

    Stations with fewer than five days of history get a degraded result
    (trend ``Unknown``, confidence 0) rather than an error.
    """
    return service.forecast(station_id, horizon).to_dict()


@router.get("/simulate/{station_id}", summary="Scenario-adjusted forecast")
async def simulate(
    station_id: str,
    scenario: str = Query(..., min_length=1, description="increased_pumping | reduced_rainfall | conservation"),
    service: MonitoringService = Depends(get_service),
) -> Dict[str, Any]:
    """Unrecognised scenarios return the unmodified 30-day forecast."""
    return service.simulate(station_id, scenario).to_dict()


@router.get("/scenarios", summary="List supported scenarios")
async def scenarios() -> List[Dict[str, Any]]:
    return [
        {"scenario": s.value, "factor": s.factor, "label": s.label}
        for s in Scenario
    ]
