"""
FastAPI endpoint for the cross-station dashboard.

Routes:
    GET /api/v1/dashboard/summary   — KPIs and rolling daily trend
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from groundwater.api.deps import get_service
from groundwater.core.config import settings
from groundwater.service import MonitoringService

router = APIRouter(
    prefix="/api/v1/dashboard",
    tags=["dashboard"],
)


@router.get("/summary", summary="Dashboard snapshot and trend")
async def dashboard_summary(
    days: int = Query(settings.DASHBOARD_TREND_DAYS, ge=1, le=365),
    service: MonitoringService = Depends(get_service),
) -> Dict[str, Any]:
    summary = service.dashboard_summary(days)
    return {
        **summary["snapshot"].to_dict(),
        "trend": [day.to_dict() for day in summary["trend"]],
    }
