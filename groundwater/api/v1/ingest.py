"""
FastAPI endpoint for reading ingestion.

Routes:
    POST /api/v1/ingest   — Upsert a batch of readings for one station
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from groundwater.api.deps import get_service
from groundwater.api.schemas import IngestRequest, IngestResponse
from groundwater.service import MonitoringService

router = APIRouter(
    prefix="/api/v1/ingest",
    tags=["ingest"],
)


@router.post("", response_model=IngestResponse, summary="Ingest station readings")
async def ingest(
    req: IngestRequest,
    service: MonitoringService = Depends(get_service),
) -> IngestResponse:
    """
    Insert or overwrite readings by timestamp.

    Malformed readings are reported in ``errors`` with their batch index;
    the remaining readings are still stored.
    """
    result = service.ingest_readings(req.station_id, req.readings)
    return IngestResponse(
        station_id=req.station_id,
        timestamp=datetime.now(timezone.utc).isoformat(),
        **result.to_dict(),
    )
