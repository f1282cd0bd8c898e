"""
Pydantic schemas for the HTTP adapter.

Request bodies are validated here; individual readings are validated
later, one by one, so a single bad item cannot fail the whole batch.
"""

from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class IngestRequest(BaseModel):
    """Request body for POST /api/v1/ingest."""
    station_id: str = Field(..., min_length=1, examples=["DWLR_TN_015"])
    readings: List[Any] = Field(
        ...,
        min_length=1,
        description="Readings as {ts, level, qc?, raw?}; validated per item",
        examples=[[{"ts": "2024-03-01T06:00:00Z", "level": 12.4, "qc": "OK"}]],
    )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class IngestErrorOut(BaseModel):
    index: int
    message: str


class IngestResponse(BaseModel):
    station_id: str
    inserted_or_updated: int
    rejected: int
    errors: List[IngestErrorOut]
    timestamp: str

