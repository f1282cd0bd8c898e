"""
ingest.py — Per-item validation at the ingestion boundary.

Every incoming reading is validated independently with the ``ReadingIn``
schema. Malformed items are reported back with their batch index and do
not abort the rest of the batch.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from groundwater.timeseries.models import IngestError, QualityFlag, Reading, to_utc

logger = logging.getLogger(__name__)


class ReadingIn(BaseModel):
    """One reading as submitted by a producer."""
    ts: datetime = Field(..., description="ISO-8601 instant; naive values are taken as UTC")
    level: float = Field(..., allow_inf_nan=False, description="Water level (m)")
    qc: QualityFlag = Field(QualityFlag.OK, description="Quality flag")
    raw: Dict[str, Any] = Field(default_factory=dict, description="Opaque producer payload")

    @field_validator("ts")
    @classmethod
    def _normalise_ts(cls, v: datetime) -> datetime:
        return to_utc(v)

    def to_reading(self, station_id: str) -> Reading:
        return Reading(
            station_id=station_id,
            ts=self.ts,
            level=self.level,
            qc=self.qc,
            raw=self.raw,
        )


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "reading"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def parse_batch(
    station_id: str,
    items: Sequence[Union[Mapping[str, Any], ReadingIn]],
) -> Tuple[List[Reading], List[IngestError]]:
    """Split a raw batch into valid readings and per-index errors."""
    readings: List[Reading] = []
    errors: List[IngestError] = []

    for idx, item in enumerate(items):
        if isinstance(item, ReadingIn):
            readings.append(item.to_reading(station_id))
            continue
        try:
            parsed = ReadingIn.model_validate(item)
        except ValidationError as exc:
            errors.append(IngestError(index=idx, message=_describe(exc)))
            continue
        readings.append(parsed.to_reading(station_id))

    if errors:
        logger.warning(
            "Rejected %d of %d readings for %s",
            len(errors), len(items), station_id,
            extra={"station_id": station_id, "rejected_count": len(errors)},
        )
    return readings, errors
