"""
Data models for stations, readings and derived time-series views.

Stations are provisioned externally and are immutable apart from their
thresholds. Readings are owned by exactly one station and are keyed by
their UTC instant. Buckets and aggregates are derived per request and
never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from groundwater.core.errors import ValidationError


# ═══════════════════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════════════════

class QualityFlag(str, Enum):
    """Quality-control flag attached to every reading."""
    OK = "OK"
    WARNING = "WARNING"
    ERROR = "ERROR"


class Interval(str, Enum):
    """Time-series resolution requested by callers."""
    RAW = "raw"
    DAILY = "daily"
    WEEKLY = "weekly"


# ═══════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════

def to_utc(ts: datetime) -> datetime:
    """Normalise an instant to UTC; naive values are taken as UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_z(ts: datetime) -> str:
    """ISO-8601 with a trailing ``Z`` (``2024-03-01T00:00:00Z``)."""
    return to_utc(ts).isoformat().replace("+00:00", "Z")


# ═══════════════════════════════════════════════════════════════════════════
# Station
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Thresholds:
    """
    Depth thresholds for a station, in metres.

    Lower water level means a more depleted aquifer, so the thresholds
    are lower bounds: ``normal > warning > critical`` must always hold.
    """
    normal: float
    warning: float
    critical: float

    def __post_init__(self) -> None:
        if not (self.normal > self.warning > self.critical):
            raise ValidationError(
                "Thresholds must satisfy normal > warning > critical",
                field="thresholds",
                normal=self.normal,
                warning=self.warning,
                critical=self.critical,
            )

    def to_dict(self) -> Dict[str, float]:
        return {
            "normal": round(self.normal, 2),
            "warning": round(self.warning, 2),
            "critical": round(self.critical, 2),
        }


@dataclass(frozen=True)
class Station:
    """A fixed groundwater monitoring point (DWLR)."""
    id: str
    name: str
    lat: float
    lon: float
    state: str
    district: str
    thresholds: Thresholds
    created_at: datetime
    elevation_m: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "state": self.state,
            "district": self.district,
            "lat": self.lat,
            "lon": self.lon,
            "elevation_m": self.elevation_m,
            "metadata": self.metadata,
            "thresholds": self.thresholds.to_dict(),
            "created_at": isoformat_z(self.created_at),
        }


# ═══════════════════════════════════════════════════════════════════════════
# Readings
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Reading:
    """One timestamped water-level observation for a station."""
    station_id: str
    ts: datetime                    # UTC instant, unique per station
    level: float                    # metres
    qc: QualityFlag = QualityFlag.OK
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return f"{self.station_id}_{isoformat_z(self.ts)}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "station_id": self.station_id,
            "ts": isoformat_z(self.ts),
            "level": self.level,
            "qc": self.qc.value,
            "raw": self.raw,
        }


@dataclass(frozen=True)
class Bucket:
    """Aggregate of the readings falling into one day or week."""
    key: str
    ts: datetime
    level: float
    qc: QualityFlag
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "ts": isoformat_z(self.ts),
            "level": self.level,
            "qc": self.qc.value,
            "count": self.count,
        }


@dataclass(frozen=True)
class RangeAggregates:
    avg_level: float = 0.0
    min_level: float = 0.0
    max_level: float = 0.0
    count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "avg_level": self.avg_level,
            "min_level": self.min_level,
            "max_level": self.max_level,
            "count": self.count,
        }


@dataclass
class IngestError:
    index: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "message": self.message}


@dataclass
class IngestResult:
    """Outcome of one ingestion batch."""
    inserted_or_updated: int = 0
    rejected: int = 0
    errors: List[IngestError] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inserted_or_updated": self.inserted_or_updated,
            "rejected": self.rejected,
            "errors": [e.to_dict() for e in self.errors],
        }
