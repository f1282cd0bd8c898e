"""
Health check aggregation — deep health probe for the running service.

Checks:
    • Station directory (stations provisioned)
    • Reading store (readings held, stations reporting)

Returns a structured health report suitable for liveness / readiness
probes and monitoring dashboards.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List

from groundwater.core.config import settings
from groundwater.timeseries.store import ReadingStore, StationDirectory

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"  # partial functionality
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    name: str
    status: HealthStatus = HealthStatus.HEALTHY
    latency_ms: float = 0.0
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "latency_ms": round(self.latency_ms, 2),
        }
        if self.message:
            d["message"] = self.message
        if self.details:
            d["details"] = self.details
        return d


@dataclass
class HealthReport:
    status: HealthStatus = HealthStatus.HEALTHY
    version: str = settings.APP_VERSION
    environment: str = settings.ENVIRONMENT
    timestamp: str = ""
    uptime_seconds: float = 0.0
    components: List[ComponentHealth] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "version": self.version,
            "environment": self.environment,
            "timestamp": self.timestamp or datetime.now(timezone.utc).isoformat(),
            "uptime_seconds": round(self.uptime_seconds, 1),
            "components": [c.to_dict() for c in self.components],
        }


_start_time = time.monotonic()


def check_station_directory(directory: StationDirectory) -> ComponentHealth:
    comp = ComponentHealth(name="station_directory")
    start = time.monotonic()
    n = len(directory.list())
    comp.details = {"stations": n}
    if n == 0:
        comp.status = HealthStatus.DEGRADED
        comp.message = "No stations provisioned"
    else:
        comp.message = f"{n} stations provisioned"
    comp.latency_ms = (time.monotonic() - start) * 1000
    return comp


def check_reading_store(
    directory: StationDirectory, store: ReadingStore,
) -> ComponentHealth:
    comp = ComponentHealth(name="reading_store")
    start = time.monotonic()
    reporting = sum(1 for s in directory.list() if store.latest(s.id) is not None)
    comp.details = {"readings": store.count(), "reporting_stations": reporting}
    comp.message = "In-memory store available"
    comp.latency_ms = (time.monotonic() - start) * 1000
    return comp


def run_health_check(directory: StationDirectory, store: ReadingStore) -> HealthReport:
    """Run all health checks and aggregate into a report."""
    report = HealthReport(
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime_seconds=time.monotonic() - _start_time,
    )

    report.components.append(check_station_directory(directory))
    report.components.append(check_reading_store(directory, store))

    statuses = [c.status for c in report.components]
    if HealthStatus.UNHEALTHY in statuses:
        report.status = HealthStatus.UNHEALTHY
    elif HealthStatus.DEGRADED in statuses:
        report.status = HealthStatus.DEGRADED
    else:
        report.status = HealthStatus.HEALTHY

    return report
