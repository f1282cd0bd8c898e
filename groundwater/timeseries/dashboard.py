"""
dashboard.py — Cross-station snapshot and rolling daily trend.

Snapshot
    Classifies the latest reading of every station that has one.
    Stations without readings are left out of the counts and the mean
    entirely (the per-station views report them as ``unknown`` instead).

Trend
    For each of the last ``window_days`` UTC calendar days, oldest first:
    the per-station daily mean is classified against that station's
    thresholds, and the day's level is the mean of those per-station
    means. A day with no readings anywhere has ``avg_level = None`` and
    zero counts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from groundwater.core.config import settings
from groundwater.timeseries.aggregator import day_key
from groundwater.timeseries.classifier import StationStatus, classify_level
from groundwater.timeseries.models import utc_now
from groundwater.timeseries.store import ReadingStore, StationDirectory

logger = logging.getLogger(__name__)


@dataclass
class StatusCounts:
    critical: int = 0
    warning: int = 0
    normal: int = 0

    def add(self, status: StationStatus) -> None:
        if status is StationStatus.CRITICAL:
            self.critical += 1
        elif status is StationStatus.WARNING:
            self.warning += 1
        else:
            self.normal += 1


@dataclass
class DashboardSnapshot:
    total_stations: int
    counts: StatusCounts
    avg_level: float
    reporting_stations: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_stations": self.total_stations,
            "reporting_stations": self.reporting_stations,
            "critical_count": self.counts.critical,
            "warning_count": self.counts.warning,
            "normal_count": self.counts.normal,
            "avg_level": self.avg_level,
        }


@dataclass
class TrendDay:
    day: date
    avg_level: Optional[float]
    counts: StatusCounts = field(default_factory=StatusCounts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.day.isoformat(),
            "avg_level": self.avg_level,
            "critical_count": self.counts.critical,
            "warning_count": self.counts.warning,
            "normal_count": self.counts.normal,
        }


class DashboardSummarizer:
    """Cross-station rollups over the shared reading store."""

    def __init__(
        self,
        directory: StationDirectory,
        store: ReadingStore,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.directory = directory
        self.store = store
        self.clock = clock

    def snapshot(self) -> DashboardSnapshot:
        stations = self.directory.list()
        counts = StatusCounts()
        levels: List[float] = []

        for station in stations:
            latest = self.store.latest(station.id)
            if latest is None:
                continue
            counts.add(classify_level(latest.level, station.thresholds))
            levels.append(latest.level)

        avg = round(float(np.mean(levels)), 2) if levels else 0.0
        return DashboardSnapshot(
            total_stations=len(stations),
            counts=counts,
            avg_level=avg,
            reporting_stations=len(levels),
        )

    def trend(self, window_days: int = settings.DASHBOARD_TREND_DAYS) -> List[TrendDay]:
        today = self.clock().astimezone(timezone.utc).date()
        days = [today - timedelta(days=d) for d in range(window_days - 1, -1, -1)]
        if not days:
            return []

        window_start = datetime.combine(days[0], time.min, tzinfo=timezone.utc)
        window_end = datetime.combine(days[-1], time.max, tzinfo=timezone.utc)

        # day -> per-station daily means
        per_day: Dict[date, List[float]] = {d: [] for d in days}
        trend = {d: TrendDay(day=d, avg_level=None) for d in days}

        for station in self.directory.list():
            by_day: Dict[date, List[float]] = {}
            for r in self.store.range_query(station.id, window_start, window_end):
                by_day.setdefault(day_key(r.ts), []).append(r.level)

            for d, day_levels in by_day.items():
                if d not in trend:
                    continue
                day_avg = float(np.mean(day_levels))
                per_day[d].append(day_avg)
                trend[d].counts.add(classify_level(day_avg, station.thresholds))

        for d in days:
            if per_day[d]:
                trend[d].avg_level = round(float(np.mean(per_day[d])), 2)

        return [trend[d] for d in days]
