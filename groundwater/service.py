"""
service.py — Facade over storage, aggregation and forecasting.

This is the surface consumed by the HTTP layer (or any other caller):

    ingest_readings(station_id, readings)   → IngestResult
    latest_reading(station_id)              → Reading | None
    time_series(station_id, start, end, interval, page, limit)
    dashboard_summary(window_days)          → {snapshot, trend}
    forecast(station_id, horizon_days)      → ForecastResult
    simulate(station_id, scenario)          → ForecastResult
    list_stations(...) / station_detail(station_id)

Unknown station ids raise ``NotFoundError`` everywhere. All components
share one clock so trend windows and forecast horizons agree on "now".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from groundwater.core.config import settings
from groundwater.core.errors import ValidationError
from groundwater.ml.forecast_engine import ForecastEngine, ForecastResult
from groundwater.ml.scenario import Scenario, ScenarioSimulator
from groundwater.timeseries.aggregator import SeriesItem, bucket, range_aggregates
from groundwater.timeseries.classifier import StationStatus, classify_level
from groundwater.timeseries.dashboard import DashboardSummarizer
from groundwater.timeseries.ingest import ReadingIn, parse_batch
from groundwater.timeseries.models import (
    IngestResult,
    Interval,
    RangeAggregates,
    Reading,
    Station,
    isoformat_z,
    to_utc,
    utc_now,
)
from groundwater.timeseries.store import (
    InMemoryReadingStore,
    InMemoryStationDirectory,
    ReadingStore,
    StationDirectory,
)

logger = logging.getLogger(__name__)


@dataclass
class TimeSeriesPage:
    station_id: str
    start: datetime
    end: datetime
    interval: Interval
    page: int
    limit: int
    total: int
    data: List[SeriesItem]
    aggregates: RangeAggregates

    def to_dict(self) -> Dict[str, Any]:
        return {
            "station_id": self.station_id,
            "from": isoformat_z(self.start),
            "to": isoformat_z(self.end),
            "interval": self.interval.value,
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "data": [item.to_dict() for item in self.data],
            "aggregates": self.aggregates.to_dict(),
        }


@dataclass
class StationSummary:
    station: Station
    status: StationStatus
    latest: Optional[Reading] = None

    def to_dict(self, detailed: bool = False) -> Dict[str, Any]:
        s = self.station
        d: Dict[str, Any] = {
            "id": s.id,
            "name": s.name,
            "state": s.state,
            "district": s.district,
            "lat": s.lat,
            "lon": s.lon,
            "status": self.status.value,
            "latest_level": self.latest.level if self.latest else None,
            "last_seen": isoformat_z(self.latest.ts) if self.latest else None,
        }
        if detailed:
            d.update({
                "elevation_m": s.elevation_m,
                "metadata": s.metadata,
                "thresholds": s.thresholds.to_dict(),
                "created_at": isoformat_z(s.created_at),
            })
        return d


@dataclass
class StationPage:
    page: int
    limit: int
    total: int
    stations: List[StationSummary] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "stations": [s.to_dict() for s in self.stations],
        }


def _paginate(items: Sequence[Any], page: int, limit: int) -> List[Any]:
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be positive", page=page, limit=limit)
    start = (page - 1) * limit
    return list(items[start:start + limit])


class MonitoringService:
    """Wires the store, aggregator, classifier, dashboard and forecasting."""

    def __init__(
        self,
        directory: Optional[StationDirectory] = None,
        store: Optional[ReadingStore] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.directory = directory if directory is not None else InMemoryStationDirectory()
        self.store = store if store is not None else InMemoryReadingStore(self.directory)
        self.clock = clock
        self.dashboard = DashboardSummarizer(self.directory, self.store, clock)
        self.engine = ForecastEngine(self.directory, self.store, clock)
        self.simulator = ScenarioSimulator(self.engine)

    # ── Ingestion ──

    def ingest_readings(
        self,
        station_id: str,
        readings: Sequence[Union[Mapping[str, Any], ReadingIn]],
    ) -> IngestResult:
        self.directory.require(station_id)

        valid, errors = parse_batch(station_id, readings)
        result = self.store.upsert(station_id, valid) if valid else IngestResult()
        result.rejected += len(errors)
        result.errors.extend(errors)

        logger.info(
            "Ingest %s: %d upserted, %d rejected",
            station_id, result.inserted_or_updated, result.rejected,
            extra={
                "station_id": station_id,
                "reading_count": result.inserted_or_updated,
                "rejected_count": result.rejected,
            },
        )
        return result

    # ── Queries ──

    def latest_reading(self, station_id: str) -> Optional[Reading]:
        self.directory.require(station_id)
        return self.store.latest(station_id)

    def station_status(self, station: Station) -> StationSummary:
        latest = self.store.latest(station.id)
        status = (
            classify_level(latest.level, station.thresholds)
            if latest else StationStatus.UNKNOWN
        )
        return StationSummary(station=station, status=status, latest=latest)

    def station_detail(self, station_id: str) -> StationSummary:
        return self.station_status(self.directory.require(station_id))

    def list_stations(
        self,
        *,
        state: Optional[str] = None,
        district: Optional[str] = None,
        status: Optional[Union[StationStatus, str]] = None,
        page: int = 1,
        limit: int = settings.STATION_PAGE_LIMIT,
    ) -> StationPage:
        summaries = [self.station_status(s) for s in self.directory.list()]
        if state:
            summaries = [s for s in summaries if s.station.state == state]
        if district:
            summaries = [s for s in summaries if s.station.district == district]
        if status:
            try:
                wanted = StationStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown status '{status}'", field="status") from None
            summaries = [s for s in summaries if s.status is wanted]

        return StationPage(
            page=page,
            limit=limit,
            total=len(summaries),
            stations=_paginate(summaries, page, limit),
        )

    def time_series(
        self,
        station_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        interval: Union[Interval, str] = Interval.DAILY,
        *,
        page: int = 1,
        limit: int = settings.TIMESERIES_PAGE_LIMIT,
    ) -> TimeSeriesPage:
        self.directory.require(station_id)

        end = to_utc(end) if end else self.clock()
        start = (
            to_utc(start) if start
            else end - timedelta(days=settings.TIMESERIES_DEFAULT_LOOKBACK_DAYS)
        )
        if start > end:
            raise ValidationError("'from' must not be after 'to'", field="from")

        readings = self.store.range_query(station_id, start, end)
        series = bucket(readings, interval)

        return TimeSeriesPage(
            station_id=station_id,
            start=start,
            end=end,
            interval=Interval(interval),
            page=page,
            limit=limit,
            total=len(series),
            data=_paginate(series, page, limit),
            aggregates=range_aggregates(series),
        )

    def dashboard_summary(
        self, window_days: int = settings.DASHBOARD_TREND_DAYS,
    ) -> Dict[str, Any]:
        return {
            "snapshot": self.dashboard.snapshot(),
            "trend": self.dashboard.trend(window_days),
        }

    # ── Forecasting ──

    def forecast(self, station_id: str, horizon_days: int = 30) -> ForecastResult:
        return self.engine.forecast(station_id, horizon_days)

    def simulate(self, station_id: str, scenario: Union[Scenario, str]) -> ForecastResult:
        return self.simulator.simulate(station_id, scenario)
