"""Shared fixtures: fixed clock, stations and pre-wired services."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List

import pytest

from groundwater.service import MonitoringService
from groundwater.timeseries.models import QualityFlag, Reading, Station, Thresholds
from groundwater.timeseries.store import InMemoryReadingStore, InMemoryStationDirectory

# Fixed "now" used by every clock-dependent test
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)

DEFAULT_THRESHOLDS = Thresholds(normal=18.0, warning=12.6, critical=9.0)


def make_station(
    sid: str = "DWLR_TEST_01",
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
    state: str = "Tamil Nadu",
    district: str = "Chennai",
) -> Station:
    return Station(
        id=sid,
        name=f"{district} - {sid}",
        lat=13.0100,
        lon=80.2600,
        state=state,
        district=district,
        thresholds=thresholds,
        created_at=datetime(2020, 1, 1, tzinfo=timezone.utc),
    )


def reading(
    ts: datetime,
    level: float,
    sid: str = "DWLR_TEST_01",
    qc: QualityFlag = QualityFlag.OK,
) -> Reading:
    return Reading(station_id=sid, ts=ts, level=level, qc=qc)


def daily_readings(
    levels: Iterable[float],
    sid: str = "DWLR_TEST_01",
    end: datetime = NOW,
) -> List[Reading]:
    """One reading per day ending at ``end``; levels are oldest first."""
    levels = list(levels)
    n = len(levels)
    return [
        reading(end - timedelta(days=n - 1 - i), level, sid)
        for i, level in enumerate(levels)
    ]


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: NOW


@pytest.fixture
def directory() -> InMemoryStationDirectory:
    return InMemoryStationDirectory([make_station()])


@pytest.fixture
def store(directory) -> InMemoryReadingStore:
    return InMemoryReadingStore(directory)


@pytest.fixture
def service(directory, store, clock) -> MonitoringService:
    return MonitoringService(directory, store, clock)
