"""
Tests for threshold classification and the cross-station dashboard.

Run with:
    pytest tests/test_classifier_dashboard.py -v
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import numpy as np
import pytest

from groundwater.timeseries.classifier import StationStatus, classify_level
from groundwater.timeseries.dashboard import DashboardSummarizer
from groundwater.timeseries.models import Thresholds
from groundwater.timeseries.store import InMemoryReadingStore, InMemoryStationDirectory

from conftest import DEFAULT_THRESHOLDS, NOW, make_station, reading

SEVERITY = {
    StationStatus.NORMAL: 0,
    StationStatus.WARNING: 1,
    StationStatus.CRITICAL: 2,
}


# ═══════════════════════════════════════════════════════════════════════════
# Classification
# ═══════════════════════════════════════════════════════════════════════════

class TestClassifyLevel:
    def test_example_critical(self):
        t = Thresholds(normal=18, warning=12.6, critical=9)
        assert classify_level(8.5, t) == StationStatus.CRITICAL

    def test_warning(self):
        assert classify_level(10.0, DEFAULT_THRESHOLDS) == StationStatus.WARNING

    def test_normal(self):
        assert classify_level(20.0, DEFAULT_THRESHOLDS) == StationStatus.NORMAL

    def test_between_warning_and_normal_is_normal(self):
        assert classify_level(15.0, DEFAULT_THRESHOLDS) == StationStatus.NORMAL

    def test_boundaries_inclusive(self):
        assert classify_level(9.0, DEFAULT_THRESHOLDS) == StationStatus.CRITICAL
        assert classify_level(12.6, DEFAULT_THRESHOLDS) == StationStatus.WARNING

    def test_monotone_in_level(self):
        levels = np.linspace(30.0, -5.0, 400)
        severities = [SEVERITY[classify_level(float(l), DEFAULT_THRESHOLDS)] for l in levels]
        assert all(a <= b for a, b in zip(severities, severities[1:]))
        assert set(severities) == {0, 1, 2}


# ═══════════════════════════════════════════════════════════════════════════
# Dashboard
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def populated():
    directory = InMemoryStationDirectory([
        make_station("A"), make_station("B"), make_station("C"),
    ])
    store = InMemoryReadingStore(directory)
    store.upsert("A", [
        reading(datetime(2024, 6, 14, 6, tzinfo=timezone.utc), 10.0, "A"),
        reading(datetime(2024, 6, 14, 18, tzinfo=timezone.utc), 12.0, "A"),
        reading(datetime(2024, 6, 15, 6, tzinfo=timezone.utc), 8.5, "A"),
        reading(datetime(2024, 6, 12, 23, 59, tzinfo=timezone.utc), 30.0, "A"),
    ])
    store.upsert("B", [
        reading(datetime(2024, 6, 15, 0, tzinfo=timezone.utc), 15.0, "B"),
    ])
    return DashboardSummarizer(directory, store, clock=lambda: NOW)


class TestSnapshot:
    def test_counts_and_mean(self, populated):
        snap = populated.snapshot()
        assert snap.total_stations == 3
        assert snap.reporting_stations == 2
        assert snap.counts.critical == 1
        assert snap.counts.warning == 0
        assert snap.counts.normal == 1
        assert snap.avg_level == 11.75

    def test_station_without_readings_excluded(self, populated):
        snap = populated.snapshot()
        total = snap.counts.critical + snap.counts.warning + snap.counts.normal
        assert total == 2

    def test_empty_store(self):
        directory = InMemoryStationDirectory([make_station("A")])
        dash = DashboardSummarizer(directory, InMemoryReadingStore(directory), lambda: NOW)
        snap = dash.snapshot()
        assert snap.avg_level == 0.0
        assert snap.to_dict()["critical_count"] == 0


class TestTrend:
    def test_window_days_oldest_first(self, populated):
        trend = populated.trend(window_days=3)
        assert [d.day for d in trend] == [date(2024, 6, 13), date(2024, 6, 14), date(2024, 6, 15)]

    def test_day_without_readings(self, populated):
        day = populated.trend(window_days=3)[0]
        assert day.avg_level is None
        assert (day.counts.critical, day.counts.warning, day.counts.normal) == (0, 0, 0)

    def test_station_daily_mean_classified(self, populated):
        day = populated.trend(window_days=3)[1]
        assert day.avg_level == 11.0
        assert day.counts.warning == 1
        assert day.counts.normal == 0

    def test_cross_station_mean(self, populated):
        day = populated.trend(window_days=3)[2]
        assert day.avg_level == 11.75
        assert day.counts.critical == 1
        assert day.counts.normal == 1

    def test_default_window_length(self, populated):
        trend = populated.trend()
        assert len(trend) == 30
        assert trend[-1].day == NOW.date()
        assert trend[0].day == NOW.date() - timedelta(days=29)

    def test_reading_outside_window_ignored(self, populated):
        days = {d.day: d for d in populated.trend(window_days=4)}
        # 23:59 on the 12th belongs to the 12th only
        assert days[date(2024, 6, 12)].avg_level == 30.0
        assert days[date(2024, 6, 13)].avg_level is None

    def test_to_dict(self, populated):
        d = populated.trend(window_days=1)[0].to_dict()
        assert d["date"] == "2024-06-15"
        assert set(d) == {"date", "avg_level", "critical_count", "warning_count", "normal_count"}
