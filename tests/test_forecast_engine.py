"""
Tests for the linear-trend forecast engine.

Covers:
    • OLS regression and the zero-denominator rule
    • Degraded result for short histories
    • Projection origin, rounding and monotonicity
    • Trend deadband, risk tiers, alert flag
    • Confidence penalty and cap
    • Error cases (unknown station, invalid horizon)

Run with:
    pytest tests/test_forecast_engine.py -v
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from groundwater.core.errors import NotFoundError, ValidationError
from groundwater.ml.forecast_engine import (
    INSUFFICIENT_DATA_RECOMMENDATION,
    RECOMMENDATIONS,
    ForecastEngine,
    RiskLevel,
    TrendClass,
    assess_risk,
    classify_trend,
    estimate_confidence,
    linear_regression,
    should_alert,
)

from conftest import DEFAULT_THRESHOLDS, NOW, daily_readings

SID = "DWLR_TEST_01"


@pytest.fixture
def engine(directory, store, clock) -> ForecastEngine:
    return ForecastEngine(directory, store, clock)


def linear(n: int, start: float, step: float):
    return [start + step * i for i in range(n)]


# ═══════════════════════════════════════════════════════════════════════════
# Building blocks
# ═══════════════════════════════════════════════════════════════════════════

class TestLinearRegression:
    def test_exact_line(self):
        x = np.arange(10, dtype=float)
        fit = linear_regression(x, 2.0 * x + 3.0)
        assert fit.slope == pytest.approx(2.0)
        assert fit.intercept == pytest.approx(3.0)
        assert fit.r_squared == pytest.approx(1.0)
        assert fit.n_points == 10

    def test_flat_series_has_zero_r(self):
        x = np.arange(10, dtype=float)
        fit = linear_regression(x, np.full(10, 10.0))
        assert fit.slope == 0.0
        assert fit.intercept == pytest.approx(10.0)
        assert fit.r_squared == 0.0

    def test_single_x_value(self):
        fit = linear_regression(np.zeros(3), np.array([1.0, 2.0, 3.0]))
        assert fit.slope == 0.0
        assert fit.r_squared == 0.0

    def test_noisy_r_squared_in_unit_interval(self):
        rng = np.random.default_rng(7)
        x = np.arange(50, dtype=float)
        fit = linear_regression(x, 0.05 * x + rng.normal(0, 1.0, 50))
        assert 0.0 <= fit.r_squared <= 1.0


class TestClassifiers:
    @pytest.mark.parametrize("change,expected", [
        (0.51, TrendClass.RISING),
        (0.5, TrendClass.STABLE),
        (0.0, TrendClass.STABLE),
        (-0.5, TrendClass.STABLE),
        (-0.51, TrendClass.DECLINING),
    ])
    def test_trend_deadband(self, change, expected):
        assert classify_trend(change) == expected

    def test_risk_tiers_strict(self):
        assert assess_risk(8.99, DEFAULT_THRESHOLDS) == RiskLevel.CRITICAL
        assert assess_risk(9.0, DEFAULT_THRESHOLDS) == RiskLevel.MODERATE
        assert assess_risk(12.59, DEFAULT_THRESHOLDS) == RiskLevel.MODERATE
        assert assess_risk(12.6, DEFAULT_THRESHOLDS) == RiskLevel.LOW

    def test_alert_only_below_critical(self):
        assert should_alert(8.0, DEFAULT_THRESHOLDS, RiskLevel.CRITICAL)
        assert not should_alert(10.0, DEFAULT_THRESHOLDS, RiskLevel.MODERATE)

    @pytest.mark.parametrize("r2,n,expected", [
        (1.0, 90, 95.0),
        (1.0, 10, 80.0),
        (0.5, 90, 50.0),
        (0.5, 29, 40.0),
        (0.0, 90, 0.0),
        (0.76, 10, 60.8),
        (0.125, 40, 13.0),
        (0.125, 10, 10.4),
    ])
    def test_confidence(self, r2, n, expected):
        assert estimate_confidence(r2, n) == pytest.approx(expected)


# ═══════════════════════════════════════════════════════════════════════════
# Engine
# ═══════════════════════════════════════════════════════════════════════════

class TestInsufficientData:
    def test_fewer_than_five_points(self, engine, store):
        store.upsert(SID, daily_readings([10.0, 10.2, 10.1, 10.3]))
        result = engine.forecast(SID, 30)
        assert result.trend is TrendClass.UNKNOWN
        assert result.confidence == 0.0
        assert result.predicted_series == []
        assert result.predicted_change == 0.0
        assert result.recommendation == INSUFFICIENT_DATA_RECOMMENDATION
        assert result.alert_message == "No"
        assert result.is_degraded

    def test_no_readings(self, engine):
        result = engine.forecast(SID, 60)
        assert result.trend is TrendClass.UNKNOWN
        assert result.current_level is None
        assert result.history_points == 0

    def test_old_readings_outside_window_ignored(self, engine, store):
        old_end = NOW - timedelta(days=120)
        store.upsert(SID, daily_readings(linear(20, 10.0, 0.1), end=old_end))
        assert engine.forecast(SID, 30).trend is TrendClass.UNKNOWN


class TestFlatHistory:
    def test_ninety_identical_days_is_stable(self, engine, store):
        store.upsert(SID, daily_readings([10.0] * 90))
        result = engine.forecast(SID, 30)
        assert result.trend is TrendClass.STABLE
        assert result.predicted_change == pytest.approx(0.0)
        assert all(p.level == 10.0 for p in result.predicted_series)
        assert result.confidence == 0.0
        assert result.risk_level is RiskLevel.MODERATE
        assert not result.alert_triggered


class TestRisingHistory:
    @pytest.fixture(autouse=True)
    def _history(self, store):
        store.upsert(SID, daily_readings(linear(60, 5.0, 0.1)))

    def test_trend_and_change(self, engine):
        result = engine.forecast(SID, 30)
        assert result.trend is TrendClass.RISING
        assert result.current_level == pytest.approx(10.9)
        assert result.predicted_change == pytest.approx(3.0)
        assert result.risk_level is RiskLevel.LOW
        assert result.recommendation == f"Suggested Action: {RECOMMENDATIONS[TrendClass.RISING]}"

    def test_projection_origin_is_first_bucket(self, engine):
        series = engine.forecast(SID, 30).predicted_series
        assert len(series) == 30
        assert series[0].ts == datetime(2024, 6, 16, tzinfo=timezone.utc)
        assert series[0].level == pytest.approx(11.0)
        assert series[-1].level == pytest.approx(13.9)

    def test_longer_horizon_not_lower(self, engine):
        series = engine.forecast(SID, 90).predicted_series
        levels = [p.level for p in series]
        assert all(a <= b for a, b in zip(levels, levels[1:]))
        assert engine.forecast(SID, 90).final_level >= engine.forecast(SID, 30).final_level

    def test_confidence_capped(self, engine):
        assert engine.forecast(SID, 30).confidence == 95.0

    def test_levels_rounded(self, engine):
        for p in engine.forecast(SID, 45).predicted_series:
            assert p.level == round(p.level, 2)


class TestDecliningHistory:
    def test_critical_alert(self, engine, store):
        store.upsert(SID, daily_readings(linear(60, 20.0, -0.2)))
        result = engine.forecast(SID, 30)
        assert result.trend is TrendClass.DECLINING
        assert result.predicted_change == pytest.approx(-6.0)
        assert result.final_level == pytest.approx(2.2)
        assert result.risk_level is RiskLevel.CRITICAL
        assert result.alert_triggered
        assert "30 days" in result.alert_message

    def test_short_history_penalty(self, engine, store):
        store.upsert(SID, daily_readings(linear(10, 20.0, -0.2)))
        assert engine.forecast(SID, 30).confidence == pytest.approx(80.0)


class TestErrors:
    def test_unknown_station(self, engine):
        with pytest.raises(NotFoundError):
            engine.forecast("NOPE", 30)

    @pytest.mark.parametrize("horizon", [0, -5, 10_000])
    def test_invalid_horizon(self, engine, horizon):
        with pytest.raises(ValidationError):
            engine.forecast(SID, horizon)


class TestSerialisation:
    def test_to_dict(self, engine, store):
        store.upsert(SID, daily_readings(linear(40, 15.0, -0.01)))
        d = engine.forecast(SID, 60).to_dict()
        assert d["forecast_horizon"] == "60 Days"
        assert d["trend_classification"] in {"Rising", "Stable", "Declining"}
        assert 0 <= d["confidence_score"] <= 95
        assert len(d["predicted_time_series"]) == 60
        assert d["predicted_time_series"][0]["type"] == "predicted"
        assert d["system_note"] == "Forecast Data - Experimental Overlay"
