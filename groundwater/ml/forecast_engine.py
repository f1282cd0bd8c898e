"""
forecast_engine.py — Linear-trend groundwater level forecasting.

Projects a station's water level 30 / 60 / 90 days ahead from its recent
daily history and classifies the outcome against the station thresholds.

Pipeline:
    ┌──────────────────────────────────────────────────────┐
    │  Raw readings (last 90 days)                         │
    │  → daily buckets (mean level per UTC day)            │
    └──────────────┬───────────────────────────────────────┘
                   ▼
    ┌──────────────────────────────────────────────────────┐
    │  < 5 buckets?  → degraded result (trend Unknown)     │
    └──────────────┬───────────────────────────────────────┘
                   ▼
    ┌──────────────────────────────────────────────────────┐
    │  OLS fit: level = slope · x + intercept              │
    │  x = days since first bucket, r² from cov / var      │
    └──────────────┬───────────────────────────────────────┘
                   ▼
    ┌──────────────────────────────────────────────────────┐
    │  Project days 1..H after the last bucket             │
    │  (x measured from the FIRST bucket, fixed origin)    │
    └──────────────┬───────────────────────────────────────┘
                   ▼
    ┌──────────────────────────────────────────────────────┐
    │  trend (±0.5 m deadband) · risk tier · alert flag    │
    │  confidence = r² × 100 (× 0.8 if < 30 pts), ≤ 95     │
    │  recommendation chosen by trend                      │
    └──────────────────────────────────────────────────────┘

The engine is deterministic: output depends only on the store contents,
the inputs, and the injected clock.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from groundwater.core.config import settings
from groundwater.core.errors import ValidationError
from groundwater.timeseries.aggregator import daily_bucket
from groundwater.timeseries.models import Bucket, Thresholds, isoformat_z, utc_now
from groundwater.timeseries.store import ReadingStore, StationDirectory

logger = logging.getLogger(__name__)

DAY = timedelta(days=1)


# ===================================================================
#  CONSTANTS
# ===================================================================

SYSTEM_NOTE = "Forecast Data - Experimental Overlay"

INSUFFICIENT_DATA_RECOMMENDATION = "Insufficient data for prediction."


class TrendClass(str, Enum):
    RISING = "Rising"
    STABLE = "Stable"
    DECLINING = "Declining"
    UNKNOWN = "Unknown"


class RiskLevel(str, Enum):
    CRITICAL = "Critical Risk"
    MODERATE = "Moderate Risk"
    LOW = "Low Risk"
    UNKNOWN = "Unknown"


RECOMMENDATIONS: Dict[TrendClass, str] = {
    TrendClass.DECLINING: (
        "Reduce groundwater pumping, Implement artificial recharge structures, "
        "Promote rainwater harvesting"
    ),
    TrendClass.STABLE: (
        "Maintain regulated extraction, Continue monitoring recharge patterns"
    ),
    TrendClass.RISING: "Encourage storage and sustainable usage planning",
}


# ===================================================================
#  DATA STRUCTURES
# ===================================================================


@dataclass(frozen=True)
class RegressionFit:
    """Ordinary least-squares fit of level on elapsed days."""
    slope: float = 0.0          # metres per day
    intercept: float = 0.0      # metres at x = 0
    r_squared: float = 0.0
    n_points: int = 0


@dataclass(frozen=True)
class ForecastPoint:
    ts: datetime
    level: float

    def to_dict(self) -> Dict[str, Any]:
        return {"ts": isoformat_z(self.ts), "level": self.level, "type": "predicted"}


@dataclass
class ForecastResult:
    """Forecast for a single station and horizon."""
    station_id: str
    horizon_days: int
    trend: TrendClass
    predicted_change: float           # metres, last projected − last actual
    risk_level: RiskLevel
    alert_triggered: bool
    confidence: float                 # 0–95
    recommendation: str
    predicted_series: List[ForecastPoint] = field(default_factory=list)
    current_level: Optional[float] = None
    history_points: int = 0
    system_note: str = SYSTEM_NOTE
    scenario: Optional[str] = None

    @property
    def horizon_label(self) -> str:
        return f"{self.horizon_days} Days"

    @property
    def alert_message(self) -> str:
        if not self.alert_triggered:
            return "No"
        return alert_message(self.horizon_days)

    @property
    def final_level(self) -> Optional[float]:
        return self.predicted_series[-1].level if self.predicted_series else None

    @property
    def is_degraded(self) -> bool:
        return self.trend is TrendClass.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        return {
            "station_id": self.station_id,
            "forecast_horizon": self.horizon_label,
            "horizon_days": self.horizon_days,
            "trend_classification": self.trend.value,
            "predicted_level_change": self.predicted_change,
            "predicted_level_change_display": f"{self.predicted_change} m",
            "risk_level": self.risk_level.value,
            "alert_triggered": self.alert_triggered,
            "alert_trigger": self.alert_message,
            "confidence_score": self.confidence,
            "confidence_display": f"{self.confidence:g}%",
            "conservation_recommendation": self.recommendation,
            "current_level": self.current_level,
            "history_points": self.history_points,
            "predicted_time_series": [p.to_dict() for p in self.predicted_series],
            "system_note": self.system_note,
            "scenario": self.scenario,
        }


# ===================================================================
#  1. REGRESSION
# ===================================================================


def elapsed_days(history: Sequence[Bucket]) -> np.ndarray:
    """Days since the first bucket, one value per bucket."""
    origin = history[0].ts
    return np.array([(b.ts - origin) / DAY for b in history], dtype=np.float64)


def linear_regression(x: np.ndarray, y: np.ndarray) -> RegressionFit:
    """
    OLS fit of ``y`` on ``x``.

    r is the covariance / variance ratio ``Sxy / sqrt(Sxx · Syy)`` and is
    defined as 0 when the denominator vanishes (flat series or a single
    x value), so r² is 0 as well.
    """
    n = len(x)
    if n == 0:
        return RegressionFit()

    dx = x - x.mean()
    dy = y - y.mean()
    sxx = float(np.dot(dx, dx))
    syy = float(np.dot(dy, dy))
    sxy = float(np.dot(dx, dy))

    slope = sxy / sxx if sxx > 0 else 0.0
    intercept = float(y.mean()) - slope * float(x.mean())

    denom = np.sqrt(sxx * syy)
    r = sxy / denom if denom > 0 else 0.0
    r_squared = min(r * r, 1.0)

    return RegressionFit(
        slope=slope, intercept=intercept, r_squared=r_squared, n_points=n,
    )


def project(
    fit: RegressionFit,
    history: Sequence[Bucket],
    horizon_days: int,
) -> List[ForecastPoint]:
    """
    Predicted level for each of the ``horizon_days`` days after the last
    bucket. x is measured from the first bucket, the same origin the fit
    was computed on.
    """
    origin = history[0].ts
    last = history[-1].ts
    points = []
    for i in range(1, horizon_days + 1):
        ts = last + i * DAY
        x = (ts - origin) / DAY
        points.append(ForecastPoint(ts=ts, level=round(fit.slope * x + fit.intercept, 2)))
    return points


# ===================================================================
#  2. CLASSIFICATION
# ===================================================================


def classify_trend(
    predicted_change: float,
    deadband: float = settings.FORECAST_TREND_DEADBAND_M,
) -> TrendClass:
    if predicted_change > deadband:
        return TrendClass.RISING
    if predicted_change < -deadband:
        return TrendClass.DECLINING
    return TrendClass.STABLE


def assess_risk(level: float, thresholds: Thresholds) -> RiskLevel:
    """Risk tier of a projected level; strict comparison, unlike status."""
    if level < thresholds.critical:
        return RiskLevel.CRITICAL
    if level < thresholds.warning:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def should_alert(level: float, thresholds: Thresholds, risk: RiskLevel) -> bool:
    # both conditions coincide today; kept separate so either can change
    return level < thresholds.critical or risk is RiskLevel.CRITICAL


def alert_message(horizon_days: int) -> str:
    return (
        "Predicted groundwater depletion risk detected within the next "
        f"{horizon_days} days."
    )


def estimate_confidence(
    r_squared: float,
    n_points: int,
    short_history_points: int = settings.FORECAST_SHORT_HISTORY_POINTS,
    short_history_penalty: float = settings.FORECAST_SHORT_HISTORY_PENALTY,
    cap: float = settings.FORECAST_CONFIDENCE_CAP,
) -> float:
    """
    ``r² × 100`` rounded half up, scaled by the short-history penalty
    when fewer than ``short_history_points`` daily points exist, clamped
    to [0, cap].
    """
    confidence = float(min(math.floor(r_squared * 100 + 0.5), 100))
    if n_points < short_history_points:
        confidence *= short_history_penalty
    return round(max(0.0, min(confidence, cap)), 1)


def recommendation_for(trend: TrendClass) -> str:
    if trend is TrendClass.UNKNOWN:
        return INSUFFICIENT_DATA_RECOMMENDATION
    return f"Suggested Action: {RECOMMENDATIONS[trend]}"


# ===================================================================
#  3. ENGINE
# ===================================================================


class ForecastEngine:
    """
    Station-level forecaster over the shared reading store.

    Parameters
    ----------
    directory, store
        Station lookup and reading source.
    clock
        Returns the "current time" reference; injected for determinism.
    history_days
        Lookback window for the daily history.
    min_points
        Below this many daily buckets the result is degraded.
    """

    def __init__(
        self,
        directory: StationDirectory,
        store: ReadingStore,
        clock: Callable[[], datetime] = utc_now,
        *,
        history_days: int = settings.FORECAST_HISTORY_DAYS,
        min_points: int = settings.FORECAST_MIN_POINTS,
        max_horizon_days: int = settings.FORECAST_MAX_HORIZON_DAYS,
        trend_deadband: float = settings.FORECAST_TREND_DEADBAND_M,
    ):
        self.directory = directory
        self.store = store
        self.clock = clock
        self.history_days = history_days
        self.min_points = min_points
        self.max_horizon_days = max_horizon_days
        self.trend_deadband = trend_deadband

    def history(self, station_id: str) -> List[Bucket]:
        """Daily buckets over the lookback window ending now."""
        now = self.clock()
        readings = self.store.range_query(
            station_id, now - timedelta(days=self.history_days), now,
        )
        return daily_bucket(readings)

    def forecast(self, station_id: str, horizon_days: int = 30) -> ForecastResult:
        station = self.directory.require(station_id)

        if not 1 <= horizon_days <= self.max_horizon_days:
            raise ValidationError(
                f"horizon_days must be between 1 and {self.max_horizon_days}",
                field="horizon_days",
                value=horizon_days,
            )

        history = self.history(station_id)

        if len(history) < self.min_points:
            logger.info(
                "Forecast degraded for %s: %d daily points (< %d)",
                station_id, len(history), self.min_points,
                extra={"station_id": station_id, "horizon_days": horizon_days},
            )
            return ForecastResult(
                station_id=station_id,
                horizon_days=horizon_days,
                trend=TrendClass.UNKNOWN,
                predicted_change=0.0,
                risk_level=RiskLevel.UNKNOWN,
                alert_triggered=False,
                confidence=0.0,
                recommendation=INSUFFICIENT_DATA_RECOMMENDATION,
                current_level=history[-1].level if history else None,
                history_points=len(history),
            )

        x = elapsed_days(history)
        y = np.array([b.level for b in history], dtype=np.float64)
        fit = linear_regression(x, y)

        series = project(fit, history, horizon_days)
        current = history[-1].level
        final = series[-1].level
        change = round(final - current, 2)

        trend = classify_trend(change, self.trend_deadband)
        risk = assess_risk(final, station.thresholds)

        result = ForecastResult(
            station_id=station_id,
            horizon_days=horizon_days,
            trend=trend,
            predicted_change=change,
            risk_level=risk,
            alert_triggered=should_alert(final, station.thresholds, risk),
            confidence=estimate_confidence(fit.r_squared, len(history)),
            recommendation=recommendation_for(trend),
            predicted_series=series,
            current_level=current,
            history_points=len(history),
        )

        logger.debug(
            "Forecast %s H=%d: slope=%.4f r2=%.3f trend=%s risk=%s",
            station_id, horizon_days, fit.slope, fit.r_squared,
            trend.value, risk.value,
            extra={"station_id": station_id, "horizon_days": horizon_days},
        )
        return result
