"""
Forecasting: linear-trend projections and policy scenarios.
"""

from .forecast_engine import ForecastEngine, ForecastResult, RiskLevel, TrendClass
from .scenario import Scenario, ScenarioSimulator

__all__ = [
    "ForecastEngine",
    "ForecastResult",
    "RiskLevel",
    "TrendClass",
    "Scenario",
    "ScenarioSimulator",
]
