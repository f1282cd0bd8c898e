"""
classifier.py — Threshold-based station status.

A lower water level means a more depleted water table, so thresholds
act as lower bounds:

    level ≤ critical   → critical
    level ≤ warning    → warning
    otherwise          → normal

Comparisons are inclusive, so a level sitting exactly on a threshold
takes the worse class.
"""

from __future__ import annotations

from enum import Enum

from groundwater.timeseries.models import Thresholds


class StationStatus(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"
    UNKNOWN = "unknown"     # station has no readings yet


def classify_level(level: float, thresholds: Thresholds) -> StationStatus:
    """Map a water level onto {normal, warning, critical}."""
    if level <= thresholds.critical:
        return StationStatus.CRITICAL
    if level <= thresholds.warning:
        return StationStatus.WARNING
    return StationStatus.NORMAL
