"""
aggregator.py — Interval bucketing and range-wide statistics.

Bucketing rules
---------------
Daily
    Key is the UTC calendar date. Bucket timestamp is that date at
    00:00:00Z, level is the mean of member levels (2 dp), quality is the
    quality of the first member in time order (not a majority vote).

Weekly
    Key is ``{year}-W{ceil((ts - Jan 1 of year) / 7 days)}`` in UTC. This
    is NOT the ISO-8601 week: an instant at exactly Jan 1 00:00:00Z falls
    in ``W0`` and the last days of a year never roll into week 1 of the
    next. Bucket timestamp is the first member's raw ``ts``.

Buckets are returned in chronological order.
"""

from __future__ import annotations

import math
from collections import OrderedDict
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Iterable, List, Sequence, Union

import numpy as np

from groundwater.core.errors import ValidationError
from groundwater.timeseries.models import (
    Bucket,
    Interval,
    RangeAggregates,
    Reading,
    to_utc,
)

WEEK = timedelta(days=7)

SeriesItem = Union[Reading, Bucket]


def day_key(ts: datetime) -> date:
    """UTC calendar date of an instant."""
    return to_utc(ts).date()


def week_key(ts: datetime) -> str:
    ts = to_utc(ts)
    jan1 = datetime(ts.year, 1, 1, tzinfo=timezone.utc)
    week = math.ceil((ts - jan1) / WEEK)
    return f"{ts.year}-W{week}"


def _group(readings: Iterable[Reading], key: Callable[[datetime], object]) -> "OrderedDict[object, List[Reading]]":
    groups: "OrderedDict[object, List[Reading]]" = OrderedDict()
    for r in sorted(readings, key=lambda r: r.ts):
        groups.setdefault(key(r.ts), []).append(r)
    return groups


def _mean_level(members: Sequence[Reading]) -> float:
    return round(float(np.mean([m.level for m in members])), 2)


def daily_bucket(readings: Iterable[Reading]) -> List[Bucket]:
    """Group readings by UTC day."""
    groups = _group(readings, day_key)
    return [
        Bucket(
            key=day.isoformat(),
            ts=datetime.combine(day, time.min, tzinfo=timezone.utc),
            level=_mean_level(members),
            qc=members[0].qc,
            count=len(members),
        )
        for day, members in sorted(groups.items())
    ]


def weekly_bucket(readings: Iterable[Reading]) -> List[Bucket]:
    """Group readings by the calendar-year week key (see module docstring)."""
    groups = _group(readings, week_key)
    buckets = [
        Bucket(
            key=str(key),
            ts=members[0].ts,
            level=_mean_level(members),
            qc=members[0].qc,
            count=len(members),
        )
        for key, members in groups.items()
    ]
    return sorted(buckets, key=lambda b: b.ts)


def bucket(readings: Sequence[Reading], interval: Union[Interval, str]) -> List[SeriesItem]:
    """Dispatch on interval; ``raw`` returns the readings untouched."""
    try:
        interval = Interval(interval)
    except ValueError:
        raise ValidationError(
            f"Unknown interval '{interval}'",
            field="interval",
            allowed=[i.value for i in Interval],
        ) from None

    if interval is Interval.DAILY:
        return list(daily_bucket(readings))
    if interval is Interval.WEEKLY:
        return list(weekly_bucket(readings))
    return list(readings)


def range_aggregates(series: Sequence[SeriesItem]) -> RangeAggregates:
    """avg / min / max (2 dp) and count; an empty series yields zeros."""
    if not series:
        return RangeAggregates()

    levels = np.array([item.level for item in series], dtype=np.float64)
    return RangeAggregates(
        avg_level=round(float(levels.mean()), 2),
        min_level=round(float(levels.min()), 2),
        max_level=round(float(levels.max()), 2),
        count=len(series),
    )
