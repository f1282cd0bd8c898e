"""
store.py — Station directory and per-station reading store.

Two contracts, each with an in-memory implementation that stands in for
a durable backend:

    StationDirectory   get / list / add / update_thresholds
    ReadingStore       upsert / latest / range_query / readings / count

Reading sequences are kept as immutable tuples sorted by ``ts``. An
upsert merges the incoming batch into a fresh tuple under a per-station
lock and publishes it with a single reference assignment, so readers
never take a lock and never observe a partially sorted sequence
(copy-on-write). Concurrent writers to the same station are serialised
by the lock, which prevents lost updates.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from groundwater.core.errors import NotFoundError
from groundwater.timeseries.models import (
    IngestResult,
    Reading,
    Station,
    Thresholds,
    to_utc,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Station directory
# ═══════════════════════════════════════════════════════════════════════════

class StationDirectory(ABC):
    """Read-mostly lookup of provisioned stations."""

    @abstractmethod
    def get(self, station_id: str) -> Optional[Station]:
        ...

    @abstractmethod
    def list(self) -> List[Station]:
        ...

    @abstractmethod
    def add(self, station: Station) -> None:
        ...

    @abstractmethod
    def update_thresholds(self, station_id: str, thresholds: Thresholds) -> Station:
        ...

    def require(self, station_id: str) -> Station:
        """Return the station or raise ``NotFoundError``."""
        station = self.get(station_id)
        if station is None:
            raise NotFoundError("Station", station_id=station_id)
        return station


class InMemoryStationDirectory(StationDirectory):

    def __init__(self, stations: Iterable[Station] = ()):
        self._stations: Dict[str, Station] = {}
        self._lock = threading.Lock()
        for s in stations:
            self.add(s)

    def get(self, station_id: str) -> Optional[Station]:
        return self._stations.get(station_id)

    def list(self) -> List[Station]:
        return list(self._stations.values())

    def add(self, station: Station) -> None:
        with self._lock:
            self._stations[station.id] = station

    def update_thresholds(self, station_id: str, thresholds: Thresholds) -> Station:
        with self._lock:
            station = self._stations.get(station_id)
            if station is None:
                raise NotFoundError("Station", station_id=station_id)
            updated = replace(station, thresholds=thresholds)
            self._stations[station_id] = updated
        return updated

    def __len__(self) -> int:
        return len(self._stations)


# ═══════════════════════════════════════════════════════════════════════════
# Reading store
# ═══════════════════════════════════════════════════════════════════════════

class ReadingStore(ABC):
    """Per-station ordered reading sequences with upsert-by-ts semantics."""

    @abstractmethod
    def upsert(self, station_id: str, readings: Sequence[Reading]) -> IngestResult:
        ...

    @abstractmethod
    def all_readings(self, station_id: str) -> Tuple[Reading, ...]:
        """Full sorted sequence for a station (empty if none)."""

    def latest(self, station_id: str) -> Optional[Reading]:
        seq = self.all_readings(station_id)
        return seq[-1] if seq else None

    def range_query(
        self, station_id: str, start: datetime, end: datetime,
    ) -> List[Reading]:
        """Readings with ``start <= ts <= end`` (inclusive both ends)."""
        start, end = to_utc(start), to_utc(end)
        return [r for r in self.all_readings(station_id) if start <= r.ts <= end]

    @abstractmethod
    def count(self) -> int:
        """Total number of stored readings across all stations."""


class InMemoryReadingStore(ReadingStore):
    """
    Process-local store keyed by station id.

    Parameters
    ----------
    directory : StationDirectory
        Used to reject upserts for unknown stations.
    """

    def __init__(self, directory: StationDirectory):
        self._directory = directory
        self._series: Dict[str, Tuple[Reading, ...]] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, station_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(station_id)
            if lock is None:
                lock = self._locks[station_id] = threading.Lock()
            return lock

    def upsert(self, station_id: str, readings: Sequence[Reading]) -> IngestResult:
        self._directory.require(station_id)

        with self._lock_for(station_id):
            merged = {r.ts: r for r in self._series.get(station_id, ())}
            for reading in readings:
                reading = replace(reading, station_id=station_id, ts=to_utc(reading.ts))
                merged[reading.ts] = reading
            # single reference swap publishes the new snapshot
            self._series[station_id] = tuple(sorted(merged.values(), key=lambda r: r.ts))

        logger.debug(
            "Upserted %d readings for %s", len(readings), station_id,
            extra={"station_id": station_id, "reading_count": len(readings)},
        )
        return IngestResult(inserted_or_updated=len(readings))

    def all_readings(self, station_id: str) -> Tuple[Reading, ...]:
        return self._series.get(station_id, ())

    def count(self) -> int:
        return sum(len(seq) for seq in list(self._series.values()))
