"""
sample_data.py — Deterministic demo stations and readings.

Populates a directory and store with DWLR stations across Indian states.
Thresholds follow the field convention used for provisioning:

    normal   ∈ [15, 25) m
    warning  = 0.7 · normal
    critical = 0.5 · normal

Each station gets four readings per UTC day (00, 06, 12, 18 h) for the
last ``days`` days, fluctuating between 60 % and 100 % of its normal
threshold with ±1 m of noise. Uses a seeded numpy Generator so repeated
runs produce identical data.
"""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, timezone
from typing import List, Tuple

import numpy as np

from groundwater.core.config import settings
from groundwater.timeseries.models import QualityFlag, Reading, Station, Thresholds
from groundwater.timeseries.store import ReadingStore, StationDirectory

logger = logging.getLogger(__name__)

READING_HOURS = (0, 6, 12, 18)

# id, name, district, state, lat, lon
STATION_CATALOGUE: List[Tuple[str, str, str, str, float, float]] = [
    ("DWLR_TN_001", "Namakkal - Town", "Namakkal", "Tamil Nadu", 11.2290, 78.1662),
    ("DWLR_TN_005", "Erode - Town (Brough Road)", "Erode", "Tamil Nadu", 11.3410, 77.7172),
    ("DWLR_TN_010", "Vellore - Town (Fort)", "Vellore", "Tamil Nadu", 12.9165, 79.1325),
    ("DWLR_TN_015", "Chennai - Adyar", "Chennai", "Tamil Nadu", 13.0100, 80.2600),
    ("DWLR_TN_016", "Chennai - Anna Nagar", "Chennai", "Tamil Nadu", 13.0900, 80.2100),
    ("DWLR_TN_021", "Coimbatore - RS Puram", "Coimbatore", "Tamil Nadu", 11.0168, 76.9558),
    ("DWLR_TN_023", "Madurai - KK Nagar", "Madurai", "Tamil Nadu", 9.9252, 78.1198),
    ("DWLR_TN_025", "Salem - Hasthampatti", "Salem", "Tamil Nadu", 11.6643, 78.1460),
    ("DWLR_IN_MH_01", "Mumbai - Andheri", "Mumbai", "Maharashtra", 19.1136, 72.8697),
    ("DWLR_IN_MH_02", "Pune - Shivajinagar", "Pune", "Maharashtra", 18.5304, 73.8526),
    ("DWLR_IN_GJ_01", "Ahmedabad - SG Highway", "Ahmedabad", "Gujarat", 23.0225, 72.5714),
    ("DWLR_IN_RJ_01", "Jaipur - MI Road", "Jaipur", "Rajasthan", 26.9124, 75.7873),
    ("DWLR_IN_RJ_02", "Jodhpur - Sardarpura", "Jodhpur", "Rajasthan", 26.2389, 73.0243),
    ("DWLR_IN_UP_01", "Lucknow - Hazratganj", "Lucknow", "Uttar Pradesh", 26.8467, 80.9462),
    ("DWLR_IN_MP_01", "Bhopal - New Market", "Bhopal", "Madhya Pradesh", 23.2599, 77.4126),
    ("DWLR_IN_KA_01", "Bengaluru - Koramangala", "Bengaluru", "Karnataka", 12.9352, 77.6245),
    ("DWLR_IN_AP_02", "Vijayawada - MG Road", "Vijayawada", "Andhra Pradesh", 16.5062, 80.6480),
    ("DWLR_IN_KL_02", "Kochi - Marine Drive", "Ernakulam", "Kerala", 9.9312, 76.2673),
    ("DWLR_IN_WB_01", "Kolkata - Park Street", "Kolkata", "West Bengal", 22.5535, 88.3512),
    ("DWLR_IN_AS_01", "Guwahati - Dispur", "Kamrup Metropolitan", "Assam", 26.1445, 91.7362),
    ("DWLR_IN_BR_01", "Patna - Gandhi Maidan", "Patna", "Bihar", 25.6116, 85.1376),
    ("DWLR_IN_PB_01", "Ludhiana - Feroze Gandhi", "Ludhiana", "Punjab", 30.9010, 75.8573),
    ("DWLR_IN_DL_01", "New Delhi - Connaught Place", "New Delhi", "Delhi", 28.6315, 77.2167),
    ("DWLR_IN_TG_01", "Hyderabad - Secunderabad", "Hyderabad", "Telangana", 17.4399, 78.4983),
]

CREATED_AT = datetime(2020, 1, 1, tzinfo=timezone.utc)


def build_stations(count: int, rng: np.random.Generator) -> List[Station]:
    stations = []
    for sid, name, district, state, lat, lon in STATION_CATALOGUE[:count]:
        normal = 15.0 + float(rng.random()) * 10.0
        stations.append(Station(
            id=sid,
            name=name,
            lat=lat,
            lon=lon,
            state=state,
            district=district,
            thresholds=Thresholds(
                normal=normal,
                warning=normal * 0.7,
                critical=normal * 0.5,
            ),
            created_at=CREATED_AT,
            elevation_m=float(rng.integers(50, 550)),
            metadata={"installation_date": "2020-01-01", "sensor_type": "DWLR"},
        ))
    return stations


def build_readings(
    station: Station,
    now: datetime,
    days: int,
    rng: np.random.Generator,
) -> List[Reading]:
    readings = []
    today = now.astimezone(timezone.utc).date()
    for d in range(days):
        day = today - timedelta(days=d)
        for hour in READING_HOURS:
            ts = datetime.combine(day, time(hour), tzinfo=timezone.utc)
            if ts > now:
                continue
            base = station.thresholds.normal * (0.6 + float(rng.random()) * 0.4)
            level = base + (float(rng.random()) - 0.5) * 2.0
            readings.append(Reading(
                station_id=station.id,
                ts=ts,
                level=round(level, 2),
                qc=QualityFlag.OK,
            ))
    return readings


def seed_sample_data(
    directory: StationDirectory,
    store: ReadingStore,
    now: datetime,
    *,
    count: int = settings.SAMPLE_STATION_COUNT,
    days: int = settings.SAMPLE_HISTORY_DAYS,
    seed: int = settings.SAMPLE_SEED,
) -> int:
    """Provision demo stations with readings; returns the station count."""
    rng = np.random.default_rng(seed)
    stations = build_stations(count, rng)
    for station in stations:
        directory.add(station)
        store.upsert(station.id, build_readings(station, now, days, rng))

    logger.info(
        "Seeded %d sample stations with %d days of readings",
        len(stations), days,
    )
    return len(stations)
