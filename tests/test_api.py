"""
HTTP adapter tests using FastAPI's TestClient.

Run with:
    pytest tests/test_api.py -v
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from groundwater.core.config import Settings
from groundwater.main import create_app

from conftest import daily_readings

SID = "DWLR_TEST_01"


@pytest.fixture
def client(service, store):
    store.upsert(SID, daily_readings([20.0 - 0.2 * i for i in range(60)]))
    app = create_app(service, seed=False)
    with TestClient(app) as c:
        yield c


class TestIngestEndpoint:
    def test_partial_rejection(self, client):
        resp = client.post("/api/v1/ingest", json={
            "station_id": SID,
            "readings": [
                {"ts": "2024-06-15T13:00:00Z", "level": 7.9, "qc": "OK"},
                {"ts": "2024-06-15T14:00:00Z", "level": "n/a"},
            ],
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["inserted_or_updated"] == 1
        assert body["rejected"] == 1
        assert body["errors"][0]["index"] == 1

    def test_non_object_items_rejected_individually(self, client):
        resp = client.post("/api/v1/ingest", json={
            "station_id": SID,
            "readings": [
                {"ts": "2024-06-15T13:00:00Z", "level": 7.9},
                "garbage",
                None,
            ],
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["inserted_or_updated"] == 1
        assert body["rejected"] == 2
        assert [e["index"] for e in body["errors"]] == [1, 2]

        latest = client.get(f"/api/v1/stations/{SID}/latest").json()
        assert latest["reading"]["level"] == pytest.approx(7.9)

    def test_unknown_station_404(self, client):
        resp = client.post("/api/v1/ingest", json={
            "station_id": "NOPE",
            "readings": [{"ts": "2024-06-15T13:00:00Z", "level": 7.9}],
        })
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"

    def test_empty_batch_rejected(self, client):
        resp = client.post("/api/v1/ingest", json={"station_id": SID, "readings": []})
        assert resp.status_code == 422


class TestStationEndpoints:
    def test_list(self, client):
        body = client.get("/api/v1/stations").json()
        assert body["total"] == 1
        assert body["stations"][0]["status"] == "critical"

    def test_detail(self, client):
        body = client.get(f"/api/v1/stations/{SID}").json()
        assert body["id"] == SID
        assert body["thresholds"]["critical"] == 9.0

    def test_detail_unknown(self, client):
        assert client.get("/api/v1/stations/NOPE").status_code == 404

    def test_latest(self, client):
        body = client.get(f"/api/v1/stations/{SID}/latest").json()
        assert body["reading"]["level"] == pytest.approx(8.2)
        assert body["reading"]["ts"] == "2024-06-15T12:00:00Z"

    def test_timeseries_weekly(self, client):
        resp = client.get(
            f"/api/v1/stations/{SID}/timeseries",
            params={"interval": "weekly", "from": "2024-06-01T00:00:00Z", "to": "2024-06-15T23:59:59Z"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["interval"] == "weekly"
        assert sum(b["count"] for b in body["data"]) == 15
        assert body["aggregates"]["count"] == len(body["data"])

    def test_timeseries_bad_interval(self, client):
        resp = client.get(f"/api/v1/stations/{SID}/timeseries", params={"interval": "hourly"})
        assert resp.status_code == 422


class TestDashboardEndpoint:
    def test_summary(self, client):
        body = client.get("/api/v1/dashboard/summary", params={"days": 7}).json()
        assert body["total_stations"] == 1
        assert body["critical_count"] == 1
        assert len(body["trend"]) == 7


class TestPredictionEndpoints:
    def test_forecast(self, client):
        body = client.get(f"/api/v1/prediction/forecast/{SID}", params={"horizon": 60}).json()
        assert body["forecast_horizon"] == "60 Days"
        assert body["trend_classification"] == "Declining"
        assert body["risk_level"] == "Critical Risk"
        assert body["alert_trigger"].startswith("Predicted groundwater depletion")
        assert len(body["predicted_time_series"]) == 60

    def test_forecast_unknown_station(self, client):
        resp = client.get("/api/v1/prediction/forecast/NOPE")
        assert resp.status_code == 404

    def test_forecast_bad_horizon(self, client):
        resp = client.get(f"/api/v1/prediction/forecast/{SID}", params={"horizon": 0})
        assert resp.status_code == 422

    def test_simulate(self, client):
        body = client.get(
            f"/api/v1/prediction/simulate/{SID}", params={"scenario": "conservation"},
        ).json()
        assert body["scenario"] == "conservation"
        assert "Conservation Measures Implemented" in body["system_note"]

    def test_simulate_requires_scenario(self, client):
        assert client.get(f"/api/v1/prediction/simulate/{SID}").status_code == 422

    def test_scenarios_listing(self, client):
        body = client.get("/api/v1/prediction/scenarios").json()
        assert {s["scenario"] for s in body} == {"increased_pumping", "reduced_rainfall", "conservation"}


class TestHealth:
    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        names = {c["name"] for c in body["components"]}
        assert names == {"station_directory", "reading_store"}

    def test_request_id_header(self, client):
        resp = client.get("/health/live", headers={"X-Request-ID": "abc123"})
        assert resp.headers["X-Request-ID"] == "abc123"


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.FORECAST_HISTORY_DAYS == 90
        assert s.SIMULATION_HORIZON_DAYS == 30

    def test_only_consumed_keys_declared(self):
        fields = set(Settings.model_fields)
        assert not {"HOST", "PORT", "RELOAD"} & fields
        assert not hasattr(Settings, "is_development")
