"""API endpoint tests using FastAPI TestClient.

These tests use dependency overrides to provide a service backed by an
in-memory store, testing the API layer in isolation from any database.
"""

import random
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from main import app
from seeder.api import get_seeder
from seeder.service import SeederContext, SeederService
from seeder.stores.memory import InMemoryHealthStore
from seeder.stores.protocol import StoreUnavailableError
from tests.conftest import SEED_DAY

PROBLEM_JSON = "application/problem+json"


def _client_for(store: InMemoryHealthStore):
    service = SeederService(
        store=store,
        rng=random.Random(3),
        tz=ZoneInfo("UTC"),
        context=SeederContext(selected_date=SEED_DAY),
    )
    app.dependency_overrides[get_seeder] = lambda: service
    return service


@pytest.fixture
def store():
    return InMemoryHealthStore()


@pytest.fixture
def client(store):
    """FastAPI test client with an in-memory store."""
    service = _client_for(store)
    with TestClient(app) as c:
        yield c, service
    app.dependency_overrides.clear()


@pytest.fixture
def authorized_client(client):
    c, service = client
    resp = c.post("/api/v1/authorization")
    assert resp.status_code == 200
    return c, service


class TestHealthEndpoint:
    def test_health(self):
        with TestClient(app) as c:
            resp = c.get("/health")
            assert resp.status_code == 200
            assert resp.json() == {"status": "ok"}

    def test_request_id_echoed(self, client):
        c, _ = client
        resp = c.get("/health", headers={"X-Request-ID": "abc-123"})
        assert resp.headers["X-Request-ID"] == "abc-123"


class TestCatalogEndpoint:
    def test_lists_metrics_in_display_order(self, client):
        c, _ = client
        resp = c.get("/api/v1/metrics/catalog")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert [m["display_order"] for m in data] == list(range(8))
        assert data[0] == {
            "metric": "sleep",
            "title": "Sleep",
            "unit": None,
            "mock_range": [6.5, 8.5],
            "display_order": 0,
        }
        assert resp.json()["meta"]["api_version"] == "v1"


class TestAuthorizationEndpoint:
    def test_initial_state_unknown(self, client):
        c, _ = client
        resp = c.get("/api/v1/authorization")
        assert resp.status_code == 200
        assert resp.json()["data"]["authorization_state"] == "unknown"

    def test_grant(self, client):
        c, _ = client
        resp = c.post("/api/v1/authorization")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["authorization_state"] == "authorized"
        assert data["selected_date"] == SEED_DAY.isoformat()
        assert data["status_message"] is None

    def test_denied_returns_403_problem(self):
        _client_for(InMemoryHealthStore(authorizes=False))
        with TestClient(app) as c:
            resp = c.post("/api/v1/authorization")
        app.dependency_overrides.clear()
        assert resp.status_code == 403
        assert resp.headers["content-type"] == PROBLEM_JSON
        assert resp.json()["title"] == "Authorization Denied"

    def test_unavailable_returns_503_problem(self):
        _client_for(InMemoryHealthStore(available=False))
        with TestClient(app) as c:
            resp = c.post("/api/v1/authorization")
        app.dependency_overrides.clear()
        assert resp.status_code == 503
        assert resp.json()["detail"] == "Health data is not available on this device."


class TestReadingsEndpoint:
    def test_requires_authorization(self, client):
        c, _ = client
        resp = c.get(f"/api/v1/days/{SEED_DAY.isoformat()}/readings")
        assert resp.status_code == 403
        assert resp.headers["content-type"] == PROBLEM_JSON

    def test_invalid_date_returns_422(self, authorized_client):
        c, _ = authorized_client
        resp = c.get("/api/v1/days/2024-13-45/readings")
        assert resp.status_code == 422
        body = resp.json()
        assert body["title"] == "Validation Error"
        assert "violations" in body

    def test_empty_day(self, authorized_client):
        c, _ = authorized_client
        resp = c.get(f"/api/v1/days/{SEED_DAY.isoformat()}/readings")
        assert resp.status_code == 200
        readings = resp.json()["data"]["readings"]
        assert len(readings) == 8
        assert all(r["value"] is None for r in readings)
        assert all(r["display_text"] == "—" for r in readings)
        assert readings[0]["sleep"] is None


class TestMockDataEndpoint:
    def test_requires_authorization(self, client):
        c, _ = client
        resp = c.post(f"/api/v1/days/{SEED_DAY.isoformat()}/mock-data")
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Request HealthKit access before generating data."

    def test_generates_and_reads_back(self, authorized_client, store):
        c, _ = authorized_client
        resp = c.post(f"/api/v1/days/{SEED_DAY.isoformat()}/mock-data")
        assert resp.status_code == 201

        data = resp.json()["data"]
        assert data["samples_written"] == len(store.samples)
        assert data["samples_by_metric"]["steps"] == 1
        assert data["window"]["start"] == "2024-03-15T00:00:00+00:00"

        by_metric = {r["metric"]: r for r in data["readings"]}
        sleep = by_metric["sleep"]["sleep"]
        assert [s["stage"] for s in sleep["stages"]] == ["deep", "core", "rem", "awake"]
        asleep_pct = sum(s["percentage"] for s in sleep["stages"] if s["stage"] != "awake")
        assert asleep_pct == pytest.approx(100.0, abs=0.5)
        assert by_metric["steps"]["value"] is not None

    def test_readings_after_generation(self, authorized_client):
        c, _ = authorized_client
        c.post(f"/api/v1/days/{SEED_DAY.isoformat()}/mock-data")
        resp = c.get(f"/api/v1/days/{SEED_DAY.isoformat()}/readings")
        by_metric = {r["metric"]: r for r in resp.json()["data"]["readings"]}
        assert by_metric["sleep"]["value"] > 0
        assert by_metric["sleep"]["display_text"].endswith("m")

    def test_write_failure_returns_502(self, authorized_client, store):
        c, _ = authorized_client
        store.fail_writes = "Store is read-only."
        resp = c.post(f"/api/v1/days/{SEED_DAY.isoformat()}/mock-data")
        assert resp.status_code == 502
        assert resp.headers["content-type"] == PROBLEM_JSON
        assert resp.json()["detail"] == "Store is read-only."
        assert store.samples == []

        state = c.get("/api/v1/authorization").json()["data"]
        assert state["status_message"] == "Store is read-only."
        assert state["is_generating"] is False

    def test_read_back_failure_after_write_is_still_201(self, authorized_client, store):
        c, _ = authorized_client
        with patch.object(
            store, "sum_quantity", side_effect=StoreUnavailableError("read timed out")
        ):
            resp = c.post(f"/api/v1/days/{SEED_DAY.isoformat()}/mock-data")

        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["samples_written"] == len(store.samples) > 0
        assert data["readings"] == []

        state = c.get("/api/v1/authorization").json()["data"]
        assert state["status_message"] == "read timed out"
        assert state["is_loading"] is False
