from pathlib import Path
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from detour_pricing.main import create_app
from detour_pricing.persistence.filesystem import FileStorage
from detour_pricing.services.distance.cache import MemoryDistanceCache
from detour_pricing.services.distance.provider import DistanceProvider


class DummyRoutes:
    def __init__(self, table: dict) -> None:
        self.table = table

    def compute_distance(self, origin: str, destination: str) -> float:
        return self.table[(origin, destination)]


@pytest.fixture
def api_client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    from detour_pricing.services.pricing import service as pricing_service

    provider = DistanceProvider(
        DummyRoutes(
            {
                ("Toronto", "Mississauga"): 10_000,
                ("Toronto", "Hamilton"): 40_000,
                ("Mississauga", "Hamilton"): 32_000,
            }
        ),
        cache=MemoryDistanceCache(),
    )
    monkeypatch.setattr(pricing_service, "DistanceProvider", SimpleNamespace(from_settings=lambda: provider))
    monkeypatch.setattr(pricing_service, "FileStorage", lambda: FileStorage(root=tmp_path))

    return TestClient(create_app())


def _jobs_payload() -> list[dict]:
    return [
        {"job_id": "4", "location": "Mississauga", "technician": "Alex", "service_date": "2025-03-10"},
        {"job_id": "5", "location": "Hamilton", "technician": "Alex", "service_date": "2025-03-10"},
        {"job_id": "6", "location": "Oshawa", "technician": "Sam", "service_date": "2025-03-10"},
    ]


def test_health(api_client: TestClient):
    response = api_client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_price_day_endpoint(api_client: TestClient, tmp_path: Path):
    response = api_client.post(
        "/api/pricing/day",
        json={
            "technician": "Alex",
            "service_date": "2025-03-10",
            "base_location": "Toronto",
            "persist": True,
            "jobs": _jobs_payload(),
        },
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["anchor_job_id"] == "5"
    assert [(job["job_id"], job["role"], job["value"]) for job in payload["jobs"]] == [
        ("4", "satellite_on_route", 140),
        ("5", "anchor", 260),
    ]
    output_dirs = list((tmp_path / "outputs").glob("pricing_2025-03-10_*"))
    assert output_dirs
    assert (output_dirs[0] / "summary.json").exists()


def test_price_day_endpoint_empty_plan(api_client: TestClient):
    response = api_client.post(
        "/api/pricing/day",
        json={"technician": "Robin", "service_date": "2025-03-10", "jobs": _jobs_payload()},
    )

    assert response.status_code == 400
    assert "Robin" in response.json()["detail"]


def test_price_feed_endpoint(api_client: TestClient):
    response = api_client.post("/api/pricing/feed", json={"base_location": "Toronto", "jobs": _jobs_payload()})

    assert response.status_code == 200
    payload = response.json()
    assert payload["metadata"]["plan_count"] == 2
    assert payload["plans"][1]["jobs"][0]["role"] == "sole"
    assert payload["plans"][1]["jobs"][0]["value"] == 260


def test_rates_endpoint(api_client: TestClient):
    response = api_client.get("/api/pricing/rates")

    assert response.status_code == 200
    payload = response.json()
    assert payload["thresholds_km"][0] == 50
    assert payload["premium"]["minimum_value"] == 290


def test_routes_health_reports_failure(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    from detour_pricing.api.routes import health

    def broken_client():
        raise ValueError("API key not configured.")

    monkeypatch.setattr(health, "_get_routes_client", lambda: broken_client)

    response = api_client.get("/api/health/routes")

    assert response.status_code == 200
    assert response.json() == {"service": "routes", "healthy": False, "error": "API key not configured."}


def test_price_day_endpoint_accepts_sheet_row_ids_and_times(api_client: TestClient):
    response = api_client.post(
        "/api/pricing/day",
        json={
            "technician": " Alex ",
            "service_date": "2025-03-10 07:45:00",
            "base_location": "Toronto",
            "jobs": [
                {"job_id": 4, "location": "Mississauga", "technician": "Alex", "service_date": "2025-03-10 09:30:00"},
                {"job_id": 5, "location": "Hamilton", "technician": "Alex", "service_date": "2025-03-10T13:00:00Z"},
            ],
        },
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["technician"] == "Alex"
    assert payload["service_date"] == "2025-03-10"
    assert payload["anchor_job_id"] == "5"
    assert [job["job_id"] for job in payload["jobs"]] == ["4", "5"]
