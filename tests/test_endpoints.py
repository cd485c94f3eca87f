import pytest
from fastapi.testclient import TestClient

from config import settings
from db.sample_data import SAMPLE_REQUEST
from main import app, create_app
from services.errors import InvalidCalculationInputError

client = TestClient(app)
HEADERS = {"X-API-Key": settings.api_key}


def test_health():
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_parse_sig():
    response = client.post(
        "/api/v1/parse-sig/",
        json={"sig": "Take 1 tablet in the morning and 1 tablet at bedtime"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["kind"] == "complex"
    assert body["is_complex"] is True
    assert body["frequency"] == 2


def test_missing_api_key_is_rejected():
    response = client.post("/api/v1/parse-sig/", json={"sig": "Take 1 tablet daily"})

    assert response.status_code in (401, 403)


def test_wrong_api_key_is_rejected():
    response = client.post(
        "/api/v1/parse-sig/", json={"sig": "Take 1 tablet daily"}, headers={"X-API-Key": "wrong"},
    )

    assert response.status_code == 401


def test_calculate():
    response = client.post("/api/v1/calculate/", json=SAMPLE_REQUEST, headers=HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["result"]["total_quantity"] == 60
    assert body["result"]["dispense_plan"][0]["count"] == 2
    assert body["processing_time_ms"] >= 0


@pytest.mark.parametrize("days_supply", [0, -5, settings.max_days_supply + 1])
def test_calculate_rejects_days_supply(days_supply):
    payload = dict(SAMPLE_REQUEST, days_supply=days_supply)

    response = client.post("/api/v1/calculate/", json=payload, headers=HEADERS)

    assert response.status_code == 422


def test_calculate_maps_invalid_input_to_400(monkeypatch):
    def reject(request, interpreter=None):
        raise InvalidCalculationInputError("days_supply", 0, "days_supply must be a positive integer")

    monkeypatch.setattr("api.endpoints.calculate", reject)

    response = client.post("/api/v1/calculate/", json=SAMPLE_REQUEST, headers=HEADERS)

    assert response.status_code == 400


def test_sample_calculation_endpoint():
    response = client.get("/api/v1/test-calculation/", headers=HEADERS)

    assert response.status_code == 200
    warnings = response.json()["result"]["warnings"]
    assert [w["type"] for w in warnings] == ["INACTIVE_NDC"]


def test_calculate_with_overflowing_dose():
    payload = dict(SAMPLE_REQUEST, sig="Take " + "9" * 400 + " tablets as needed", days_supply=10)

    response = client.post("/api/v1/calculate/", json=payload, headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["result"]["total_quantity"] == 5


def test_routes_are_mounted_under_prefix():
    paths = {route.path for route in app.routes}

    assert {"/api/v1/calculate/", "/api/v1/parse-sig/", "/api/v1/health"} <= paths


def test_cors_origins_come_from_settings(monkeypatch):
    monkeypatch.setattr(settings, "cors_origins", ["http://pharmacy.example"])
    configured = TestClient(create_app())

    response = configured.get("/api/v1/health", headers={"Origin": "http://pharmacy.example"})

    assert response.headers["access-control-allow-origin"] == "http://pharmacy.example"
