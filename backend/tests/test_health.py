from fastapi.testclient import TestClient

from forecaster.main import app

client = TestClient(app)


def test_health_returns_200():
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["config"]["default_horizon_days"] == 90
    assert data["config"]["max_period_buckets"] == 20


def test_forecast_no_body_returns_422():
    response = client.post("/api/forecast/run")
    assert response.status_code == 422
