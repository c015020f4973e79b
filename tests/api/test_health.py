from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import auth, valid_body


def test_health_returns_ok(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    # Redis is not configured under test
    assert data["checks"]["redis"] == "not_configured"


def test_health_reports_store_totals(client: TestClient, alice_token: str) -> None:
    assert client.get("/health").json()["store"] == {"total_created": 0}

    client.post("/v1/achievements", json=valid_body(), headers=auth(alice_token))

    assert client.get("/health").json()["store"] == {"total_created": 1}


def test_ready_returns_200(client: TestClient) -> None:
    resp = client.get("/ready")
    assert resp.status_code == 200
