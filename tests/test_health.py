"""Health endpoint."""
from fastapi.testclient import TestClient


def test_health_returns_ok(client: TestClient):
    r = client.get("/health")
    assert r.status_code == 200
    j = r.json()
    assert j.get("status") == "ok"
    assert j.get("openai_configured") is False
    assert j.get("stripe_configured") is True
    assert j.get("database") == "ok"


def test_request_id_header(client: TestClient):
    r = client.get("/health")
    assert r.headers.get("X-Request-ID")


def test_unknown_route_is_404(client: TestClient):
    r = client.get("/does-not-exist")
    assert r.status_code == 404
