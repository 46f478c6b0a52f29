"""Rate limit: limit aşılınca 429 ve {"error"} gövdesi."""
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from slowapi.errors import RateLimitExceeded

from tonguemap.core.rate_limit import get_client_ip, limiter
from tonguemap.main import _rate_limit_handler


def _limited_app() -> FastAPI:
    app = FastAPI()
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)

    @app.get("/limited")
    @limiter.limit("3/minute")
    def limited(request: Request):
        return {"ok": True}

    return app


def test_limited_route_200_then_429():
    client = TestClient(_limited_app())
    for i in range(3):
        r = client.get("/limited")
        assert r.status_code == 200, f"Request {i+1} should be 200"
        assert r.json() == {"ok": True}
    r = client.get("/limited")
    assert r.status_code == 429
    assert r.json()["error"].startswith("Too many requests")


def test_client_ip_prefers_forwarded_header():
    client = TestClient(_limited_app())
    seen = {}

    app = client.app

    @app.get("/ip")
    def ip(request: Request):
        seen["ip"] = get_client_ip(request)
        return {}

    client.get("/ip", headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
    assert seen["ip"] == "203.0.113.7"
