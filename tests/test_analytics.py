"""GA4 sunucu olayları: payload biçimi, yapılandırma yoksa gönderim yok."""
import pytest
from fastapi.testclient import TestClient

from tonguemap.services import analytics


def test_build_payload_drops_none_and_adds_engagement():
    payload = analytics.build_payload(
        [{"name": "analysis_complete", "params": {"a": 1, "b": None}}], client_id="c1", user_id=5
    )
    assert payload["client_id"] == "c1"
    assert payload["user_id"] == "5"
    assert payload["events"] == [{"name": "analysis_complete", "params": {"a": 1, "engagement_time_msec": "1"}}]


def test_generated_client_id_shape():
    ts, rand = analytics.generate_client_id().split(".")
    assert ts.isdigit() and len(rand) == 12


def test_not_configured_does_not_send(monkeypatch):
    sent = []
    monkeypatch.setattr(analytics, "_send", lambda payload: sent.append(payload) or True)
    assert analytics.track_server_event("login") is False
    assert sent == []


def test_configured_sends(monkeypatch):
    sent = []
    monkeypatch.setattr(analytics.settings, "ga_measurement_id", "G-TEST")
    monkeypatch.setattr(analytics.settings, "ga_api_secret", "secret")
    monkeypatch.setattr(analytics, "_send", lambda payload: sent.append(payload) or True)
    assert analytics.track_subscription_event("created", "sub_1", "premium", user_id=3, value=9.99) is True
    event = sent[0]["events"][0]
    assert event["name"] == "subscription_created"
    assert event["params"]["value"] == 9.99
    assert event["params"]["subscription_tier"] == "premium"


def test_unknown_subscription_event_type():
    with pytest.raises(ValueError):
        analytics.track_subscription_event("refunded", "sub_1", "premium")


def test_empty_batch():
    assert analytics.track_batch_events([]) is False


def test_track_route_rejects_unknown_event(client: TestClient):
    r = client.post("/api/analytics/track", json={"name": "made_up_event"})
    assert r.status_code == 400
    assert r.json() == {"error": "Unknown event name: made_up_event"}


def test_track_route_accepts_catalog_event(client: TestClient, auth_headers: dict, monkeypatch):
    calls = []
    monkeypatch.setattr(
        analytics, "track_server_event", lambda name, params, client_id=None, user_id=None: calls.append((name, user_id))
    )
    r = client.post(
        "/api/analytics/track",
        json={"name": "camera_used", "params": {"source": "scan"}, "clientId": "123.abc"},
        headers=auth_headers,
    )
    assert r.status_code == 200
    assert r.json()["received"] is True
    assert calls[0][0] == "camera_used"
    assert calls[0][1] is not None


def test_events_catalog(client: TestClient):
    j = client.get("/api/analytics/events").json()
    assert j["ANALYSIS_COMPLETE"] == "analysis_complete"
