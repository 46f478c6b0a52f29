"""Stripe checkout / portal / abonelik durumu (SDK çağrıları monkeypatch)."""
import stripe
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from tonguemap.models import Subscription
from tonguemap.services import billing


def _patch_stripe(monkeypatch, calls: dict):
    def create_customer(email, user_id):
        calls.setdefault("customer", []).append((email, user_id))
        return "cus_test_1"

    def create_checkout_session(customer_id, price_id, user_id):
        calls.setdefault("checkout", []).append((customer_id, price_id, user_id))
        return {"id": "cs_test_1", "url": "https://checkout.stripe.test/cs_test_1"}

    def create_portal_session(customer_id):
        calls.setdefault("portal", []).append(customer_id)
        return "https://billing.stripe.test/p/session"

    monkeypatch.setattr(billing, "create_customer", create_customer)
    monkeypatch.setattr(billing, "create_checkout_session", create_checkout_session)
    monkeypatch.setattr(billing, "create_portal_session", create_portal_session)


def test_checkout_requires_auth(client: TestClient):
    r = client.post("/api/stripe/checkout", json={"priceId": "price_x"})
    assert r.status_code == 401


def test_checkout_creates_customer_once(client: TestClient, auth_headers: dict, user_id: int, monkeypatch, db: Session):
    calls = {}
    _patch_stripe(monkeypatch, calls)
    r = client.post("/api/stripe/checkout", json={"priceId": "price_x"}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"sessionId": "cs_test_1", "url": "https://checkout.stripe.test/cs_test_1"}
    r = client.post("/api/stripe/checkout", json={"priceId": "price_x"}, headers=auth_headers)
    assert r.status_code == 200
    assert calls["customer"] == [("test@example.com", user_id)]
    assert calls["checkout"][1] == ("cus_test_1", "price_x", user_id)
    row = db.exec(select(Subscription).where(Subscription.user_id == user_id)).one()
    assert row.stripe_customer_id == "cus_test_1"
    assert row.tier == "free"


def test_checkout_default_price(client: TestClient, auth_headers: dict, monkeypatch):
    calls = {}
    _patch_stripe(monkeypatch, calls)
    r = client.post("/api/stripe/checkout", headers=auth_headers)
    assert r.status_code == 200
    assert calls["checkout"][0][1] == "price_test_premium"


def test_checkout_stripe_error(client: TestClient, auth_headers: dict, monkeypatch):
    def boom(email, user_id):
        raise stripe.APIConnectionError("network down")

    monkeypatch.setattr(billing, "create_customer", boom)
    r = client.post("/api/stripe/checkout", json={"priceId": "price_x"}, headers=auth_headers)
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to create checkout session"}


def test_checkout_without_stripe_key(client: TestClient, auth_headers: dict, monkeypatch):
    from tonguemap.api import billing as billing_api

    monkeypatch.setattr(billing_api, "is_stripe_configured", lambda: False)
    r = client.post("/api/stripe/checkout", headers=auth_headers)
    assert r.status_code == 500
    assert r.json() == {"error": "Payments are not configured"}


def test_portal_without_subscription(client: TestClient, auth_headers: dict):
    r = client.post("/api/stripe/portal", headers=auth_headers)
    assert r.status_code == 404
    assert r.json() == {"error": "No subscription found"}


def test_portal_with_customer(client: TestClient, auth_headers: dict, user_id: int, monkeypatch, db: Session):
    calls = {}
    _patch_stripe(monkeypatch, calls)
    db.add(Subscription(user_id=user_id, stripe_customer_id="cus_existing"))
    db.commit()
    r = client.post("/api/stripe/portal", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"url": "https://billing.stripe.test/p/session"}
    assert calls["portal"] == ["cus_existing"]


def test_subscription_status_defaults(client: TestClient, auth_headers: dict):
    r = client.get("/api/subscription/status", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"tier": "free", "status": "active", "hasPremium": False}


def test_subscription_status_anonymous(client: TestClient):
    r = client.get("/api/subscription/status")
    assert r.json() == {"tier": "free", "status": "active", "hasPremium": False}


def test_subscription_status_premium(client: TestClient, auth_headers: dict, user_id: int, db: Session):
    db.add(Subscription(user_id=user_id, tier="premium", status="active", cancel_at_period_end=True))
    db.commit()
    j = client.get("/api/subscription/status", headers=auth_headers).json()
    assert j["tier"] == "premium"
    assert j["hasPremium"] is True
    assert j["cancelAtPeriodEnd"] is True


def test_subscription_fields_reads_item_period():
    sub = {
        "id": "sub_1",
        "status": "active",
        "metadata": {"userId": "7"},
        "items": {"data": [{"price": {"id": "price_1"}, "current_period_start": 100, "current_period_end": 200}]},
    }
    fields = billing.subscription_fields(sub)
    assert fields["price_id"] == "price_1"
    assert fields["current_period_start"] == 100
    assert fields["current_period_end"] == 200
    assert fields["cancel_at_period_end"] is False
