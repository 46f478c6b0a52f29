"""Stripe webhook: imza doğrulama ve idempotent abonelik mutabakatı."""
import asyncio
import hashlib
import hmac
import json
import time

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from tonguemap.core.config import settings
from tonguemap.models import Subscription
from tonguemap.services import billing

PERIOD_START = 1_700_000_000
PERIOD_END = 1_702_592_000


def _signed(payload: dict, secret: str | None = None) -> tuple[bytes, dict]:
    body = json.dumps(payload).encode("utf-8")
    ts = int(time.time())
    sig = hmac.new(
        (secret or settings.stripe_webhook_secret).encode("utf-8"),
        f"{ts}.{body.decode('utf-8')}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return body, {"Stripe-Signature": f"t={ts},v1={sig}", "Content-Type": "application/json"}


def _post_event(client: TestClient, event_type: str, obj: dict):
    body, headers = _signed({"id": "evt_1", "type": event_type, "data": {"object": obj}})
    return client.post("/api/stripe/webhook", content=body, headers=headers)


@pytest.fixture
def stripe_subscription(monkeypatch, user_id: int):
    sub = {
        "id": "sub_123",
        "status": "active",
        "metadata": {"userId": str(user_id)},
        "price_id": "price_premium",
        "cancel_at_period_end": False,
        "current_period_start": PERIOD_START,
        "current_period_end": PERIOD_END,
    }
    monkeypatch.setattr(billing, "retrieve_subscription", lambda sub_id: dict(sub, id=sub_id))
    return sub


def _row(db: Session, user_id: int) -> Subscription | None:
    db.expire_all()
    return db.exec(select(Subscription).where(Subscription.user_id == user_id)).first()


def test_missing_signature(client: TestClient):
    r = client.post("/api/stripe/webhook", content=b"{}")
    assert r.status_code == 400
    assert r.json() == {"error": "Missing signature or webhook secret"}


def test_invalid_signature(client: TestClient):
    body, headers = _signed({"type": "checkout.session.completed"}, secret="whsec_wrong")
    r = client.post("/api/stripe/webhook", content=body, headers=headers)
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid signature"}


def test_unknown_event_type_is_acknowledged(client: TestClient):
    r = _post_event(client, "charge.refunded", {"id": "ch_1"})
    assert r.status_code == 200
    assert r.json() == {"received": True}


def test_checkout_completed_grants_premium(client: TestClient, db: Session, user_id: int, stripe_subscription):
    obj = {"subscription": "sub_123", "customer": "cus_1", "metadata": {"userId": str(user_id)}}
    assert _post_event(client, "checkout.session.completed", obj).status_code == 200
    row = _row(db, user_id)
    assert row.tier == "premium"
    assert row.status == "active"
    assert row.stripe_customer_id == "cus_1"
    assert row.stripe_subscription_id == "sub_123"
    assert row.stripe_price_id == "price_premium"
    assert row.current_period_end is not None


def test_checkout_completed_replay_is_idempotent(client: TestClient, db: Session, user_id: int, stripe_subscription):
    obj = {"subscription": "sub_123", "customer": "cus_1", "metadata": {"userId": str(user_id)}}
    _post_event(client, "checkout.session.completed", obj)
    first = _row(db, user_id).model_dump()
    _post_event(client, "checkout.session.completed", obj)
    rows = db.exec(select(Subscription).where(Subscription.user_id == user_id)).all()
    assert len(rows) == 1
    assert _row(db, user_id).model_dump() == first


def test_checkout_for_unknown_user_is_ignored(client: TestClient, db: Session, monkeypatch):
    monkeypatch.setattr(
        billing,
        "retrieve_subscription",
        lambda sub_id: {"id": sub_id, "status": "active", "metadata": {"userId": "9999"}},
    )
    r = _post_event(client, "checkout.session.completed", {"subscription": "sub_x", "customer": "cus_x"})
    assert r.status_code == 200
    assert db.exec(select(Subscription)).all() == []


def test_payment_succeeded_uses_subscription_metadata(
    client: TestClient, db: Session, user_id: int, stripe_subscription
):
    r = _post_event(client, "invoice.payment_succeeded", {"subscription": "sub_123", "customer": "cus_1"})
    assert r.status_code == 200
    assert _row(db, user_id).tier == "premium"


def test_subscription_updated_downgrades_when_not_active(
    client: TestClient, db: Session, user_id: int, stripe_subscription
):
    _post_event(client, "checkout.session.completed", {"subscription": "sub_123", "customer": "cus_1"})
    obj = {"id": "sub_123", "status": "past_due", "cancel_at_period_end": True}
    assert _post_event(client, "customer.subscription.updated", obj).status_code == 200
    row = _row(db, user_id)
    assert row.status == "past_due"
    assert row.tier == "free"
    assert row.cancel_at_period_end is True
    # Dönem bilgisi gelmediyse eski değer korunur
    assert row.current_period_end is not None


def test_subscription_deleted_and_replay(client: TestClient, db: Session, user_id: int, stripe_subscription):
    _post_event(client, "checkout.session.completed", {"subscription": "sub_123", "customer": "cus_1"})
    for _ in range(2):
        assert _post_event(client, "customer.subscription.deleted", {"id": "sub_123"}).status_code == 200
    row = _row(db, user_id)
    assert row.status == "canceled"
    assert row.tier == "free"
    assert row.stripe_subscription_id is None
    assert row.stripe_customer_id == "cus_1"


def test_payment_failed_marks_past_due(client: TestClient, db: Session, user_id: int, stripe_subscription):
    _post_event(client, "checkout.session.completed", {"subscription": "sub_123", "customer": "cus_1"})
    assert _post_event(client, "invoice.payment_failed", {"subscription": "sub_123"}).status_code == 200
    row = _row(db, user_id)
    assert row.status == "past_due"
    assert row.has_premium is False


def test_invoice_subscription_id_from_parent():
    invoice = {"parent": {"subscription_details": {"subscription": "sub_parent"}}}
    assert billing._invoice_subscription_id(invoice) == "sub_parent"


def test_malformed_period_is_handler_failure(client: TestClient, user_id: int, monkeypatch):
    monkeypatch.setattr(
        billing,
        "retrieve_subscription",
        lambda sub_id: {
            "id": sub_id,
            "status": "active",
            "metadata": {"userId": str(user_id)},
            "current_period_end": "not-a-timestamp",
        },
    )
    r = _post_event(client, "checkout.session.completed", {"subscription": "sub_123", "customer": "cus_1"})
    assert r.status_code == 500
    assert r.json() == {"error": "Webhook handler failed"}


def test_handler_runs_outside_event_loop(client: TestClient, monkeypatch):
    seen = {}

    def handle_event(db, event):
        try:
            asyncio.get_running_loop()
            seen["in_loop"] = True
        except RuntimeError:
            seen["in_loop"] = False
        return True

    monkeypatch.setattr(billing, "handle_event", handle_event)
    assert _post_event(client, "charge.refunded", {"id": "ch_1"}).status_code == 200
    assert seen == {"in_loop": False}


def test_period_timestamps_are_utc_aware():
    assert billing._ts(PERIOD_END).tzinfo is not None
