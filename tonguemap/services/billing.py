"""
Stripe entegrasyonu: checkout/portal oturumları ve webhook mutabakatı.

Stripe SDK çağrıları bu modüldeki ince fonksiyonlardan geçer (testlerde monkeypatch edilir).
Webhook işleyicileri her zaman üzerine yazar, asla sayaç artırmaz: aynı olayın tekrarı aynı satırı bırakır.
"""
import json
import logging
from datetime import datetime, timezone

import stripe
from sqlmodel import Session, select

from tonguemap.core.config import settings
from tonguemap.core.errors import WebhookSignatureError
from tonguemap.models import Subscription, User
from tonguemap.services import analytics
from tonguemap.services.quota import get_subscription

logger = logging.getLogger(__name__)

USER_ID_METADATA_KEY = "userId"
WEBHOOK_TOLERANCE = 300  # saniye


def _client_key() -> str:
    stripe.api_key = settings.stripe_secret_key
    return settings.stripe_secret_key


# ---------- Stripe SDK sarmalayıcıları ----------


def create_customer(email: str, user_id: int) -> str:
    _client_key()
    customer = stripe.Customer.create(email=email, metadata={USER_ID_METADATA_KEY: str(user_id)})
    return customer["id"]


def create_checkout_session(customer_id: str, price_id: str, user_id: int) -> dict:
    _client_key()
    app_url = settings.app_url.rstrip("/")
    session = stripe.checkout.Session.create(
        customer=customer_id,
        line_items=[{"price": price_id, "quantity": 1}],
        mode="subscription",
        metadata={USER_ID_METADATA_KEY: str(user_id)},
        subscription_data={"metadata": {USER_ID_METADATA_KEY: str(user_id)}},
        success_url=f"{app_url}/dashboard?success=true&session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{app_url}/pricing?canceled=true",
        allow_promotion_codes=True,
        billing_address_collection="auto",
    )
    return {"id": session["id"], "url": session["url"]}


def create_portal_session(customer_id: str) -> str:
    _client_key()
    portal = stripe.billing_portal.Session.create(
        customer=customer_id,
        return_url=f"{settings.app_url.rstrip('/')}/dashboard?portal=closed",
    )
    return portal["url"]


def retrieve_subscription(subscription_id: str) -> dict:
    """Stripe aboneliğini düz sözlüğe çevirir (yalnızca kullanılan alanlar)."""
    _client_key()
    sub = stripe.Subscription.retrieve(subscription_id)
    return subscription_fields(sub)


def subscription_fields(sub) -> dict:
    """Abonelik nesnesinden (Stripe nesnesi ya da webhook JSON) ortak alanlar.
    Yeni API sürümlerinde dönem alanları ilk kalemde (items.data[0]) durur."""
    items = (sub.get("items") or {}).get("data") or []
    first = items[0] if items else {}
    price = first.get("price") or {}
    metadata = sub.get("metadata") or {}
    return {
        "id": sub.get("id"),
        "status": sub.get("status"),
        "metadata": dict(metadata),
        "price_id": price.get("id") if hasattr(price, "get") else price,
        "cancel_at_period_end": bool(sub.get("cancel_at_period_end")),
        "current_period_start": sub.get("current_period_start") or first.get("current_period_start"),
        "current_period_end": sub.get("current_period_end") or first.get("current_period_end"),
    }


# ---------- Checkout yardımcıları ----------


def get_or_create_customer(db: Session, user: User) -> str:
    """Kullanıcının Stripe müşteri kimliği; yoksa oluşturulur ve 'free' satıra yazılır."""
    row = get_subscription(db, user.id)
    if row and row.stripe_customer_id:
        return row.stripe_customer_id
    customer_id = create_customer(user.email, user.id)
    if row is None:
        row = Subscription(user_id=user.id, status="active", tier="free")
    row.stripe_customer_id = customer_id
    db.add(row)
    db.commit()
    return customer_id


# ---------- Webhook ----------


def verify_webhook(payload: bytes, sig_header: str | None) -> dict:
    """Stripe-Signature doğrulanmadan gövdeye güvenilmez."""
    secret = settings.stripe_webhook_secret
    if not sig_header or not secret:
        raise WebhookSignatureError("Missing signature or webhook secret")
    try:
        body = payload.decode("utf-8")
        stripe.WebhookSignature.verify_header(body, sig_header, secret, WEBHOOK_TOLERANCE)
        event = json.loads(body)
    except stripe.SignatureVerificationError as e:
        logger.warning("Webhook signature verification failed: %s", e)
        raise WebhookSignatureError("Invalid signature") from e
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise WebhookSignatureError("Invalid payload") from e
    if not isinstance(event, dict) or "type" not in event:
        raise WebhookSignatureError("Invalid payload")
    return event


def _ts(value) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def _metadata_user_id(*sources: dict) -> int | None:
    for meta in sources:
        raw = (meta or {}).get(USER_ID_METADATA_KEY)
        if raw is None:
            continue
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning("Invalid user id in Stripe metadata: %r", raw)
    return None


def _apply_period(row: Subscription, sub: dict) -> None:
    start = _ts(sub.get("current_period_start"))
    end = _ts(sub.get("current_period_end"))
    if start is not None:
        row.current_period_start = start
    if end is not None:
        row.current_period_end = end


def _find_by_subscription_id(db: Session, subscription_id: str | None) -> Subscription | None:
    if not subscription_id:
        return None
    return db.exec(
        select(Subscription).where(Subscription.stripe_subscription_id == subscription_id)
    ).first()


def _invoice_subscription_id(invoice: dict) -> str | None:
    sub_id = invoice.get("subscription")
    if not sub_id:
        details = ((invoice.get("parent") or {}).get("subscription_details")) or {}
        sub_id = details.get("subscription")
    if isinstance(sub_id, dict):
        sub_id = sub_id.get("id")
    return sub_id


def upsert_premium(db: Session, user_id: int, customer_id: str | None, sub: dict) -> Subscription | None:
    """Satır user_id ile anahtarlı; varsa üzerine yazılır."""
    if db.get(User, user_id) is None:
        logger.warning("Stripe event for unknown user_id=%s ignored", user_id)
        return None
    row = get_subscription(db, user_id) or Subscription(user_id=user_id)
    if customer_id:
        row.stripe_customer_id = customer_id
    row.stripe_subscription_id = sub["id"]
    if sub.get("price_id"):
        row.stripe_price_id = sub["price_id"]
    row.status = sub.get("status") or row.status
    row.tier = "premium"
    _apply_period(row, sub)
    row.cancel_at_period_end = bool(sub.get("cancel_at_period_end"))
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _on_checkout_completed(db: Session, obj: dict) -> None:
    sub_id = obj.get("subscription")
    if isinstance(sub_id, dict):
        sub_id = sub_id.get("id")
    if not sub_id:
        return
    sub = retrieve_subscription(sub_id)
    user_id = _metadata_user_id(sub.get("metadata"), obj.get("metadata"))
    if user_id is None:
        logger.warning("checkout.session.completed without user id: subscription=%s", sub_id)
        return
    if upsert_premium(db, user_id, obj.get("customer"), sub):
        analytics.track_subscription_event(
            "created",
            sub["id"],
            "premium",
            user_id=user_id,
            value=(obj.get("amount_total") or 0) / 100,
            currency=obj.get("currency") or "usd",
        )


def _on_payment_succeeded(db: Session, obj: dict) -> None:
    sub_id = _invoice_subscription_id(obj)
    if not sub_id:
        return
    sub = retrieve_subscription(sub_id)
    user_id = _metadata_user_id(sub.get("metadata"))
    if user_id is None:
        logger.warning("invoice.payment_succeeded without user id: subscription=%s", sub_id)
        return
    if upsert_premium(db, user_id, obj.get("customer"), sub):
        analytics.track_subscription_event(
            "payment_succeeded",
            sub["id"],
            "premium",
            user_id=user_id,
            value=(obj.get("amount_paid") or 0) / 100,
            currency=obj.get("currency") or "usd",
        )


def _on_subscription_updated(db: Session, obj: dict) -> None:
    sub = subscription_fields(obj)
    row = _find_by_subscription_id(db, sub["id"])
    if row is None:
        logger.info("customer.subscription.updated for unknown subscription=%s", sub["id"])
        return
    row.status = sub.get("status") or row.status
    row.tier = "premium" if row.status == "active" else "free"
    _apply_period(row, sub)
    row.cancel_at_period_end = sub["cancel_at_period_end"]
    db.add(row)
    db.commit()
    analytics.track_subscription_event("updated", sub["id"], row.tier, user_id=row.user_id)


def _on_subscription_deleted(db: Session, obj: dict) -> None:
    row = _find_by_subscription_id(db, obj.get("id"))
    if row is None:
        # Zaten düşürülmüş (tekrar gelen olay) ya da bilinmeyen abonelik
        return
    row.status = "canceled"
    row.tier = "free"
    row.stripe_subscription_id = None
    row.stripe_price_id = None
    row.current_period_end = None
    row.cancel_at_period_end = False
    db.add(row)
    db.commit()
    analytics.track_subscription_event("cancelled", obj.get("id"), "free", user_id=row.user_id)


def _on_payment_failed(db: Session, obj: dict) -> None:
    sub_id = _invoice_subscription_id(obj)
    row = _find_by_subscription_id(db, sub_id)
    if row is None:
        return
    row.status = "past_due"
    db.add(row)
    db.commit()
    analytics.track_subscription_event("payment_failed", sub_id, row.tier, user_id=row.user_id)


EVENT_HANDLERS = {
    "checkout.session.completed": _on_checkout_completed,
    "invoice.payment_succeeded": _on_payment_succeeded,
    "customer.subscription.updated": _on_subscription_updated,
    "customer.subscription.deleted": _on_subscription_deleted,
    "invoice.payment_failed": _on_payment_failed,
}


def handle_event(db: Session, event: dict) -> bool:
    """Olayı işler; bilinmeyen tipler yok sayılır (False)."""
    event_type = event.get("type")
    handler = EVENT_HANDLERS.get(event_type)
    if handler is None:
        logger.info("Unhandled Stripe event type: %s", event_type)
        return False
    obj = ((event.get("data") or {}).get("object")) or {}
    handler(db, obj)
    return True
