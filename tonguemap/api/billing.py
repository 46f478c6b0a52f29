import logging

import stripe
from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from tonguemap.api.deps import get_current_user
from tonguemap.core.config import is_stripe_configured, settings
from tonguemap.core.database import get_db
from tonguemap.core.errors import APIError, WebhookSignatureError
from tonguemap.models import User
from tonguemap.schemas import CheckoutRequest, CheckoutResponse, PortalResponse
from tonguemap.services import billing
from tonguemap.services.quota import get_subscription

router = APIRouter(prefix="/api/stripe", tags=["billing"])
log = logging.getLogger(__name__)


def _require_stripe() -> None:
    if not is_stripe_configured():
        log.error("STRIPE_SECRET_KEY is not configured")
        raise APIError("Payments are not configured", status_code=500)


@router.post("/checkout", response_model=CheckoutResponse)
def create_checkout(
    body: CheckoutRequest | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Premium abonelik için Stripe Checkout oturumu; priceId yoksa varsayılan premium fiyatı."""
    _require_stripe()
    price_id = (body.price_id if body else None) or settings.stripe_premium_price_id
    try:
        customer_id = billing.get_or_create_customer(db, user)
        session = billing.create_checkout_session(customer_id, price_id, user.id)
    except (stripe.StripeError, SQLAlchemyError) as e:
        log.exception("Checkout error: %s", e)
        raise APIError("Failed to create checkout session", status_code=500)
    return CheckoutResponse(session_id=session["id"], url=session["url"])


@router.post("/portal", response_model=PortalResponse)
def create_portal(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    row = get_subscription(db, user.id)
    if row is None or not row.stripe_customer_id:
        raise APIError("No subscription found", status_code=404)
    _require_stripe()
    try:
        url = billing.create_portal_session(row.stripe_customer_id)
    except stripe.StripeError as e:
        log.exception("Portal error: %s", e)
        raise APIError("Failed to create portal session", status_code=500)
    return PortalResponse(url=url)


@router.post("/webhook")
async def stripe_webhook(request: Request, db: Session = Depends(get_db)):
    """İmza doğrulanmadan hiçbir şey işlenmez; bilinmeyen olay tipleri 200 ile yok sayılır."""
    payload = await request.body()
    try:
        event = billing.verify_webhook(payload, request.headers.get("stripe-signature"))
    except WebhookSignatureError as e:
        raise APIError(str(e), status_code=400)
    try:
        await run_in_threadpool(billing.handle_event, db, event)
    except (stripe.StripeError, SQLAlchemyError, ValueError, TypeError, KeyError) as e:
        db.rollback()
        log.exception("Webhook handler failed: type=%s error=%s", event.get("type"), e)
        raise APIError("Webhook handler failed", status_code=500)
    return {"received": True}
