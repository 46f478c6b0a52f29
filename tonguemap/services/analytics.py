"""
GA4 Measurement Protocol ile sunucu tarafı olay gönderimi.
GA_MEASUREMENT_ID / GA_API_SECRET boşsa olaylar yalnızca debug loglanır.
Ağ hataları loglanır, isteğe asla fırlatılmaz.
"""
import json
import logging
import secrets
import time
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from tonguemap.core.config import settings

logger = logging.getLogger(__name__)

MP_ENDPOINT = "https://www.google-analytics.com/mp/collect"
MP_TIMEOUT = 5

# GA4 olay adları (istemci ve sunucu aynı katalogu kullanır)
EVENTS: dict[str, str] = {
    # Kullanıcı yaşam döngüsü
    "SIGN_UP": "sign_up",
    "LOGIN": "login",
    "LOGOUT": "logout",
    # Tarama
    "SCAN_UPLOAD": "scan_upload",
    "SCAN_UPLOAD_START": "scan_upload_start",
    "SCAN_UPLOAD_COMPLETE": "scan_upload_complete",
    "SCAN_UPLOAD_ERROR": "scan_upload_error",
    # Analiz
    "ANALYSIS_START": "analysis_start",
    "ANALYSIS_COMPLETE": "analysis_complete",
    "ANALYSIS_ERROR": "analysis_error",
    "ANALYSIS_VIEW": "analysis_view",
    "ANALYSIS_SHARE": "share",
    # Satın alma / abonelik
    "PURCHASE_INITIATED": "begin_checkout",
    "PURCHASE_COMPLETE": "purchase",
    "PURCHASE_CANCELLED": "purchase_cancelled",
    "PURCHASE_FAILED": "purchase_failed",
    "SUBSCRIPTION_CREATED": "subscription_created",
    "SUBSCRIPTION_UPDATED": "subscription_updated",
    "SUBSCRIPTION_UPGRADE": "subscription_upgrade",
    "SUBSCRIPTION_DOWNGRADE": "subscription_downgrade",
    "SUBSCRIPTION_CANCELLED": "subscription_cancelled",
    # Affiliate
    "AFFILIATE_LINK_CLICK": "affiliate_link_click",
    "AFFILIATE_PRODUCT_VIEW": "affiliate_product_view",
    # E-ticaret
    "VIEW_ITEM": "view_item",
    "ADD_TO_CART": "add_to_cart",
    "REMOVE_FROM_CART": "remove_from_cart",
    # Etkileşim
    "PAGE_VIEW": "page_view",
    "SCREEN_VIEW": "screen_view",
    "SCROLL": "scroll",
    "CLICK": "click",
    "FILE_DOWNLOAD": "file_download",
    "VIDEO_START": "video_start",
    "VIDEO_COMPLETE": "video_complete",
    # Uygulamaya özel
    "SCAN_LIMIT_REACHED": "scan_limit_reached",
    "CAMERA_USED": "camera_used",
    "GALLERY_USED": "gallery_used",
    "TIPS_VIEWED": "tips_viewed",
    "FORMULA_VIEWED": "formula_viewed",
}
EVENT_NAMES = frozenset(EVENTS.values())

SUBSCRIPTION_EVENT_NAMES = {
    "created": EVENTS["SUBSCRIPTION_CREATED"],
    "updated": EVENTS["SUBSCRIPTION_UPDATED"],
    "cancelled": EVENTS["SUBSCRIPTION_CANCELLED"],
    "payment_succeeded": EVENTS["PURCHASE_COMPLETE"],
    "payment_failed": EVENTS["PURCHASE_FAILED"],
}


def is_analytics_configured() -> bool:
    return bool(settings.ga_measurement_id and settings.ga_api_secret)


def generate_client_id() -> str:
    """Çerez yokken sunucu tarafı client_id: <ms>.<rastgele>."""
    return f"{int(time.time() * 1000)}.{secrets.token_hex(6)}"


def _clean_params(params: dict | None) -> dict:
    out = {k: v for k, v in (params or {}).items() if v is not None}
    out["engagement_time_msec"] = "1"
    return out


def build_payload(events: list[dict], client_id: str | None = None, user_id: str | int | None = None) -> dict:
    payload = {"client_id": client_id or generate_client_id()}
    if user_id is not None:
        payload["user_id"] = str(user_id)
    payload["events"] = [{"name": e["name"], "params": _clean_params(e.get("params"))} for e in events]
    return payload


def _send(payload: dict) -> bool:
    query = urlencode({"measurement_id": settings.ga_measurement_id, "api_secret": settings.ga_api_secret})
    req = Request(
        f"{MP_ENDPOINT}?{query}",
        data=json.dumps(payload).encode("utf-8"),
        method="POST",
        headers={"Content-Type": "application/json"},
    )
    try:
        with urlopen(req, timeout=MP_TIMEOUT) as resp:
            if resp.status >= 300:
                logger.error("GA4 server tracking failed: status=%s", resp.status)
                return False
        return True
    except HTTPError as e:
        logger.error("GA4 server tracking failed: status=%s", e.code)
    except (URLError, OSError) as e:
        logger.error("GA4 server tracking error: %s", e)
    return False


def track_batch_events(
    events: list[dict], client_id: str | None = None, user_id: str | int | None = None
) -> bool:
    if not events:
        return False
    if not is_analytics_configured():
        logger.debug("GA4 not configured, events: %s", events)
        return False
    return _send(build_payload(events, client_id=client_id, user_id=user_id))


def track_server_event(
    name: str,
    params: dict | None = None,
    client_id: str | None = None,
    user_id: str | int | None = None,
) -> bool:
    return track_batch_events([{"name": name, "params": params}], client_id=client_id, user_id=user_id)


def track_analysis_complete(
    user_id: int | None = None,
    client_id: str | None = None,
    scan_id: str | None = None,
    confidence_score: float | None = None,
    primary_pattern: str | None = None,
    analysis_duration_ms: int | None = None,
    has_error: bool = False,
) -> bool:
    return track_server_event(
        EVENTS["ANALYSIS_COMPLETE"],
        {
            "scan_id": scan_id,
            "confidence_score": confidence_score,
            "primary_pattern": primary_pattern,
            "analysis_duration_ms": analysis_duration_ms,
            "has_error": has_error,
            "event_category": "analysis",
        },
        client_id=client_id,
        user_id=user_id,
    )


def track_analysis_error(error_type: str, user_id: int | None = None) -> bool:
    return track_server_event(
        EVENTS["ANALYSIS_ERROR"],
        {"error_type": error_type, "event_category": "analysis"},
        user_id=user_id,
    )


def track_subscription_event(
    event_type: str,
    subscription_id: str | None,
    tier: str,
    user_id: str | int | None = None,
    value: float | None = None,
    currency: str = "USD",
) -> bool:
    """event_type: created | updated | cancelled | payment_succeeded | payment_failed."""
    name = SUBSCRIPTION_EVENT_NAMES.get(event_type)
    if name is None:
        raise ValueError(f"Unknown subscription event type: {event_type}")
    return track_server_event(
        name,
        {
            "subscription_id": subscription_id,
            "subscription_tier": tier,
            "value": value,
            "currency": currency,
            "event_category": "subscription",
        },
        user_id=user_id,
    )


def track_scan_limit_reached(user_id: int | None, current_plan: str, limit: int) -> bool:
    return track_server_event(
        EVENTS["SCAN_LIMIT_REACHED"],
        {"current_plan": current_plan, "limit_reached": limit, "event_category": "limitations"},
        user_id=user_id,
    )


def track_signup(user_id: int, method: str = "email", client_id: str | None = None) -> bool:
    return track_server_event(
        EVENTS["SIGN_UP"],
        {"method": method, "event_category": "user_lifecycle"},
        client_id=client_id,
        user_id=user_id,
    )
