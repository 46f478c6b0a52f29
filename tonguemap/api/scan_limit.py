import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from tonguemap.api.deps import get_optional_user
from tonguemap.core.config import settings
from tonguemap.core.database import get_db
from tonguemap.core.errors import APIError
from tonguemap.models import User
from tonguemap.services import analytics, quota

router = APIRouter(prefix="/api", tags=["scan-limit"])
log = logging.getLogger(__name__)


@router.get("/scan-limit")
def get_scan_limit(
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """Kalan tarama hakkı; yan etkisi yok. Anonim ziyaretçiye sabit yanıt."""
    if user is None:
        return dict(quota.ANONYMOUS_ALLOWANCE)
    try:
        return quota.can_user_scan(db, user.id)
    except SQLAlchemyError as e:
        log.exception("Error checking scan availability: %s", e)
        raise APIError("Failed to check scan availability", status_code=500)


@router.post("/scan-limit")
def record_scan(
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """Sayacı ilerleten tek yol: giriş yapmış kullanıcı."""
    if user is None:
        raise APIError("Unauthorized - Please sign in to save scans", status_code=401)
    try:
        result = quota.record_scan(db, user.id)
    except SQLAlchemyError as e:
        db.rollback()
        log.exception("Error recording scan: %s", e)
        raise APIError("Failed to record scan", status_code=500)
    if not result["success"] and result["scans_remaining"] != quota.UNLIMITED:
        analytics.track_scan_limit_reached(user.id, "free", settings.free_scans_per_day)
    return result
