"""
Günlük tarama kotası. Sayaç yalnızca veritabanında, tek koşullu UPDATE ile artar
(okuyup-yazma yok); eşzamanlı iki istek ücretsiz limiti aşamaz.
"""
import logging
from datetime import date, datetime, timezone

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from tonguemap.core.config import settings
from tonguemap.models import ScanUsage, Subscription

logger = logging.getLogger(__name__)
UNLIMITED = -1

ANONYMOUS_ALLOWANCE = {
    "canScan": True,
    "tier": "anonymous",
    "scansToday": 0,
    "scansRemaining": 1,
    "message": "Anonymous user - limited scan available",
}


def _today() -> date:
    return datetime.now(timezone.utc).date()


def get_subscription(db: Session, user_id: int) -> Subscription | None:
    return db.exec(select(Subscription).where(Subscription.user_id == user_id)).first()


def is_premium(db: Session, user_id: int) -> bool:
    sub = get_subscription(db, user_id)
    return bool(sub and sub.has_premium)


def _scans_today(db: Session, user_id: int, day: date) -> int:
    row = db.exec(
        select(ScanUsage).where(ScanUsage.user_id == user_id, ScanUsage.scan_date == day)
    ).first()
    return row.scans_count if row else 0


def can_user_scan(db: Session, user_id: int) -> dict:
    """Yan etkisiz sorgu: {canScan, tier, scansToday, scansRemaining}."""
    scans_today = _scans_today(db, user_id, _today())
    if is_premium(db, user_id):
        return {"canScan": True, "tier": "premium", "scansToday": scans_today, "scansRemaining": UNLIMITED}
    limit = settings.free_scans_per_day
    remaining = max(0, limit - scans_today)
    return {"canScan": remaining > 0, "tier": "free", "scansToday": scans_today, "scansRemaining": remaining}


def _increment(db: Session, user_id: int, day: date, limit: int | None) -> int:
    """Koşullu artırma; etkilenen satır sayısını döner (0: satır yok ya da limit dolu)."""
    stmt = update(ScanUsage).where(ScanUsage.user_id == user_id, ScanUsage.scan_date == day)
    if limit is not None:
        stmt = stmt.where(ScanUsage.scans_count < limit)
    result = db.execute(stmt.values(scans_count=ScanUsage.scans_count + 1))
    db.commit()
    return result.rowcount or 0


def record_scan(db: Session, user_id: int) -> dict:
    """Taramayı sayar. Ücretsiz kullanıcı limitteyse sayaç değişmez ve success False döner."""
    day = _today()
    premium = is_premium(db, user_id)
    limit = None if premium else settings.free_scans_per_day

    updated = _increment(db, user_id, day, limit)
    if not updated and _scans_today_row_missing(db, user_id, day):
        if limit is not None and limit <= 0:
            return {"success": False, "scans_remaining": 0}
        db.add(ScanUsage(user_id=user_id, scan_date=day, scans_count=1))
        try:
            db.commit()
            updated = 1
        except IntegrityError:
            # Aynı gün için satırı başka bir istek oluşturdu; koşullu artırma tekrar denenir
            db.rollback()
            updated = _increment(db, user_id, day, limit)

    if premium:
        return {"success": bool(updated), "scans_remaining": UNLIMITED}
    remaining = max(0, settings.free_scans_per_day - _scans_today(db, user_id, day))
    if not updated:
        logger.info("Free scan limit reached: user_id=%s", user_id)
    return {"success": bool(updated), "scans_remaining": remaining}


def _scans_today_row_missing(db: Session, user_id: int, day: date) -> bool:
    row = db.exec(
        select(ScanUsage.id).where(ScanUsage.user_id == user_id, ScanUsage.scan_date == day)
    ).first()
    return row is None
