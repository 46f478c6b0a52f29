import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse, Response
from sqlmodel import Session, select

from tonguemap.api.deps import get_current_user
from tonguemap.core.database import get_db
from tonguemap.core.errors import APIError
from tonguemap.models import ShareToken, TongueScan, User
from tonguemap.schemas import (
    SaveScanRequest,
    SaveScanResponse,
    ScanDetail,
    ScanHistoryItem,
    ShareResponse,
    parse_analysis_result,
)
from tonguemap.schemas.analysis import is_current_format
from tonguemap.services.report_pdf import build_report_pdf, render_report_html
from tonguemap.services.report_view import to_legacy_fields

router = APIRouter(prefix="/api/scans", tags=["scans"])
share_router = APIRouter(tags=["share"])
log = logging.getLogger(__name__)

MAX_HISTORY = 100


def _iso(dt) -> str:
    return dt.isoformat() if hasattr(dt, "isoformat") else str(dt)


def _history_item(scan: TongueScan) -> dict:
    return {
        "id": scan.id or 0,
        "created_at": _iso(scan.created_at),
        "image_url": scan.image_url,
        "primary_pattern": scan.primary_pattern,
        "coat": scan.coat,
        "color": scan.color,
        "shape": scan.shape,
        "moisture": scan.moisture,
        "recommendations": scan.recommendations,
        "recommended_formula": scan.recommended_formula,
        "severity": scan.severity,
        "format": scan.result_format,
    }


def _owned_scan(db: Session, scan_id: int, user: User) -> TongueScan:
    scan = db.get(TongueScan, scan_id)
    if not scan or scan.user_id != user.id:
        raise HTTPException(status_code=404, detail="Scan not found")
    return scan


def _report_date(scan: TongueScan) -> str | None:
    dt = scan.created_at
    return dt.strftime("%d.%m.%Y %H:%M") if hasattr(dt, "strftime") else None


@router.post("", response_model=SaveScanResponse)
def save_scan(
    body: SaveScanRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Sonucu geçmişe kaydeder: düz kolonlar + biçim + tam JSON."""
    try:
        result = parse_analysis_result(body.result)
    except ValueError as e:
        raise APIError("Invalid analysis result", status_code=400, details=str(e))
    scan = TongueScan(
        user_id=user.id,
        image_url=body.image_url,
        result_format="current" if is_current_format(body.result) else "legacy",
        result_json=body.result,
        **to_legacy_fields(result),
    )
    db.add(scan)
    db.commit()
    db.refresh(scan)
    log.info("Scan saved: id=%s user_id=%s format=%s", scan.id, user.id, scan.result_format)
    return SaveScanResponse(id=scan.id or 0, created_at=_iso(scan.created_at))


@router.get("", response_model=list[ScanHistoryItem])
def list_scans(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    limit: int = 50,
):
    limit = max(1, min(limit, MAX_HISTORY))
    stmt = (
        select(TongueScan)
        .where(TongueScan.user_id == user.id)
        .order_by(TongueScan.created_at.desc(), TongueScan.id.desc())
        .limit(limit)
    )
    return [_history_item(s) for s in db.exec(stmt).all()]


@router.get("/{scan_id}", response_model=ScanDetail)
def get_scan(
    scan_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    scan = _owned_scan(db, scan_id, user)
    return {**_history_item(scan), "result": scan.result_json}


@router.get("/{scan_id}/report", response_class=HTMLResponse)
def scan_report(
    scan_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    scan = _owned_scan(db, scan_id, user)
    return HTMLResponse(render_report_html(scan.result_json, report_date=_report_date(scan)))


@router.get("/{scan_id}/pdf")
def scan_pdf(
    scan_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Taramanın PDF raporu (WeasyPrint + Jinja2)."""
    scan = _owned_scan(db, scan_id, user)
    try:
        pdf_bytes = build_report_pdf(scan.result_json, report_date=_report_date(scan))
    except (ImportError, OSError) as e:
        log.exception("PDF generation failed: %s", e)
        raise APIError("Failed to generate PDF", status_code=500, details=str(e))
    filename = f"tonguemap-report-{scan_id}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/{scan_id}/share", response_model=ShareResponse)
def create_share_link(
    scan_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    scan = _owned_scan(db, scan_id, user)
    token_str = secrets.token_urlsafe(24)
    db.add(ShareToken(scan_id=scan.id or 0, token=token_str))
    db.commit()
    return ShareResponse(token=token_str)


@share_router.get("/share/{token}", response_class=HTMLResponse)
def get_shared_report(token: str, db: Session = Depends(get_db)):
    share = db.exec(select(ShareToken).where(ShareToken.token == token)).first()
    if not share:
        raise HTTPException(status_code=404, detail="Share link is invalid or has been removed.")
    scan = db.get(TongueScan, share.scan_id)
    if not scan:
        raise HTTPException(status_code=404, detail="Scan not found")
    return HTMLResponse(render_report_html(scan.result_json, report_date=_report_date(scan)))
