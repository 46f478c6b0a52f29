import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from openai import OpenAIError

from tonguemap.api.deps import get_optional_user
from tonguemap.core.errors import AnalysisFailedError, AnalysisFormatError, APIError
from tonguemap.core.rate_limit import ANALYZE_LIMIT, limiter
from tonguemap.models import User
from tonguemap.schemas import AnalyzeRequest
from tonguemap.services import analytics
from tonguemap.services.analyze import select_analyzer

router = APIRouter(prefix="/api", tags=["analyze"])
log = logging.getLogger(__name__)


def _primary_pattern(result: dict) -> tuple[str | None, float | None]:
    primary = (result.get("patternDifferentiation") or {}).get("primaryPattern") or {}
    confidence = primary.get("confidence")
    return primary.get("name"), confidence if isinstance(confidence, (int, float)) else None


@router.post("/analyze")
@limiter.limit(ANALYZE_LIMIT)
def analyze(
    request: Request,
    payload: AnalyzeRequest | None = None,
    user: User | None = Depends(get_optional_user),
):
    """Base64 dil fotoğrafı → v2 TCM analizi (anahtar yoksa sabit örnek sonuç)."""
    image = (payload.image or "").strip() if payload else ""
    if not image:
        raise APIError("No image provided", status_code=400)
    analyzer = select_analyzer()
    user_id = user.id if user else None
    t0 = time.perf_counter()
    try:
        result = analyzer.analyze(image)
    except AnalysisFailedError:
        log.error("Analysis returned empty content")
        analytics.track_analysis_error("empty_response", user_id=user_id)
        raise APIError("Analysis failed", status_code=500)
    except AnalysisFormatError as e:
        analytics.track_analysis_error("invalid_format", user_id=user_id)
        raise APIError("Invalid analysis format", status_code=500, details=str(e))
    except OpenAIError as e:
        log.exception("Analysis error: %s", e)
        analytics.track_analysis_error(type(e).__name__, user_id=user_id)
        raise APIError("Analysis failed", status_code=500, details=str(e))
    duration_ms = int((time.perf_counter() - t0) * 1000)
    name, confidence = _primary_pattern(result)
    log.info("Analysis complete: analyzer=%s duration_ms=%s", analyzer.name, duration_ms)
    analytics.track_analysis_complete(
        user_id=user_id,
        confidence_score=confidence,
        primary_pattern=name,
        analysis_duration_ms=duration_ms,
    )
    return JSONResponse(content=result)
