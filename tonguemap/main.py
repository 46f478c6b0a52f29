import logging
import time
import traceback
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Uvicorn nereden çalışırsa çalışsın .env proje kökünden yüklensin
_PROJ_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJ_ROOT / ".env")

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from tonguemap.api.analytics import router as analytics_router
from tonguemap.api.analyze import router as analyze_router
from tonguemap.api.auth import router as auth_router
from tonguemap.api.billing import router as billing_router
from tonguemap.api.scan_limit import router as scan_limit_router
from tonguemap.api.scans import router as scans_router, share_router
from tonguemap.api.subscription import router as subscription_router
from tonguemap.core.config import (
    is_mock_analysis_allowed,
    is_openai_configured,
    is_stripe_configured,
    missing_production_settings,
    settings,
)
from tonguemap.core.database import engine, init_db
from tonguemap.core.errors import APIError
from tonguemap.core.rate_limit import get_client_ip, limiter
from tonguemap.logging import setup_logging
from tonguemap.models import ErrorLog

setup_logging(level=logging.INFO)
log = logging.getLogger("tonguemap")


def _cors_origins_list() -> list[str]:
    if not settings.cors_origins or settings.cors_origins.strip() == "*":
        return ["*"]
    return [o.strip() for o in settings.cors_origins.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.is_production:
        missing = missing_production_settings()
        if missing:
            raise RuntimeError(f"Missing required settings for production: {', '.join(missing)}")
    init_db()
    log.info("OPENAI_API_KEY loaded: %s", "yes" if is_openai_configured() else "NO")
    if not is_openai_configured():
        log.info("Mock analysis %s", "enabled" if is_mock_analysis_allowed() else "disabled")
    log.info("Stripe configured: %s", "yes" if is_stripe_configured() else "no")
    yield


app = FastAPI(
    title="TongueMap API",
    description="TCM dil analizi SaaS API",
    lifespan=lifespan,
)
app.state.limiter = limiter


def _error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


@app.exception_handler(APIError)
def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("API error: path=%s status=%s %s", request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    log.warning("Rate limit exceeded: ip=%s path=%s", get_client_ip(request), request.url.path)
    return _error_response(429, "Too many requests. Please wait a minute and try again.")


app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)


def _validation_error_message(exc: RequestValidationError) -> str:
    errs = exc.errors()
    if not errs:
        return "Invalid request."
    first = errs[0]
    loc = list(first.get("loc") or [])
    field = str(loc[-1]) if loc else None
    if first.get("type") == "missing":
        if field == "body":
            return "Request body is missing."
        return f"Missing field: {field}" if field else "Missing field."
    if first.get("type") == "json_invalid":
        return "Invalid JSON body."
    return first.get("msg") or "Invalid request."


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errs = exc.errors()
    log.warning(
        "Request validation error (422): path=%s method=%s detail=%s",
        request.url.path,
        request.method,
        errs,
    )
    # ctx içinde JSON'a çevrilemeyen nesneler (ör. ValueError) olabilir
    detail = [{k: v for k, v in e.items() if k != "ctx"} for e in errs]
    return _error_response(422, _validation_error_message(exc), detail=detail)


@app.exception_handler(HTTPException)
def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail if isinstance(exc.detail, str) else str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled exception: path=%s %s", request.url.path, exc, exc_info=exc)
    try:
        with Session(engine) as db:
            db.add(
                ErrorLog(
                    user_id=None,
                    endpoint=request.url.path,
                    method=request.method,
                    error_message=str(exc)[:2000],
                    stack_trace="".join(traceback.format_exception(exc))[:10000],
                )
            )
            db.commit()
    except SQLAlchemyError as e:
        log.warning("ErrorLog write failed: %s", e)
    path = (request.url.path or "").strip()
    if path.startswith("/api/analyze"):
        user_msg = "Analysis failed"
    else:
        user_msg = "Unexpected server error."
    return _error_response(500, user_msg)


@app.middleware("http")
async def request_id_and_latency(request: Request, call_next):
    request.state.request_id = str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    latency_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = request.state.request_id
    log.info(
        "request_id=%s method=%s path=%s status=%s latency_ms=%.2f",
        request.state.request_id,
        request.method,
        request.url.path,
        response.status_code,
        latency_ms,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(auth_router)
app.include_router(analyze_router)
app.include_router(scan_limit_router)
app.include_router(subscription_router)
app.include_router(billing_router)
app.include_router(scans_router)
app.include_router(share_router)
app.include_router(analytics_router)


@app.get("/health")
def health():
    try:
        with Session(engine) as db:
            db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        log.warning("Health check database error: %s", e)
        database = "error"
    return {
        "status": "ok",
        "openai_configured": is_openai_configured(),
        "stripe_configured": is_stripe_configured(),
        "database": database,
    }
