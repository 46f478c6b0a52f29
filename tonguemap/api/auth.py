import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import ValidationError
from sqlmodel import Session, select
from starlette.concurrency import run_in_threadpool

from tonguemap.api.deps import get_current_user
from tonguemap.core.config import settings
from tonguemap.core.database import get_db
from tonguemap.core.rate_limit import LOGIN_LIMIT, REGISTER_LIMIT, limiter
from tonguemap.core.security import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    SESSION_COOKIE,
    create_access_token,
    hash_password,
    verify_password,
)
from tonguemap.models import User
from tonguemap.schemas import Token, UserCreate, UserResponse
from tonguemap.services import analytics

router = APIRouter(prefix="/auth", tags=["auth"])
log = logging.getLogger(__name__)


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id or 0,
        email=user.email,
        full_name=user.full_name or "",
        created_at=user.created_at,
    )


@router.post("/register", response_model=UserResponse)
@limiter.limit(REGISTER_LIMIT)
async def register(
    request: Request,
    db: Session = Depends(get_db),
):
    form = await request.form()
    try:
        body = UserCreate(
            email=(form.get("email") or "").strip(),
            password=form.get("password") or "",
            full_name=(form.get("full_name") or "").strip(),
        )
    except ValidationError as e:
        first = e.errors()[0]
        field = str(first.get("loc", ["body"])[-1])
        msg = first.get("msg") or "Invalid request."
        raise HTTPException(status_code=422, detail=f"{field}: {msg}")
    if db.exec(select(User).where(User.email == body.email)).first():
        raise HTTPException(status_code=400, detail="Email is already registered.")
    user = User(
        email=body.email,
        hashed_password=hash_password(body.password),
        full_name=body.full_name,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    log.info("User registered: id=%s", user.id)
    # GA4 gönderimi bloklayan HTTP çağrısı: event loop dışında
    await run_in_threadpool(analytics.track_signup, user.id)
    return _user_response(user)


@router.post("/login", response_model=Token)
@limiter.limit(LOGIN_LIMIT)
async def login(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    form = await request.form()
    email = (form.get("email") or "").strip()
    password = form.get("password") or ""
    if not email or not password:
        raise HTTPException(status_code=422, detail="Email and password are required.")
    user = db.exec(select(User).where(User.email == email)).first()
    if not user or not verify_password(password, user.hashed_password):
        log.info("Failed login attempt")
        raise HTTPException(status_code=401, detail="Invalid email or password.")
    token = create_access_token({"sub": str(user.id)})
    user.last_login_at = datetime.now(timezone.utc)
    db.add(user)
    db.commit()
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return Token(access_token=token)


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE)
    return {"ok": True}


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return _user_response(user)
