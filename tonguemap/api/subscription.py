from fastapi import APIRouter, Depends
from sqlmodel import Session

from tonguemap.api.deps import get_optional_user
from tonguemap.core.database import get_db
from tonguemap.models import User
from tonguemap.schemas import SubscriptionStatus
from tonguemap.services.quota import get_subscription

router = APIRouter(prefix="/api/subscription", tags=["subscription"])


@router.get("/status", response_model=SubscriptionStatus, response_model_exclude_none=True)
def subscription_status(
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if user is None:
        return SubscriptionStatus()
    row = get_subscription(db, user.id)
    if row is None:
        return SubscriptionStatus()
    return SubscriptionStatus(
        tier=row.tier,
        status=row.status,
        has_premium=row.has_premium,
        current_period_end=row.current_period_end,
        cancel_at_period_end=row.cancel_at_period_end,
    )
