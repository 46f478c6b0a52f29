from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class Subscription(SQLModel, table=True):
    """Stripe aboneliğinin yerel kopyası: yalnızca webhook'lar (ve checkout'ta müşteri oluşturma) yazar."""

    __tablename__ = "subscriptions"
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", unique=True, index=True)
    stripe_customer_id: str | None = Field(default=None, index=True)
    stripe_subscription_id: str | None = Field(default=None, index=True)
    stripe_price_id: str | None = None
    status: str = "active"  # active | trialing | past_due | canceled | incomplete ...
    tier: str = "free"  # "free" | "premium"
    current_period_start: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    current_period_end: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    cancel_at_period_end: bool = False

    @property
    def has_premium(self) -> bool:
        return self.tier == "premium" and self.status == "active"
