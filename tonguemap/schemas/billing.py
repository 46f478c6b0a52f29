from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CheckoutRequest(BaseModel):
    """priceId boşsa yapılandırılmış premium fiyatı kullanılır."""

    model_config = ConfigDict(populate_by_name=True)

    price_id: str | None = Field(default=None, alias="priceId")


class CheckoutResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    url: str | None = None


class PortalResponse(BaseModel):
    url: str


class SubscriptionStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tier: str = "free"
    status: str = "active"
    has_premium: bool = Field(default=False, alias="hasPremium")
    current_period_end: datetime | None = Field(default=None, alias="currentPeriodEnd")
    cancel_at_period_end: bool | None = Field(default=None, alias="cancelAtPeriodEnd")
