from datetime import datetime

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel

from .user import _utcnow


class TongueScan(SQLModel, table=True):
    """Kullanıcının kaydettiği tarama. Oluşturulduktan sonra güncellenmez."""

    __tablename__ = "tongue_scans"
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=_utcnow, index=True, sa_type=DateTime(timezone=True))
    image_url: str | None = None
    # Eski (düz) sonuç alanları: dashboard listesi bunları okur
    primary_pattern: str = ""
    coat: str = ""
    color: str = ""
    shape: str = ""
    moisture: str = ""
    recommendations: str | None = None
    recommended_formula: str | None = None
    severity: str | None = None
    result_format: str = "legacy"  # "legacy" | "current"
    result_json: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
