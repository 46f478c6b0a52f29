from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from .user import _utcnow


class ShareToken(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    scan_id: int = Field(foreign_key="tongue_scans.id", index=True)
    token: str = Field(unique=True, index=True)
    created_at: datetime = Field(default_factory=_utcnow, sa_type=DateTime(timezone=True))
