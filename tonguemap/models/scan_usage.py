from datetime import date

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class ScanUsage(SQLModel, table=True):
    """Günlük tarama sayacı; artırma yalnızca services/quota.py içindeki tek UPDATE ile yapılır."""

    __tablename__ = "scan_usage"
    __table_args__ = (UniqueConstraint("user_id", "scan_date", name="uq_scan_usage_user_day"),)
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    scan_date: date = Field(index=True)
    scans_count: int = 0
