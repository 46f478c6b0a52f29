from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SaveScanRequest(BaseModel):
    """Dashboard'a kayıt: sonuç her iki biçimde de olabilir."""

    model_config = ConfigDict(populate_by_name=True)

    result: dict[str, Any]
    image_url: str | None = Field(default=None, alias="imageUrl")


class SaveScanResponse(BaseModel):
    id: int
    created_at: str


class ScanHistoryItem(BaseModel):
    id: int
    created_at: str
    image_url: str | None = None
    primary_pattern: str
    coat: str
    color: str
    shape: str
    moisture: str
    recommendations: str | None = None
    recommended_formula: str | None = None
    severity: str | None = None
    format: str


class ScanDetail(ScanHistoryItem):
    result: dict[str, Any]


class ShareResponse(BaseModel):
    token: str
