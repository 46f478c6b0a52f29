from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from tonguemap.api.deps import get_optional_user
from tonguemap.core.errors import APIError
from tonguemap.models import User
from tonguemap.services import analytics

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


class TrackEventRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    params: dict[str, str | int | float | bool | None] = Field(default_factory=dict)
    client_id: str | None = Field(default=None, alias="clientId")


@router.post("/track")
def track_event(
    body: TrackEventRequest,
    user: User | None = Depends(get_optional_user),
):
    """İstemci olayını GA4'e aktarır; yalnızca katalogdaki adlar kabul edilir."""
    if body.name not in analytics.EVENT_NAMES:
        raise APIError(f"Unknown event name: {body.name}", status_code=400)
    sent = analytics.track_server_event(
        body.name,
        body.params,
        client_id=body.client_id,
        user_id=user.id if user else None,
    )
    return {"received": True, "forwarded": sent}


@router.get("/events")
def list_events():
    return analytics.EVENTS
