from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.core.auth import require_subject
from app.core.config import settings
from app.core.rate_limit import enforce_api_rate_limit
from app.schemas.booking import CancellationCheckRequest, CancellationCheckResponse
from app.services.booking_policy import can_cancel, hours_until_event

router = APIRouter(prefix="/api", tags=["Bookings"], dependencies=[Depends(enforce_api_rate_limit)])


@router.post(
    "/bookings/cancellation-check",
    response_model=CancellationCheckResponse,
    dependencies=[Depends(require_subject)],
)
async def cancellation_check(payload: CancellationCheckRequest) -> CancellationCheckResponse:
    """Tell a participant whether a booking for this event can still be cancelled."""
    window = settings.app.cancellation_window_hours
    now = datetime.now(timezone.utc)
    return CancellationCheckResponse(
        allowed=can_cancel(payload.event_starts_at, now=now, window_hours=window),
        hours_until_event=round(hours_until_event(payload.event_starts_at, now), 3),
        window_hours=window,
    )
