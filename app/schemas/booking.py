"""Pydantic schemas for booking policy checks."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class CancellationCheckRequest(BaseModel):
    event_starts_at: datetime = Field(
        ...,
        description="Event start time (ISO-8601). Naive values are read as UTC.",
    )


class CancellationCheckResponse(BaseModel):
    """Whether a booking for the event may still be cancelled."""

    allowed: bool
    hours_until_event: float = Field(..., description="Hours from now until the event starts.")
    window_hours: float = Field(..., description="Minimum notice required for cancellation.")
