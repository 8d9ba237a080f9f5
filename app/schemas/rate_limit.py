"""Pydantic schemas for rate limit checks."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class RateLimitCheckRequest(BaseModel):
    """Action the client is about to attempt."""

    action: Literal["registration", "login", "email_resend"] = Field(
        ..., description="Preset to count the attempt against."
    )
    email: str | None = Field(
        default=None,
        max_length=320,
        description="Address to key email resends by. Required for email_resend.",
    )


class RateLimitCheckResponse(BaseModel):
    """Outcome of counting one attempt."""

    limited: bool = Field(..., description="True when the attempt must be rejected.")
    remaining: int = Field(..., ge=0, description="Attempts left in the current window.")
    reset_at: float = Field(..., description="UNIX time (seconds) when the window ends.")
    retry_after_seconds: int | None = Field(
        default=None, description="Suggested wait before retrying, when limited."
    )
