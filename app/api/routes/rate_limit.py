from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from app.core.errors import ValidationAppError
from app.core.rate_limit import (
    EMAIL_RESEND,
    PRESETS,
    check_rate_limit,
    enforce_api_rate_limit,
    get_client_ip,
    raise_if_limited,
    rate_limit_headers,
)
from app.schemas.rate_limit import RateLimitCheckRequest, RateLimitCheckResponse

router = APIRouter(prefix="/api", tags=["Rate limit"], dependencies=[Depends(enforce_api_rate_limit)])


@router.post("/rate-limit/check", response_model=RateLimitCheckResponse)
async def check_action_rate_limit(
    payload: RateLimitCheckRequest,
    request: Request,
    response: Response,
) -> RateLimitCheckResponse:
    """Count one attempt of a sensitive action before the client performs it.

    Registration and login attempts are keyed by client IP, verification
    email resends by the (case-insensitive) address.

    Raises:
        ValidationAppError: 400 if ``email`` is missing for email_resend.
        HTTPException: 429 with Retry-After when the attempt is over the limit.
    """
    policy = PRESETS[payload.action]

    if policy is EMAIL_RESEND:
        email = (payload.email or "").strip().lower()
        if not email:
            raise ValidationAppError(
                code="email_required",
                message="email is required for email_resend checks",
            )
        identifier = email
    else:
        identifier = get_client_ip(request)

    result = check_rate_limit(policy, identifier)
    raise_if_limited(result)

    response.headers.update(rate_limit_headers(result))
    return RateLimitCheckResponse(
        limited=result.limited,
        remaining=result.remaining,
        reset_at=result.reset_at,
        retry_after_seconds=result.retry_after_seconds,
    )
