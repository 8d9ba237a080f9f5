"""Rate limiting presets and FastAPI wiring.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: API routes depend on a dependency function only.
- Swap-friendly: storage backend can be replaced (e.g., Redis) behind an
  abstract interface.
- Named presets: every action has one policy constant, keyed by a prefix so
  different actions from the same client never share a counter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import HTTPException, Request, status

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from app.core.config import settings
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitPolicy:
    """A named limit: ``max_requests`` per ``window_seconds`` per key."""

    name: str
    key_prefix: str
    max_requests: int
    window_seconds: float

    def key_for(self, identifier: str) -> str:
        return f"{self.key_prefix}:{identifier}"


REGISTRATION = RateLimitPolicy("registration", "register", 3, 15 * 60)
LOGIN = RateLimitPolicy("login", "login", 5, 15 * 60)
EMAIL_RESEND = RateLimitPolicy("email_resend", "resend", 3, 60 * 60)
API = RateLimitPolicy("api", "api", 100, 60)

PRESETS: dict[str, RateLimitPolicy] = {
    policy.name: policy for policy in (REGISTRATION, LOGIN, EMAIL_RESEND, API)
}


_limiter: AbstractRateLimiter | None = None


def get_rate_limiter() -> AbstractRateLimiter:
    """Return the process-wide rate limiter instance.

    The instance is cached in-module to preserve state across requests.
    """

    global _limiter

    if _limiter is None:
        _limiter = InMemoryFixedWindowRateLimiter(
            sweep_threshold=settings.app.rate_limit_sweep_threshold,
        )
    return _limiter


def reset_rate_limiter() -> None:
    """Drop the process-wide limiter so the next call builds a fresh one."""

    global _limiter
    _limiter = None


def get_client_ip(request: Request) -> str:
    """Best-effort client address for keying limits.

    Proxy headers are honoured when ``APP_TRUST_PROXY_HEADERS`` is set:
    the first ``X-Forwarded-For`` hop wins, then ``X-Real-IP``. Falls back to
    the socket peer, then "unknown".
    """

    if settings.app.trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first_hop = forwarded.split(",")[0].strip()
            if first_hop:
                return first_hop

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def check_rate_limit(policy: RateLimitPolicy, identifier: str) -> RateLimitResult:
    """Count one action for ``identifier`` under ``policy`` and log the outcome.

    Args:
        policy: Preset to apply.
        identifier: Client IP, email or user id.

    Returns:
        RateLimitResult from the limiter.
    """

    key = policy.key_for(identifier)
    result = get_rate_limiter().check(key, policy.max_requests, policy.window_seconds)

    log_extra = {
        "policy": policy.name,
        "key_hash": hash_identifier(key),
        "limit": result.limit,
        "remaining": result.remaining,
        "window_s": policy.window_seconds,
    }
    if result.limited:
        logger.warning(
            "rate_limit.exceeded",
            extra={**log_extra, "retry_after_s": result.retry_after_seconds},
        )
    else:
        logger.debug("rate_limit.allowed", extra=log_extra)

    return result


def rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    """Build Retry-After and X-RateLimit-* headers for a result."""

    if not settings.app.rate_limit_include_headers:
        return {}

    headers = {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(int(result.reset_at)),
    }
    if result.retry_after_seconds is not None:
        headers["Retry-After"] = str(result.retry_after_seconds)
    return headers


def raise_if_limited(result: RateLimitResult) -> None:
    """Raise HTTP 429 with rate limit headers when ``result`` is limited."""

    if not result.limited:
        return

    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Rate limit exceeded. Try again later.",
        headers=rate_limit_headers(result) or None,
    )


async def enforce_api_rate_limit(request: Request) -> None:
    """FastAPI dependency applying the general API preset per client IP.

    Raises:
        HTTPException: 429 Too Many Requests when the limit is exceeded.
    """

    if not settings.app.rate_limit_enabled:
        return

    result = check_rate_limit(API, get_client_ip(request))
    raise_if_limited(result)
