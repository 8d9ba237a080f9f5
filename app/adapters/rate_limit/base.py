"""Rate limiter interfaces.

Endpoints depend on this abstraction (not the concrete implementation) so the
per-process table can later be replaced by a shared store (e.g., Redis)
without touching the HTTP layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check.

    Attributes:
        limited: Whether the caller must reject the action.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when limited).
        reset_at: UNIX epoch seconds when the current window ends.
        retry_after_seconds: Suggested wait time in seconds when limited.
    """

    limited: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after_seconds: int | None

    @property
    def allowed(self) -> bool:
        return not self.limited


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def check(self, key: str, max_requests: int, window_seconds: float) -> RateLimitResult:
        """Count one request for ``key`` and report whether it is over the limit.

        Args:
            key: Caller-defined identifier (e.g., "login:203.0.113.7").
            max_requests: Requests allowed per window.
            window_seconds: Window length in seconds.

        Returns:
            RateLimitResult describing the decision.
        """
        raise NotImplementedError
