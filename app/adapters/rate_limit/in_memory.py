"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Windows start at a key's first request, not at wall-clock boundaries.
  A burst of up to 2x the limit is possible across a window edge.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_THRESHOLD = 10_000


@dataclass
class RateLimitEntry:
    count: int
    reset_at: float


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed time window per key.

    Each key gets a window of ``window_seconds`` starting at its first
    request. Requests inside the window increment a counter until it reaches
    ``max_requests``; further requests are reported as limited without being
    counted. The first request after ``reset_at`` opens a fresh window.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        sweep_threshold: int = DEFAULT_SWEEP_THRESHOLD,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            sweep_threshold: Table size above which expired entries are evicted
                when a new window is opened.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If sweep_threshold is invalid.
        """
        if sweep_threshold < 1:
            raise ValueError("sweep_threshold must be >= 1")

        self._sweep_threshold = sweep_threshold
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, RateLimitEntry] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def check(self, key: str, max_requests: int, window_seconds: float) -> RateLimitResult:
        """Count one request for ``key`` within its fixed window.

        Args:
            key: Unique identifier for rate limiting (e.g., "register:<ip>").
            max_requests: Maximum requests allowed per window.
            window_seconds: Window length in seconds.

        Returns:
            RateLimitResult with the decision and window metadata.

        Raises:
            ValueError: If key is empty or the limits are invalid.
        """
        if not key:
            raise ValueError("key must be a non-empty string")
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        now = self._clock()

        with self._lock:
            entry = self._entries.get(key)

            if entry is None or now > entry.reset_at:
                entry = RateLimitEntry(count=1, reset_at=now + window_seconds)
                self._entries[key] = entry
                if len(self._entries) > self._sweep_threshold:
                    self._sweep_expired_locked(now)
                return RateLimitResult(
                    limited=False,
                    limit=max_requests,
                    remaining=max_requests - 1,
                    reset_at=entry.reset_at,
                    retry_after_seconds=None,
                )

            if entry.count >= max_requests:
                return RateLimitResult(
                    limited=True,
                    limit=max_requests,
                    remaining=0,
                    reset_at=entry.reset_at,
                    retry_after_seconds=max(1, math.ceil(entry.reset_at - now)),
                )

            entry.count += 1
            return RateLimitResult(
                limited=False,
                limit=max_requests,
                remaining=max_requests - entry.count,
                reset_at=entry.reset_at,
                retry_after_seconds=None,
            )

    def reset(self, key: str) -> None:
        """Forget the window for ``key`` (e.g., after a successful login)."""

        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every tracked window."""

        with self._lock:
            self._entries.clear()

    def _sweep_expired_locked(self, now: float) -> None:
        expired = [k for k, entry in self._entries.items() if now > entry.reset_at]
        for key in expired:
            del self._entries[key]
        logger.debug(
            "rate_limit.swept",
            extra={"evicted": len(expired), "size": len(self._entries)},
        )
