"""Admin status resolution with a short-lived in-process cache.

Route guarding asks "is this subject an administrator?" on every navigation.
Answers from the membership store are cached for ``ttl_seconds`` so the
common case costs a dict lookup. Revoking admin rights therefore takes up to
one TTL to reach a long-lived session.

Store failures are never cached: the subject is treated as non-admin for
that one call and the next call queries the store again.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.membership.base import AbstractMembershipStore
from app.core.errors import MembershipStoreError
from app.core.logging import hash_identifier
from app.core.observability import log_store_operation

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0
DEFAULT_SWEEP_THRESHOLD = 100


@dataclass
class AdminCacheEntry:
    """Cached admin flag for one subject."""

    subject_id: str
    is_admin: bool
    expires_at: float


class AdminStatusResolver:
    """Resolve admin membership through a TTL cache in front of the store.

    Args:
        store: Authoritative membership store.
        ttl_seconds: Lifetime of a cached answer.
        sweep_threshold: Cache size above which expired entries are evicted
            on the next write.
        clock: Time source; monotonic seconds by default.
    """

    def __init__(
        self,
        store: AbstractMembershipStore,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        sweep_threshold: int = DEFAULT_SWEEP_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        if sweep_threshold < 1:
            raise ValueError("sweep_threshold must be >= 1")

        self._store = store
        self._ttl = ttl_seconds
        self._sweep_threshold = sweep_threshold
        self._clock = clock
        self._entries: dict[str, AdminCacheEntry] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._store_errors = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"AdminStatusResolver(ttl_seconds={self._ttl}, size={len(self._entries)}, "
            f"hits={self._hits}, misses={self._misses}, store_errors={self._store_errors})"
        )

    async def resolve(self, subject_id: str) -> bool:
        """Return whether ``subject_id`` is an administrator.

        Args:
            subject_id: Stable id of an authenticated principal.

        Returns:
            The cached flag while it is live; otherwise the store's answer.
            False when the store fails.
        """

        cached = self._get_live(subject_id)
        if cached is not None:
            return cached.is_admin

        # Store call happens outside the lock; concurrent misses for the
        # same subject may both reach the store.
        start = time.perf_counter()
        try:
            is_admin = await self._store.is_admin(subject_id)
        except MembershipStoreError as exc:
            with self._lock:
                self._store_errors += 1
            log_store_operation(
                operation="select",
                table="admin_users",
                subject_id=subject_id,
                error=exc,
                duration_ms=(time.perf_counter() - start) * 1000,
            )
            logger.warning(
                "admin_status.store_error",
                extra={
                    "subject_hash": hash_identifier(subject_id),
                    "error_code": exc.code,
                    "fallback": "non_admin",
                },
            )
            return False

        self._put(subject_id, is_admin)
        return is_admin

    def invalidate(self, subject_id: str) -> None:
        """Drop the cached answer for one subject."""

        with self._lock:
            self._entries.pop(subject_id, None)

    def clear(self) -> None:
        """Remove all cached entries and reset counters."""

        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
            self._store_errors = 0

    def stats(self) -> dict[str, int | float]:
        """Return lightweight cache metrics without exposing subject ids."""

        with self._lock:
            return {
                "ttl_seconds": self._ttl,
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "store_errors": self._store_errors,
            }

    def _get_live(self, subject_id: str) -> AdminCacheEntry | None:
        with self._lock:
            entry = self._entries.get(subject_id)
            if entry is None or self._clock() > entry.expires_at:
                self._misses += 1
                logger.debug(
                    "admin_status.cache_miss",
                    extra={
                        "subject_hash": hash_identifier(subject_id),
                        "reason": "not_found" if entry is None else "expired",
                    },
                )
                return None

            self._hits += 1
            return entry

    def _put(self, subject_id: str, is_admin: bool) -> None:
        with self._lock:
            now = self._clock()
            self._entries[subject_id] = AdminCacheEntry(
                subject_id=subject_id,
                is_admin=is_admin,
                expires_at=now + self._ttl,
            )
            if len(self._entries) > self._sweep_threshold:
                self._sweep_expired_locked(now)

            logger.debug(
                "admin_status.cached",
                extra={
                    "subject_hash": hash_identifier(subject_id),
                    "is_admin": is_admin,
                    "size": len(self._entries),
                    "ttl_s": self._ttl,
                },
            )

    def _sweep_expired_locked(self, now: float) -> None:
        expired = [k for k, entry in self._entries.items() if now > entry.expires_at]
        for key in expired:
            del self._entries[key]
