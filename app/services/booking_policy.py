"""Booking cancellation window.

A confirmed booking may be cancelled only while at least
``window_hours`` remain before the event starts. Exactly 24 hours is still
allowed.
"""

from __future__ import annotations

from datetime import datetime, timezone

DEFAULT_CANCELLATION_WINDOW_HOURS = 24.0


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def hours_until_event(event_starts_at: datetime, now: datetime | None = None) -> float:
    """Hours from ``now`` until the event starts (negative once it has started)."""

    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    return (_as_utc(event_starts_at) - now).total_seconds() / 3600


def can_cancel(
    event_starts_at: datetime,
    *,
    now: datetime | None = None,
    window_hours: float = DEFAULT_CANCELLATION_WINDOW_HOURS,
) -> bool:
    return hours_until_event(event_starts_at, now) >= window_hours
