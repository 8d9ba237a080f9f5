"""Structured records for calls to external stores.

Every lookup against the auth provider or membership store that fails is
reported through ``log_store_operation`` so operators can correlate outages
with denied admin access. Records go through the standard logging pipeline
(JSON + redaction); logging handles its own I/O errors.
"""

from __future__ import annotations

import logging

from app.core.logging import hash_identifier

logger = logging.getLogger("app.store")


def log_store_operation(
    *,
    operation: str,
    table: str,
    subject_id: str | None = None,
    error: BaseException | None = None,
    duration_ms: float | None = None,
    result_count: int | None = None,
) -> None:
    """Emit one structured record describing a store call.

    Args:
        operation: Logical operation name (e.g., "select").
        table: Target table or endpoint.
        subject_id: Subject the call was made for; logged as a hash.
        error: Failure raised by the call, if any.
        duration_ms: Wall time of the call.
        result_count: Rows returned on success.
    """
    extra: dict[str, object] = {
        "operation": operation,
        "table": table,
        "subject_hash": hash_identifier(subject_id) if subject_id else None,
        "duration_ms": round(duration_ms, 2) if duration_ms is not None else None,
    }

    if error is not None:
        extra["error_type"] = type(error).__name__
        extra["error_msg"] = str(error)
        logger.error("store.operation_failed", extra=extra)
        return

    extra["result_count"] = result_count
    logger.debug("store.operation", extra=extra)
