"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from app.core.logging import (
    JsonFormatter,
    SensitiveDataFilter,
    clear_request_id,
    hash_identifier,
    set_request_id,
)


@pytest.fixture
def capture():
    """Logger wired with the production filter/formatter pair, plus its stream."""

    logger = logging.getLogger("test_redaction")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    yield logger, stream

    logger.handlers.clear()


def test_sensitive_filter_redacts_session_material(capture):
    logger, stream = capture

    logger.info(
        "auth_event",
        extra={
            "access_token": "eyJhbGciOi.secret",
            "Authorization": "Bearer eyJhbGciOi.secret",
            "apikey": "anon-key-123",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()

    assert "eyJhbGciOi.secret" not in output
    assert "anon-key-123" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_sensitive_filter_redacts_participant_contact_details(capture):
    logger, stream = capture

    logger.info(
        "resend_event",
        extra={
            "email": "participant@example.org",
            "phone_number": "+351 912 345 678",
            "attempts": 2,
        },
    )

    output = stream.getvalue()

    assert "participant@example.org" not in output
    assert "912 345 678" not in output
    assert "attempts" in output


def test_sensitive_filter_allows_safe_fields(capture):
    logger, stream = capture

    logger.info(
        "route_guard.redirect",
        extra={
            "path": "/admin/events",
            "redirect_to": "/dashboard",
            "is_admin": False,
        },
    )

    record = json.loads(stream.getvalue())

    assert record["path"] == "/admin/events"
    assert record["redirect_to"] == "/dashboard"
    assert "[REDACTED]" not in stream.getvalue()


def test_sensitive_filter_redacts_nested_dicts(capture):
    logger, stream = capture

    logger.info(
        "nested_event",
        extra={
            "headers": {
                "cookie": "sb-access-token=secret-session",
                "user-agent": "pytest",
            },
        },
    )

    output = stream.getvalue()

    assert "secret-session" not in output
    assert "pytest" in output


def test_request_id_from_context_is_included(capture):
    logger, stream = capture

    set_request_id("req-123")
    try:
        logger.info("with_context")
    finally:
        clear_request_id()

    assert json.loads(stream.getvalue())["request_id"] == "req-123"


def test_hash_identifier_is_stable_and_opaque():
    digest = hash_identifier("participant-0001")

    assert digest == hash_identifier("participant-0001")
    assert digest != hash_identifier("participant-0002")
    assert len(digest) == 16
    assert "participant" not in digest
