"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from autobrief.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    hash_identifier,
    set_request_id,
)


@pytest.fixture
def log_stream():
    logger = logging.getLogger("test_redaction")
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    yield logger, stream

    logger.handlers.clear()


def test_sensitive_filter_redacts_api_keys(log_stream):
    logger, stream = log_stream

    logger.info(
        "test_event",
        extra={
            "api_key": "sk-secret-123",
            "authorization": "Bearer abc",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()

    assert "sk-secret-123" not in output
    assert "Bearer abc" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_raw_client_addresses_and_prompts_redacted(log_stream):
    logger, stream = log_stream

    logger.warning(
        "rate_limit.exceeded",
        extra={
            "client_ip": "203.0.113.5",
            "prompt": "Analyse the book Atomic Habits",
            "client_hash": hash_identifier("203.0.113.5"),
            "retry_after_s": 42,
        },
    )

    payload = json.loads(stream.getvalue())

    assert "203.0.113.5" not in stream.getvalue()
    assert "Atomic Habits" not in stream.getvalue()
    assert payload["client_ip"] == "[REDACTED]"
    assert payload["client_hash"] == hash_identifier("203.0.113.5")
    assert payload["retry_after_s"] == 42


def test_sensitive_filter_allows_safe_fields(log_stream):
    logger, stream = log_stream

    logger.info(
        "safe_event",
        extra={
            "route": "/api/ingest",
            "status": 200,
            "duration_ms": 150.5,
        },
    )

    output = stream.getvalue()

    assert "/api/ingest" in output
    assert "200" in output
    assert "[REDACTED]" not in output


def test_sensitive_filter_redacts_nested_dicts(log_stream):
    logger, stream = log_stream

    logger.info(
        "nested_event",
        extra={
            "headers": {
                "X-Forwarded-For": "203.0.113.5",
                "user-agent": "pytest",
            },
            "safe_data": {"count": 5, "type": "test"},
        },
    )

    output = stream.getvalue()

    assert "203.0.113.5" not in output
    assert "[REDACTED]" in output
    assert "pytest" in output


def test_request_id_from_context(log_stream):
    logger, stream = log_stream

    set_request_id("req-123")
    try:
        logger.info("with_context")
    finally:
        clear_request_id()

    assert json.loads(stream.getvalue())["request_id"] == "req-123"


def test_hash_identifier_is_stable_and_short():
    digest = hash_identifier("203.0.113.5")

    assert digest == hash_identifier("203.0.113.5")
    assert digest != hash_identifier("203.0.113.6")
    assert len(digest) == 16
