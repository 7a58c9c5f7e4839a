"""Tests for the request context middleware.

Verifies that every response gets:
- An X-Request-ID header (generated or echoed from the request)
- The id stamped onto log records emitted while handling the request
"""

from __future__ import annotations

import logging
import uuid

import pytest
from fastapi.testclient import TestClient

from credvault.middleware.request_context import (
    _RequestContextFilter,
    install_request_context_filter,
    request_id_var,
)


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    req_id = resp.headers.get("x-request-id")
    assert req_id is not None
    uuid.UUID(req_id)  # raises ValueError if invalid


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    custom_id = "my-custom-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": custom_id})
    assert resp.headers.get("x-request-id") == custom_id


def test_request_id_present_on_error_responses(client: TestClient) -> None:
    resp = client.get("/auth/me")  # no session → 401
    assert resp.status_code == 401
    assert resp.headers.get("x-request-id") is not None


def test_summary_line_logged(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="credvault.middleware.request_context"):
        client.get("/health", headers={"X-Request-ID": "trace-1"})

    summaries = [r for r in caplog.records if getattr(r, "path", None) == "/health"]
    assert summaries
    assert summaries[-1].status_code == 200  # type: ignore[attr-defined]


def test_filter_stamps_current_request_id() -> None:
    record = logging.LogRecord("x", logging.INFO, "f.py", 1, "msg", (), None)
    token = request_id_var.set("abc-123")
    try:
        _RequestContextFilter().filter(record)
    finally:
        request_id_var.reset(token)
    assert record.request_id == "abc-123"  # type: ignore[attr-defined]

    outside = logging.LogRecord("x", logging.INFO, "f.py", 1, "msg", (), None)
    _RequestContextFilter().filter(outside)
    assert outside.request_id == "-"  # type: ignore[attr-defined]


def test_install_filter_is_idempotent() -> None:
    install_request_context_filter()
    install_request_context_filter()
    for handler in logging.getLogger().handlers:
        count = sum(isinstance(f, _RequestContextFilter) for f in handler.filters)
        assert count <= 1
