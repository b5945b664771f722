"""
Pytest Configuration and Shared Fixtures
=========================================

Common fixtures used across all test modules.

For On-Call Engineers:
    If a test fails with an unexpected 401:
    1. Check the denial reason in the captured DEBUG log (decision_logger)
    2. Verify the request path actually falls under the configured prefix
    3. Verify the carrier name matches (default "xCsrf", case-sensitive for
       cookies and body parameters, case-insensitive for headers)

For Developers:
    - Import fixtures by name in test files (pytest auto-discovers conftest.py)
    - Use make_request() for core tests, make_event() for Lambda adapter tests
    - decision_logger routes middleware decisions into caplog
"""

import logging
import os

import pytest

from src.xsrf_protection.request import RequestSnapshot

# Anti-CSRF value shared by cookie/header/param and the token claim
XSRF = "csrftoken"

DECISION_LOGGER_NAME = "tests.xsrf.decisions"


@pytest.fixture(autouse=True)
def reset_env_vars():
    """
    Reset environment variables after each test.

    Ensures XSRF_* variables set by one test don't leak into another.
    """
    original_env = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def xsrf_value() -> str:
    return XSRF


@pytest.fixture
def token_payload() -> dict:
    """Decoded token payload carrying the matching csrf claim."""
    return {"uid": 1, "csrf": XSRF, "scope": [1, 0, 1, 1]}


@pytest.fixture
def decision_logger(caplog: pytest.LogCaptureFixture) -> logging.Logger:
    """Logger to pass as the "logger" option; records land in caplog."""
    caplog.set_level(logging.DEBUG, logger=DECISION_LOGGER_NAME)
    return logging.getLogger(DECISION_LOGGER_NAME)


@pytest.fixture
def make_request():
    """Factory for RequestSnapshot objects, POST /api/signin by default."""

    def _make(
        method: str = "POST",
        path: str = "/api/signin",
        cookies: dict | None = None,
        headers: dict | None = None,
        body_params: dict | None = None,
        attributes: dict | None = None,
    ) -> RequestSnapshot:
        return RequestSnapshot.build(
            method=method,
            path=path,
            cookies=cookies,
            headers=headers,
            body_params=body_params,
            attributes=attributes,
        )

    return _make


@pytest.fixture
def make_event():
    """Factory for API Gateway REST (v1) proxy events."""

    def _make(
        method: str = "POST",
        path: str = "/api/signin",
        headers: dict | None = None,
        body: str | None = None,
        authorizer: dict | None = None,
    ) -> dict:
        event = {
            "httpMethod": method,
            "path": path,
            "headers": dict(headers or {}),
            "body": body,
            "isBase64Encoded": False,
            "requestContext": {},
        }
        if authorizer is not None:
            event["requestContext"]["authorizer"] = authorizer
        return event

    return _make
