"""Framework adapters for XSRF protection."""

from src.xsrf_protection.middleware.event_middleware import (
    XsrfEventMiddleware,
    snapshot_from_event,
    xsrf_protected,
)
from src.xsrf_protection.middleware.starlette_middleware import (
    XsrfMiddleware,
    snapshot_from_request,
)

__all__ = [
    "XsrfEventMiddleware",
    "XsrfMiddleware",
    "snapshot_from_event",
    "snapshot_from_request",
    "xsrf_protected",
]
