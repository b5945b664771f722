"""Double-submit cookie XSRF protection for Lambda and Starlette apps."""

from src.xsrf_protection.config import (
    PayloadEncoding,
    XsrfOptions,
    load_options_from_env,
)
from src.xsrf_protection.protection import XsrfProtection
from src.xsrf_protection.request import RequestSnapshot, XsrfRequest
from src.xsrf_protection.verdict import DenialReason, Verdict

__all__ = [
    "DenialReason",
    "PayloadEncoding",
    "RequestSnapshot",
    "Verdict",
    "XsrfOptions",
    "XsrfProtection",
    "XsrfRequest",
    "load_options_from_env",
]
