"""Request parsing and response helpers for the adapters."""

from src.xsrf_protection.utils.body_params import event_body, parse_body_params
from src.xsrf_protection.utils.cookie_helpers import parse_cookie_header, parse_cookies
from src.xsrf_protection.utils.event_helpers import (
    get_header,
    get_header_values,
    get_method,
    get_path,
)
from src.xsrf_protection.utils.response_builder import (
    empty_response,
    is_proxy_response,
    json_response,
)

__all__ = [
    "empty_response",
    "event_body",
    "get_header",
    "get_header_values",
    "get_method",
    "get_path",
    "is_proxy_response",
    "json_response",
    "parse_body_params",
    "parse_cookie_header",
    "parse_cookies",
]
