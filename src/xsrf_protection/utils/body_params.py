"""Parsed body parameters for anti-CSRF lookup.

Body shapes that can carry the anti-CSRF value:
- application/x-www-form-urlencoded
- multipart/form-data (Starlette adapter only, via request.form())
- application/json with an object at the top level

parse_body_params() handles raw bodies (API Gateway events, and JSON in
the Starlette adapter). Any other content type, or a body that fails to
parse, yields no parameters. The request itself is left for the
downstream handler to reject.
"""

import base64
import binascii
import urllib.parse
from typing import Any

import orjson

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"
MULTIPART_CONTENT_TYPE = "multipart/form-data"


def media_type(content_type: str | None) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def parse_body_params(body: bytes | str | None, content_type: str | None) -> dict[str, Any]:
    """Parse a request body into a parameter dict.

    Repeated form fields keep their first value, matching how the first
    header value is used.

    Args:
        body: Raw body
        content_type: Content-Type header value

    Returns:
        Parameter dict, empty if the body has no usable parameters
    """
    if not body:
        return {}

    kind = media_type(content_type)

    if kind == FORM_CONTENT_TYPE:
        text = body.decode("utf-8", "replace") if isinstance(body, bytes) else body
        params: dict[str, Any] = {}
        for key, value in urllib.parse.parse_qsl(text, keep_blank_values=True):
            params.setdefault(key, value)
        return params

    if kind == JSON_CONTENT_TYPE or kind.endswith("+json"):
        try:
            decoded = orjson.loads(body)
        except orjson.JSONDecodeError:
            return {}
        return decoded if isinstance(decoded, dict) else {}

    return {}


def event_body(event: dict) -> bytes | str | None:
    """Raw body of an API Gateway event, base64-decoded when flagged."""
    body = event.get("body")
    if body and event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError):
            return None
    return body
