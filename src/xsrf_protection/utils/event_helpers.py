"""Event helper utilities for API Gateway Proxy Integration events.

Provides case-insensitive header lookup and method/path extraction that
works for REST API (v1) and HTTP API (v2) payloads.
"""


def _headers(event: dict) -> dict:
    return event.get("headers") or {}


def get_header(event: dict, name: str, default: str | None = None) -> str | None:
    """Get a header value with case-insensitive lookup.

    HTTP API (v2) lower-cases header names; REST API (v1) keeps them as
    sent by the client.

    Args:
        event: API Gateway Proxy Integration event dict.
        name: Header name (any case).
        default: Value to return if header is not present.

    Returns:
        Header value or default.
    """
    headers = _headers(event)
    if name.lower() in headers:
        return headers[name.lower()]
    for key, value in headers.items():
        if key.lower() == name.lower():
            return value
    return default


def get_header_values(event: dict, name: str) -> list[str]:
    """Get every value received for a header.

    Prefers multiValueHeaders (REST API v1), falling back to the single
    value in headers. HTTP API (v2) joins repeated headers with commas,
    which are left intact.
    """
    for key, values in (event.get("multiValueHeaders") or {}).items():
        if key.lower() == name.lower() and values:
            return list(values)
    value = get_header(event, name)
    return [] if value is None else [value]


def get_method(event: dict) -> str:
    """HTTP method for v1 ("httpMethod") and v2 (requestContext.http) events."""
    method = event.get("httpMethod")
    if not method:
        http = (event.get("requestContext") or {}).get("http") or {}
        method = http.get("method") or ""
    return method.upper()


def get_path(event: dict) -> str:
    """Request path for v1 ("path") and v2 ("rawPath") events."""
    return event.get("path") or event.get("rawPath") or "/"
