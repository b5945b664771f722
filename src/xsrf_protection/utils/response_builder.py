"""Denial responses in the API Gateway proxy integration shape.

    {"statusCode": int, "headers": dict, "body": str, "isBase64Encoded": bool}

An error hook may return any dict with an int "statusCode"; the event
middleware uses is_proxy_response() to decide whether to send it.
"""

from typing import Any

import orjson


def _proxy(status_code: int, body: str, headers: dict[str, str]) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": headers,
        "body": body,
        "isBase64Encoded": False,
    }


def empty_response(status_code: int) -> dict[str, Any]:
    """Bodiless response, the default XSRF denial."""
    return _proxy(status_code, "", {})


def json_response(
    status_code: int,
    body: dict | list,
    headers: dict[str, str] | None = None,
) -> dict[str, Any]:
    """JSON response for error hooks that want to explain the denial.

    Example:
        >>> json_response(401, {"error": "xsrf"})["body"]
        '{"error":"xsrf"}'
    """
    merged = {"Content-Type": "application/json", **(headers or {})}
    return _proxy(status_code, orjson.dumps(body).decode(), merged)


def is_proxy_response(value: object) -> bool:
    return isinstance(value, dict) and isinstance(value.get("statusCode"), int)
