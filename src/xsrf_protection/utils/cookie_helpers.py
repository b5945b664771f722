"""Cookie parsing utilities using stdlib http.cookies.

Handles both API Gateway payload formats:
- REST API (v1) and Function URLs: a single "cookie" header
- HTTP API (v2): a "cookies" list of "name=value" strings
"""

from http.cookies import CookieError, SimpleCookie

from src.xsrf_protection.utils.event_helpers import get_header


def parse_cookie_header(cookie_header: str) -> dict[str, str]:
    """Parse a Cookie header value into a name -> value dict.

    A header SimpleCookie rejects yields an empty dict.
    """
    if not cookie_header:
        return {}
    cookie = SimpleCookie()
    try:
        cookie.load(cookie_header)
    except CookieError:
        return {}
    return {k: v.value for k, v in cookie.items()}


def parse_cookies(event: dict) -> dict[str, str]:
    """Parse cookies from an API Gateway event.

    Args:
        event: API Gateway Proxy Integration event dict.

    Returns:
        Dict mapping cookie names to values. Empty dict if no cookies.
    """
    cookies: dict[str, str] = {}
    for item in event.get("cookies") or []:
        cookies.update(parse_cookie_header(item))
    cookies.update(parse_cookie_header(get_header(event, "cookie", "") or ""))
    return cookies
