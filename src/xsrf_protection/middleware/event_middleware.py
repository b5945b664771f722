"""XSRF middleware for Lambda handlers behind API Gateway.

Validates the double-submit value on state-changing requests. The
anti-CSRF value is read from a cookie, header or body parameter and
compared with a claim inside the token payload that an upstream
authorizer (or an earlier middleware) attached to the request.

Usage (Powertools-style router middleware):
    from src.xsrf_protection.middleware import XsrfEventMiddleware

    xsrf = XsrfEventMiddleware(path="/api", passthrough="/api/auth")

    @router.post("/api/profile", middlewares=[xsrf])
    def update_profile():
        ...

Usage (plain Lambda handler):
    @xsrf_protected(path="/api")
    def lambda_handler(event, context):
        ...

Payload attribute lookup order:
    1. The router context dict (app.append_context(token=...))
    2. requestContext.authorizer (Lambda or JWT authorizer output)
"""

import functools
from collections.abc import Callable, Mapping
from typing import Any

from src.xsrf_protection.gate import is_mutating_method
from src.xsrf_protection.protection import XsrfProtection
from src.xsrf_protection.request import RequestSnapshot
from src.xsrf_protection.responder import DENIED_STATUS_CODE
from src.xsrf_protection.utils.body_params import event_body, parse_body_params
from src.xsrf_protection.utils.cookie_helpers import parse_cookies
from src.xsrf_protection.utils.event_helpers import (
    get_header,
    get_header_values,
    get_method,
    get_path,
)
from src.xsrf_protection.utils.response_builder import (
    empty_response,
    is_proxy_response,
)


def snapshot_from_event(
    event: dict, context: Mapping[str, Any] | None = None
) -> RequestSnapshot:
    """Build a RequestSnapshot from an API Gateway proxy event.

    Args:
        event: API Gateway Proxy Integration event dict (v1 or v2)
        context: Router context dict; takes precedence over the authorizer

    Returns:
        Read-only request view
    """
    method = get_method(event)

    names = {key.lower() for key in event.get("headers") or {}}
    names |= {key.lower() for key in event.get("multiValueHeaders") or {}}
    headers = {name: get_header_values(event, name) for name in names}

    body_params: dict[str, Any] = {}
    if is_mutating_method(method):
        body_params = parse_body_params(
            event_body(event), get_header(event, "content-type")
        )

    attributes = dict((event.get("requestContext") or {}).get("authorizer") or {})
    attributes.update(context or {})

    return RequestSnapshot.build(
        method=method,
        path=get_path(event),
        cookies=parse_cookies(event),
        headers=headers,
        body_params=body_params,
        attributes=attributes,
    )


class XsrfEventMiddleware:
    """Powertools-style middleware: called as middleware(app, next_middleware).

    Args:
        protection: Configured verifier. Keyword arguments build one when
            omitted.
        **overrides: XsrfOptions fields
    """

    def __init__(self, protection: XsrfProtection | None = None, **overrides: Any):
        if protection is None:
            protection = XsrfProtection(**overrides)
        elif overrides:
            protection = XsrfProtection(protection.options, **overrides)
        self.protection = protection

    def check_event(
        self, event: dict, context: Mapping[str, Any] | None = None
    ) -> dict | None:
        """Verify an event.

        Returns:
            None when the request may proceed, else the denial response
        """
        return self.protection.process(
            snapshot_from_event(event, context),
            empty_response(DENIED_STATUS_CODE),
            lambda: None,
            is_proxy_response,
        )

    def __call__(self, app: Any, next_middleware: Callable[[Any], Any]) -> Any:
        event = app.current_event.raw_event
        context = getattr(app, "context", None)
        if not isinstance(context, Mapping):
            context = {}

        denied = self.check_event(event, context)
        if denied is not None:
            return denied
        return next_middleware(app)


def xsrf_protected(
    protection: XsrfProtection | None = None, **overrides: Any
) -> Callable[[Callable[[dict, Any], dict]], Callable[[dict, Any], dict]]:
    """Decorator factory protecting a plain lambda_handler(event, context)."""
    middleware = XsrfEventMiddleware(protection, **overrides)

    def decorator(handler: Callable[[dict, Any], dict]) -> Callable[[dict, Any], dict]:
        @functools.wraps(handler)
        def wrapper(event: dict, context: Any) -> dict:
            denied = middleware.check_event(event)
            if denied is not None:
                return denied
            return handler(event, context)

        return wrapper

    return decorator
