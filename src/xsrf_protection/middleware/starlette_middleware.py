"""XSRF middleware for FastAPI / Starlette applications.

Usage:
    from fastapi import FastAPI
    from src.xsrf_protection.middleware import XsrfMiddleware

    app = FastAPI()
    app.add_middleware(
        XsrfMiddleware,
        path="/api",
        passthrough=["/api/auth/signin"],
    )

The token payload is read from request.state (set by an authentication
middleware added after this one, so it runs first), then from the ASGI
scope.
"""

from typing import Any

from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from src.xsrf_protection.gate import is_mutating_method
from src.xsrf_protection.protection import XsrfProtection
from src.xsrf_protection.request import RequestSnapshot
from src.xsrf_protection.responder import DENIED_STATUS_CODE, respond_denied
from src.xsrf_protection.utils.body_params import (
    FORM_CONTENT_TYPE,
    MULTIPART_CONTENT_TYPE,
    media_type,
    parse_body_params,
)

_MISSING = object()


def _is_response(value: Any) -> bool:
    return isinstance(value, Response)


def _request_attribute(request: Request, name: str) -> Any:
    value = getattr(request.state, name, _MISSING)
    if value is _MISSING:
        return request.scope.get(name)
    return value


async def _form_params(request: Request) -> dict[str, Any]:
    """Text fields of a urlencoded or multipart form, first value wins."""
    # Cached body is replayed to the downstream app by BaseHTTPMiddleware
    await request.body()
    params: dict[str, Any] = {}
    try:
        async with request.form() as form:
            for key, value in form.multi_items():
                if isinstance(value, str):
                    params.setdefault(key, value)
    except (MultiPartException, HTTPException):
        return {}
    return params


async def snapshot_from_request(request: Request, attribute: str) -> RequestSnapshot:
    """Build a RequestSnapshot from a Starlette request.

    The body is only read for mutating methods. Form bodies go through
    request.form(); anything else through parse_body_params().
    """
    headers: dict[str, list[str]] = {}
    for name, value in request.headers.items():
        headers.setdefault(name, []).append(value)

    body_params: dict[str, Any] = {}
    if is_mutating_method(request.method):
        content_type = request.headers.get("content-type")
        if media_type(content_type) in (FORM_CONTENT_TYPE, MULTIPART_CONTENT_TYPE):
            body_params = await _form_params(request)
        else:
            body_params = parse_body_params(await request.body(), content_type)

    return RequestSnapshot.build(
        method=request.method,
        path=request.url.path,
        cookies=request.cookies,
        headers=headers,
        body_params=body_params,
        attributes={attribute: _request_attribute(request, attribute)},
    )


class XsrfMiddleware(BaseHTTPMiddleware):
    """Double-submit verification for every request reaching the app."""

    def __init__(
        self,
        app: ASGIApp,
        protection: XsrfProtection | None = None,
        **overrides: Any,
    ) -> None:
        super().__init__(app)
        if protection is None:
            protection = XsrfProtection(**overrides)
        elif overrides:
            protection = XsrfProtection(protection.options, **overrides)
        self.protection = protection

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        options = self.protection.options
        snapshot = await snapshot_from_request(request, options.token)

        verdict = self.protection.verify(snapshot)
        if verdict.allowed:
            return await call_next(request)

        return respond_denied(
            Response(status_code=DENIED_STATUS_CODE),
            verdict,
            options.error,
            _is_response,
        )
