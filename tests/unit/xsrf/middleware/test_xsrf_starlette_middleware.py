"""
Unit tests for the Starlette / FastAPI middleware.

Tests run the middleware inside a FastAPI app through TestClient. An
authentication middleware added after XsrfMiddleware runs first and puts
the decoded token on request.state, the way a JWT auth layer would.
"""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from starlette.responses import PlainTextResponse

from src.xsrf_protection.middleware.starlette_middleware import XsrfMiddleware

TOKEN = {"uid": 1, "csrf": "csrftoken"}


class ScopeTokenMiddleware:
    """Pure ASGI middleware placing the token in the scope."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http":
            scope["token"] = TOKEN
        await self.app(scope, receive, send)


def build_app(with_auth: bool = True, **options) -> FastAPI:
    app = FastAPI()

    @app.get("/api/profile")
    async def read_profile():
        return {"uid": 1}

    @app.post("/api/signin")
    async def signin():
        return {"signed_in": True}

    @app.post("/api/echo")
    async def echo(request: Request):
        return await request.json()

    @app.post("/api/form-echo")
    async def form_echo(request: Request):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    @app.post("/public/ping")
    async def ping():
        return {"pong": True}

    app.add_middleware(XsrfMiddleware, **options)

    if with_auth:

        @app.middleware("http")
        async def authenticate(request: Request, call_next):
            request.state.token = TOKEN
            return await call_next(request)

    return app


@pytest.fixture
def client() -> TestClient:
    return TestClient(build_app(path="/api"))


class TestXsrfMiddleware:
    """Tests for request verification in an ASGI app."""

    def test_cookie_match_allowed(self, client) -> None:
        response = client.post("/api/signin", headers={"Cookie": "xCsrf=csrftoken"})
        assert response.status_code == 200
        assert response.json() == {"signed_in": True}

    def test_header_match_allowed(self, client) -> None:
        response = client.post("/api/signin", headers={"xCsrf": "csrftoken"})
        assert response.status_code == 200

    def test_form_param_match_allowed(self, client) -> None:
        response = client.post("/api/signin", data={"xCsrf": "csrftoken"})
        assert response.status_code == 200

    def test_json_param_match_allowed_and_body_still_readable(self, client) -> None:
        response = client.post("/api/echo", json={"xCsrf": "csrftoken", "name": "a"})
        assert response.status_code == 200
        assert response.json() == {"xCsrf": "csrftoken", "name": "a"}

    def test_multipart_field_match_allowed(self, client) -> None:
        response = client.post(
            "/api/signin",
            data={"xCsrf": "csrftoken"},
            files={"avatar": ("avatar.png", b"\x89PNG", "image/png")},
        )
        assert response.status_code == 200

    def test_multipart_field_mismatch_denied(self, client) -> None:
        response = client.post(
            "/api/signin",
            data={"xCsrf": "wrong"},
            files={"avatar": ("avatar.png", b"\x89PNG", "image/png")},
        )
        assert response.status_code == 401

    def test_multipart_file_is_not_a_carrier(self, client) -> None:
        response = client.post(
            "/api/signin",
            files={"xCsrf": ("token.txt", b"csrftoken", "text/plain")},
        )
        assert response.status_code == 401

    def test_form_body_still_readable(self, client) -> None:
        response = client.post(
            "/api/form-echo",
            data={"xCsrf": "csrftoken", "name": "a"},
            files={"avatar": ("avatar.png", b"\x89PNG", "image/png")},
        )
        assert response.status_code == 200
        assert response.json() == {"xCsrf": "csrftoken", "name": "a"}

    def test_first_of_repeated_headers_used(self, client) -> None:
        response = client.post(
            "/api/signin", headers=[("xCsrf", "csrftoken"), ("xCsrf", "other")]
        )
        assert response.status_code == 200

    def test_empty_cookie_denied_despite_header(self, client) -> None:
        response = client.post(
            "/api/signin", headers={"Cookie": "xCsrf=", "xCsrf": "csrftoken"}
        )
        assert response.status_code == 401

    def test_mismatch_denied(self, client) -> None:
        response = client.post("/api/signin", headers={"Cookie": "xCsrf=wrong"})
        assert response.status_code == 401
        assert response.content == b""

    def test_missing_value_denied(self, client) -> None:
        assert client.post("/api/signin").status_code == 401

    def test_get_allowed_without_value(self, client) -> None:
        assert client.get("/api/profile").status_code == 200

    def test_unprotected_path_allowed(self, client) -> None:
        assert client.post("/public/ping").status_code == 200

    def test_passthrough_allowed(self) -> None:
        client = TestClient(build_app(path="/api", passthrough=["/api/signin"]))
        assert client.post("/api/signin").status_code == 200

    def test_missing_payload_denied(self) -> None:
        client = TestClient(build_app(with_auth=False))
        response = client.post("/api/signin", headers={"xCsrf": "csrftoken"})
        assert response.status_code == 401

    def test_payload_from_scope(self) -> None:
        app = build_app(with_auth=False)
        app.add_middleware(ScopeTokenMiddleware)
        client = TestClient(app)
        response = client.post("/api/signin", headers={"xCsrf": "csrftoken"})
        assert response.status_code == 200

    def test_payload_from_options(self) -> None:
        client = TestClient(build_app(with_auth=False, payload={"csrf": "abc"}))
        response = client.post("/api/signin", headers={"xCsrf": "abc"})
        assert response.status_code == 200

    def test_error_hook_response(self) -> None:
        def hook(response, arguments):
            return PlainTextResponse(arguments["message"], status_code=response.status_code)

        client = TestClient(build_app(error=hook))
        response = client.post("/api/signin", headers={"xCsrf": "wrong"})

        assert response.status_code == 401
        assert response.text == "token and anti-csrf value don't match"

    def test_error_hook_non_response_ignored(self) -> None:
        client = TestClient(build_app(error=lambda response, arguments: {"nope": 1}))
        response = client.post("/api/signin", headers={"xCsrf": "wrong"})
        assert response.status_code == 401
        assert response.content == b""
