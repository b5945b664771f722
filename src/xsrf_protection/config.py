"""Configuration for the XSRF protection middleware.

Options are validated once, at construction time, and frozen afterwards so
a single XsrfOptions instance can be shared by concurrently handled
requests.

Usage:
    from src.xsrf_protection.config import XsrfOptions

    options = XsrfOptions(
        path=["/api"],
        passthrough="/api/auth/signin",
        anti_csrf="X-XSRF-Token",
    )

For On-Call Engineers:
    Unknown option keys raise pydantic.ValidationError at startup. A typo
    such as "passtrough" fails fast instead of silently leaving a route
    unprotected.

Environment variables (load_options_from_env):
    XSRF_PATH              Comma-separated protected prefixes (default "/")
    XSRF_PASSTHROUGH       Comma-separated passthrough prefixes (default none)
    XSRF_ANTI_CSRF         Cookie/header/param name (default "xCsrf")
    XSRF_TOKEN             Request attribute holding the payload (default "token")
    XSRF_CLAIM             Claim key inside the payload (default "csrf")
    XSRF_PAYLOAD_ENCODING  "auto" or "msgpack" (default "auto")
"""

import os
import re
from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.xsrf_protection.logging_utils import LoggerLike

# Collapse runs of slashes in request and configured paths
_SLASHES = re.compile(r"/+")

# Caller-supplied hook: (response, {"message": str}) -> response | None
ErrorHook = Callable[[Any, dict[str, Any]], Any]


class PayloadEncoding(str, Enum):
    """How a raw payload found on the request (or in options) is decoded."""

    AUTO = "auto"  # mappings as-is, str/bytes parsed as JSON
    MSGPACK = "msgpack"  # bytes unpacked as a msgpack map


def normalize_prefix(prefix: str) -> str:
    """Normalize a configured path prefix.

    Ensures a leading slash, collapses duplicate slashes and strips the
    trailing slash. The root prefix stays "/".

    Example:
        >>> normalize_prefix("api//v1/")
        '/api/v1'
    """
    normalized = _SLASHES.sub("/", "/" + prefix).rstrip("/")
    return normalized or "/"


def _as_prefix_tuple(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set, frozenset)) or not all(
        isinstance(item, str) for item in value
    ):
        raise ValueError("path options must be a string or a sequence of strings")
    return tuple(normalize_prefix(item) for item in value)


class XsrfOptions(BaseModel):
    """Immutable option set for XsrfProtection.

    Attributes:
        path: Protected path prefixes. Mutating requests under any of them
            are verified.
        passthrough: Prefixes exempt from verification, checked first.
        anti_csrf: Name of the cookie, header or body parameter carrying the
            anti-CSRF value.
        token: Name of the request attribute holding the token payload.
        claim: Key inside the payload whose value must match the carrier.
        payload: Pre-supplied payload. When set, the request attribute is
            not consulted.
        payload_encoding: Decoding applied to a raw payload.
        error: Hook called with (response, {"message": reason}) on denial.
        logger: Logger receiving gate and verdict decisions.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    path: tuple[str, ...] = ("/",)
    passthrough: tuple[str, ...] = ()
    anti_csrf: str = Field(default="xCsrf", alias="anticsrf", min_length=1)
    token: str = Field(default="token", min_length=1)
    claim: str = Field(default="csrf", min_length=1)
    payload: Any = None
    payload_encoding: PayloadEncoding = PayloadEncoding.AUTO
    error: ErrorHook | None = None
    logger: LoggerLike | None = None

    @model_validator(mode="before")
    @classmethod
    def accept_msgpack_flag(cls, data: Any) -> Any:
        """Translate the boolean "msgpack" option into payload_encoding."""
        if isinstance(data, dict) and "msgpack" in data:
            data = dict(data)
            if data.pop("msgpack"):
                data.setdefault("payload_encoding", PayloadEncoding.MSGPACK)
        return data

    @field_validator("path", "passthrough", mode="before")
    @classmethod
    def normalize_prefixes(cls, value: Any) -> tuple[str, ...]:
        return _as_prefix_tuple(value)

    def with_overrides(self, **overrides: Any) -> "XsrfOptions":
        """Return a new validated option set with some values replaced."""
        data = self.model_dump(exclude_unset=True)
        data.update(overrides)
        return XsrfOptions(**data)


def _split_env(name: str) -> list[str] | None:
    raw = os.environ.get(name)
    if raw is None:
        return None
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_options_from_env(**overrides: Any) -> XsrfOptions:
    """Build XsrfOptions from XSRF_* environment variables.

    Keyword overrides take precedence over the environment. Non-string
    options (error hook, logger, payload) can only be given as overrides.

    Returns:
        Validated XsrfOptions

    Raises:
        pydantic.ValidationError: If a variable holds an invalid value
    """
    data: dict[str, Any] = {}

    path = _split_env("XSRF_PATH")
    if path is not None:
        data["path"] = path
    passthrough = _split_env("XSRF_PASSTHROUGH")
    if passthrough is not None:
        data["passthrough"] = passthrough

    for env_name, option in (
        ("XSRF_ANTI_CSRF", "anti_csrf"),
        ("XSRF_TOKEN", "token"),
        ("XSRF_CLAIM", "claim"),
        ("XSRF_PAYLOAD_ENCODING", "payload_encoding"),
    ):
        value = os.environ.get(env_name, "").strip()
        if value:
            data[option] = value.lower() if option == "payload_encoding" else value

    data.update(overrides)
    return XsrfOptions(**data)
