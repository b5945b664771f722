"""Framework-neutral request view consumed by the verification core.

The core only ever reads from a request. Adapters in
src.xsrf_protection.middleware build a RequestSnapshot from an API Gateway
event or a Starlette request; anything else implementing XsrfRequest works
too.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class XsrfRequest(Protocol):
    """Read-only capabilities the core needs from an HTTP request."""

    @property
    def method(self) -> str: ...

    @property
    def path(self) -> str: ...

    def get_cookie(self, name: str) -> str | None: ...

    def get_header(self, name: str) -> list[str]: ...

    def get_body_param(self, name: str) -> Any: ...

    def get_attribute(self, name: str) -> Any: ...


@dataclass(frozen=True)
class RequestSnapshot:
    """Materialized request data.

    Attributes:
        method: HTTP method as received
        path: Raw request path (normalized by the gate, not here)
        cookies: Cookie name -> value
        headers: Lower-cased header name -> list of values
        body_params: Parsed body parameters (form or JSON object)
        attributes: Named request attributes set by upstream middleware
    """

    method: str
    path: str
    cookies: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, list[str]] = field(default_factory=dict)
    body_params: Mapping[str, Any] = field(default_factory=dict)
    attributes: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        method: str,
        path: str,
        cookies: Mapping[str, str] | None = None,
        headers: Mapping[str, str | list[str]] | None = None,
        body_params: Mapping[str, Any] | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> "RequestSnapshot":
        """Create a snapshot, folding header names to lower case.

        Single header values are wrapped in a list so get_header() always
        returns every value received under that name.
        """
        folded: dict[str, list[str]] = {}
        for name, value in (headers or {}).items():
            values = [value] if isinstance(value, str) else list(value)
            folded.setdefault(name.lower(), []).extend(values)
        return cls(
            method=method,
            path=path,
            cookies=dict(cookies or {}),
            headers=folded,
            body_params=dict(body_params or {}),
            attributes=dict(attributes or {}),
        )

    def get_cookie(self, name: str) -> str | None:
        return self.cookies.get(name)

    def get_header(self, name: str) -> list[str]:
        return list(self.headers.get(name.lower(), []))

    def get_body_param(self, name: str) -> Any:
        return self.body_params.get(name)

    def get_attribute(self, name: str) -> Any:
        return self.attributes.get(name)
