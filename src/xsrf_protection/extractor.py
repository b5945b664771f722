"""Locate the anti-CSRF value and the token payload on a request.

Anti-CSRF value carriers, first hit wins:
1. Cookie named options.anti_csrf
2. First value of the header with that name
3. Body parameter with that name

Payload sources:
1. options.payload, when pre-supplied
2. The request attribute named options.token

Raw payloads are classified once into a PayloadKind and decoded by the
matching function. Decoding never raises: anything that does not decode
to a mapping degrades to an empty mapping, which then fails the claim
lookup.
"""

import dataclasses
import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

import msgpack
import orjson
from msgpack.exceptions import UnpackException
from pydantic import BaseModel

from src.xsrf_protection.config import PayloadEncoding, XsrfOptions
from src.xsrf_protection.logging_utils import log_decision
from src.xsrf_protection.request import XsrfRequest


class PayloadKind(str, Enum):
    """Shape of a raw payload before decoding."""

    MAPPING = "mapping"
    ENCODED_TEXT = "encoded_text"
    ENCODED_BINARY = "encoded_binary"
    OTHER = "other"


def extract_anti_csrf_value(request: XsrfRequest, carrier_name: str) -> Any | None:
    """Find the anti-CSRF value sent by the client.

    A carrier that is set wins even when its value is empty; an empty
    value is denied later rather than falling through to the next carrier.

    Args:
        request: Request view
        carrier_name: Cookie, header and body parameter name

    Returns:
        The first value set, or None if no carrier holds one
    """
    cookie = request.get_cookie(carrier_name)
    if cookie is not None:
        return cookie

    headers = request.get_header(carrier_name)
    if headers:
        return headers[0]

    return request.get_body_param(carrier_name)


def coerce_mapping(value: Any) -> dict[str, Any]:
    """Coerce a decoded value into a mapping.

    Mappings are copied, pydantic models and dataclass instances are
    dumped. Everything else (strings, numbers, lists, None) yields an
    empty mapping.
    """
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, BaseModel):
        return value.model_dump()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return {}


def classify_payload(raw: Any, encoding: PayloadEncoding) -> PayloadKind:
    if isinstance(raw, (Mapping, BaseModel)) or (
        dataclasses.is_dataclass(raw) and not isinstance(raw, type)
    ):
        return PayloadKind.MAPPING
    if encoding is PayloadEncoding.MSGPACK and isinstance(raw, (bytes, bytearray)):
        return PayloadKind.ENCODED_BINARY
    if isinstance(raw, (str, bytes, bytearray)):
        return PayloadKind.ENCODED_TEXT
    return PayloadKind.OTHER


def _decode_text(raw: str | bytes | bytearray) -> dict[str, Any]:
    try:
        decoded = orjson.loads(raw)
    except orjson.JSONDecodeError:
        # Not JSON: the raw value itself is coerced, which for text is {}
        return coerce_mapping(raw)
    return coerce_mapping(decoded)


def _decode_binary(raw: bytes | bytearray) -> dict[str, Any]:
    try:
        decoded = msgpack.unpackb(raw, raw=False)
    except (ValueError, TypeError, UnpackException):
        return {}
    return coerce_mapping(decoded)


_DECODERS = {
    PayloadKind.MAPPING: coerce_mapping,
    PayloadKind.ENCODED_TEXT: _decode_text,
    PayloadKind.ENCODED_BINARY: _decode_binary,
    PayloadKind.OTHER: coerce_mapping,
}


def transform_payload(
    raw: Any, encoding: PayloadEncoding = PayloadEncoding.AUTO
) -> dict[str, Any]:
    """Decode a raw payload into a fresh mapping.

    The input is never modified; calling this twice on the same input
    returns equal mappings.

    Example:
        >>> transform_payload('{"uid": 1, "csrf": "abc"}')
        {'uid': 1, 'csrf': 'abc'}
        >>> transform_payload("not-json")
        {}
    """
    return _DECODERS[classify_payload(raw, encoding)](raw)


def resolve_payload(request: XsrfRequest, options: XsrfOptions) -> dict[str, Any] | None:
    """Find and decode the token payload for this request.

    Returns:
        Decoded payload mapping, or None when neither options nor the
        request attribute provide one
    """
    raw = options.payload
    if raw is None:
        log_decision(
            options.logger,
            logging.WARNING,
            "payload not supplied via attribute path",
            attribute=options.token,
        )
        raw = request.get_attribute(options.token)
        if raw is None:
            return None

    return transform_payload(raw, options.payload_encoding)
