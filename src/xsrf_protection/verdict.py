"""Verification outcome types.

A Verdict is returned by every check and carries the denial reason with
it, so nothing request-scoped is ever stored on the middleware instance.

For On-Call Engineers:
    Denial reasons appear verbatim in DEBUG logs and in the "message"
    argument handed to the error hook:
    - "anti-csrf value not found": no cookie, header or body parameter
    - "payload not found in request attribute": upstream auth did not
      attach the token payload
    - "claim not found in token": payload lacks the claim key (also the
      result of a payload that failed to decode)
    - "no value found in claim": claim key present but empty
    - "token and anti-csrf value don't match": client sent a stale or
      forged value
"""

from dataclasses import dataclass
from enum import Enum


class DenialReason(str, Enum):
    """Why a protected request was denied."""

    ANTI_CSRF_NOT_FOUND = "anti-csrf value not found"
    PAYLOAD_ATTRIBUTE_NOT_FOUND = "payload not found in request attribute"
    CLAIM_NOT_FOUND = "claim not found in token"
    CLAIM_EMPTY = "no value found in claim"
    TOKEN_MISMATCH = "token and anti-csrf value don't match"


@dataclass(frozen=True)
class Verdict:
    """Allowed, or Denied with a reason."""

    allowed: bool
    reason: DenialReason | None = None

    @classmethod
    def allow(cls) -> "Verdict":
        return ALLOWED

    @classmethod
    def deny(cls, reason: DenialReason) -> "Verdict":
        return cls(allowed=False, reason=reason)

    @property
    def denied(self) -> bool:
        return not self.allowed

    @property
    def message(self) -> str:
        """Diagnostic string for logs and the error hook ("" when allowed)."""
        return self.reason.value if self.reason is not None else ""


ALLOWED = Verdict(allowed=True)
