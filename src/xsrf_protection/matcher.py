"""Claim lookup and double-submit comparison.

Security considerations:
- Comparison uses hmac.compare_digest over UTF-8 bytes (constant time)
- Only str values are compared; a numeric claim never equals "123"
- No trimming or case folding
"""

import hmac
import logging
from collections.abc import Mapping
from typing import Any

from src.xsrf_protection.logging_utils import LoggerLike, log_decision
from src.xsrf_protection.verdict import DenialReason, Verdict


def _is_empty(value: Any) -> bool:
    # None, "" and empty containers; 0 and False are values (and then mismatch)
    if value is None:
        return True
    if isinstance(value, (str, bytes, Mapping, list, tuple, set)):
        return len(value) == 0
    return False


def fetch_claim(
    payload: Mapping[str, Any],
    claim_name: str,
    logger: LoggerLike | None = None,
) -> Verdict:
    """Check that the payload holds a non-empty value under claim_name."""
    if claim_name not in payload:
        log_decision(
            logger, logging.DEBUG, DenialReason.CLAIM_NOT_FOUND.value, claim=claim_name
        )
        return Verdict.deny(DenialReason.CLAIM_NOT_FOUND)

    if _is_empty(payload[claim_name]):
        log_decision(
            logger, logging.DEBUG, DenialReason.CLAIM_EMPTY.value, claim=claim_name
        )
        return Verdict.deny(DenialReason.CLAIM_EMPTY)

    return Verdict.allow()


def values_match(claim_value: Any, anti_csrf_value: Any) -> bool:
    """Exact, constant-time equality of two str values."""
    if not isinstance(claim_value, str) or not isinstance(anti_csrf_value, str):
        return False
    return hmac.compare_digest(
        claim_value.encode("utf-8", "surrogatepass"),
        anti_csrf_value.encode("utf-8", "surrogatepass"),
    )


def validate(
    payload: Mapping[str, Any],
    claim_name: str,
    anti_csrf_value: Any,
    logger: LoggerLike | None = None,
) -> Verdict:
    """Compare payload[claim_name] against the anti-CSRF value.

    Args:
        payload: Decoded token payload (claim presence already checked)
        claim_name: Claim key
        anti_csrf_value: Value extracted from cookie, header or body
        logger: Optional decision logger

    Returns:
        Allowed on exact match, Denied(TOKEN_MISMATCH) otherwise
    """
    if values_match(payload.get(claim_name), anti_csrf_value):
        log_decision(logger, logging.DEBUG, "match, access granted", claim=claim_name)
        return Verdict.allow()

    log_decision(logger, logging.DEBUG, "mismatch, access denied", claim=claim_name)
    return Verdict.deny(DenialReason.TOKEN_MISMATCH)
