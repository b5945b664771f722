"""Double-submit cookie verification for state-changing requests.

XsrfProtection ties the gate, extractor and matcher together and returns a
Verdict per request. It holds nothing but frozen options, so one instance
can serve concurrent requests.

Verification pass (per matching protected prefix):
    anti-CSRF value non-empty?  no -> Denied("anti-csrf value not found")
    payload found?              no -> Denied("payload not found in request attribute")
    claim present?              no -> Denied("claim not found in token")
    claim non-empty?            no -> Denied("no value found in claim")
    claim == anti-CSRF value?   no -> Denied("token and anti-csrf value don't match")
                                yes -> Allowed

Usage:
    protection = XsrfProtection(path="/api", passthrough=["/api/auth/signin"])
    verdict = protection.verify(RequestSnapshot.build(...))
"""

import logging
from collections.abc import Callable
from typing import Any

from src.xsrf_protection.config import XsrfOptions
from src.xsrf_protection.extractor import (
    extract_anti_csrf_value,
    resolve_payload,
    transform_payload,
)
from src.xsrf_protection.gate import matching_protected_paths, should_verify
from src.xsrf_protection.logging_utils import log_decision
from src.xsrf_protection.matcher import fetch_claim, validate
from src.xsrf_protection.request import XsrfRequest
from src.xsrf_protection.responder import respond_denied
from src.xsrf_protection.verdict import ALLOWED, DenialReason, Verdict


class XsrfProtection:
    """Framework-neutral double-submit verifier.

    Args:
        options: Prebuilt options. Keyword arguments are applied on top.
        **overrides: Any XsrfOptions field (or its alias)
    """

    def __init__(self, options: XsrfOptions | None = None, **overrides: Any):
        if options is None:
            options = XsrfOptions(**overrides)
        elif overrides:
            options = options.with_overrides(**overrides)
        self.options = options

    @property
    def logger(self):
        return self.options.logger

    def decoded_payload(self) -> dict[str, Any]:
        """Decoded form of the pre-supplied payload ({} when none is set)."""
        return transform_payload(self.options.payload, self.options.payload_encoding)

    def verify(self, request: XsrfRequest) -> Verdict:
        """Decide whether a request may proceed."""
        if not should_verify(request.method, request.path, self.options):
            return ALLOWED

        for _prefix in matching_protected_paths(request.path, self.options):
            verdict = self._verify_pass(request)
            if verdict.denied:
                return verdict

        return ALLOWED

    def process(
        self,
        request: XsrfRequest,
        response: Any,
        call_next: Callable[[], Any],
        is_response: Callable[[Any], bool],
    ) -> Any:
        """Verify, then either continue the chain or deny.

        Args:
            request: Request view
            response: Default denial response (HTTP 401) in the caller's shape
            call_next: Continues to the downstream handler when allowed
            is_response: Predicate an error hook result must pass

        Returns:
            call_next() when allowed, else the denial response
        """
        verdict = self.verify(request)
        if verdict.allowed:
            return call_next()
        return respond_denied(response, verdict, self.options.error, is_response)

    def _deny(self, reason: DenialReason) -> Verdict:
        log_decision(self.logger, logging.DEBUG, reason.value)
        return Verdict.deny(reason)

    def _verify_pass(self, request: XsrfRequest) -> Verdict:
        options = self.options

        anti_csrf_value = extract_anti_csrf_value(request, options.anti_csrf)
        # An empty carrier is still the one that won the lookup
        if anti_csrf_value is None or anti_csrf_value == "":
            return self._deny(DenialReason.ANTI_CSRF_NOT_FOUND)

        payload = resolve_payload(request, options)
        if payload is None:
            return self._deny(DenialReason.PAYLOAD_ATTRIBUTE_NOT_FOUND)

        verdict = fetch_claim(payload, options.claim, self.logger)
        if verdict.denied:
            return verdict

        return validate(payload, options.claim, anti_csrf_value, self.logger)
