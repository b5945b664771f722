"""Denial responses and the caller-supplied error hook.

Every denial resolves to HTTP 401. The error hook may replace the default
response (for example to add a JSON body); anything it returns that the
adapter does not recognize as a response is ignored.
"""

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from src.xsrf_protection.config import ErrorHook
from src.xsrf_protection.logging_utils import get_safe_error_info
from src.xsrf_protection.verdict import Verdict

logger = logging.getLogger(__name__)

# Status returned for every denial
DENIED_STATUS_CODE = 401

R = TypeVar("R")


def respond_denied(
    response: R,
    verdict: Verdict,
    error_hook: ErrorHook | None,
    is_response: Callable[[Any], bool],
) -> R:
    """Route a denial through the error hook.

    Args:
        response: Default 401 response built by the adapter
        verdict: Denied verdict
        error_hook: Optional hook from options.error
        is_response: Predicate a hook result must pass to replace the default

    Returns:
        The hook's response if usable, else the default response
    """
    if error_hook is None:
        return response

    arguments: dict[str, Any] = {"message": verdict.message}
    try:
        handler_response = error_hook(response, arguments)
    except Exception as e:
        logger.error(
            "XSRF error hook raised, returning default denial",
            extra={**get_safe_error_info(e), "reason": verdict.message},
        )
        return response

    if is_response(handler_response):
        return handler_response
    return response
