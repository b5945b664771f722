"""Route gating: decide whether a request needs double-submit verification.

Order of evaluation:
1. Safe methods (anything but POST, PUT, PATCH, DELETE) are never verified
2. Passthrough prefixes are never verified
3. Protected prefixes are verified, once per matching prefix

Prefixes match the normalized path exactly or as a parent segment:
"/api" matches "/api" and "/api/users" but not "/apiary".
"""

import logging
import re

from src.xsrf_protection.config import XsrfOptions
from src.xsrf_protection.logging_utils import log_decision, sanitize_for_log

# State-changing methods that require verification
MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

_SLASHES = re.compile(r"/+")


def normalize_path(path: str) -> str:
    """Prepend a slash and collapse repeated slashes.

    Example:
        >>> normalize_path("api//signin")
        '/api/signin'
    """
    return _SLASHES.sub("/", "/" + path)


def matches_prefix(path: str, prefix: str) -> bool:
    """Check if a normalized path equals prefix or is nested under it."""
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


def is_mutating_method(method: str) -> bool:
    return method.upper() in MUTATING_METHODS


def matching_protected_paths(path: str, options: XsrfOptions) -> list[str]:
    """Return every configured protected prefix the path falls under."""
    normalized = normalize_path(path)
    return [prefix for prefix in options.path if matches_prefix(normalized, prefix)]


def is_passthrough(path: str, options: XsrfOptions) -> bool:
    normalized = normalize_path(path)
    return any(matches_prefix(normalized, prefix) for prefix in options.passthrough)


def should_verify(method: str, path: str, options: XsrfOptions) -> bool:
    """Decide whether a request must go through double-submit verification.

    Each skip decision is logged at INFO through options.logger.

    Args:
        method: HTTP method (any case)
        path: Raw request path
        options: Middleware options

    Returns:
        True if at least one protected prefix applies to a mutating request
    """
    if not is_mutating_method(method):
        log_decision(
            options.logger,
            logging.INFO,
            f"method {sanitize_for_log(method.upper(), 16)} is safe, access granted",
            method=method,
        )
        return False

    if is_passthrough(path, options):
        log_decision(
            options.logger,
            logging.INFO,
            "route ignored, access granted",
            path=normalize_path(path),
        )
        return False

    if not matching_protected_paths(path, options):
        log_decision(
            options.logger,
            logging.INFO,
            "route not protected, access granted",
            path=normalize_path(path),
        )
        return False

    return True
