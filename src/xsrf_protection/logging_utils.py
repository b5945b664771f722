"""
Logging utilities for the XSRF protection middleware.

This module provides two things:
- Sanitization of request-derived values before they reach a log record
  (log injection, CWE-117 / CWE-93)
- The optional leveled log sink used for gate and verdict decisions

The decision sink is entirely optional. When no logger is configured on
the middleware options, log_decision() is a no-op and control flow is
unaffected.

Security References:
- OWASP Logging Cheat Sheet: https://cheatsheetseries.owasp.org/cheatsheets/Logging_Cheat_Sheet.html
- CodeQL Log Injection: https://codeql.github.com/codeql-query-help/python/py-log-injection/

Security Notes:
    Carrier values (cookie, header, body parameter) and claim values are
    secrets shared with the client. They are NEVER passed to the logger,
    only the names of the carrier and claim are.
"""

import logging
import re
from typing import Any

# Maximum length for logged user input to prevent log flooding
MAX_LOG_INPUT_LENGTH = 200

# Anything accepted by the "logger" option
LoggerLike = logging.Logger | logging.LoggerAdapter


def sanitize_for_log(value: Any, max_length: int = MAX_LOG_INPUT_LENGTH) -> str:
    """
    Sanitize a value for safe logging by removing CRLF and limiting length.

    Args:
        value: Value to sanitize (will be converted to string)
        max_length: Maximum length of output (default: 200)

    Returns:
        Sanitized string safe for logging

    Example:
        >>> sanitize_for_log("/api\\n[FAKE] Admin logged in")
        '/api [FAKE] Admin logged in'
    """
    text = str(value)

    # Remove CRLF characters to prevent log injection
    text = text.replace("\r", " ").replace("\n", " ").replace("\t", " ")

    # Remove other control characters
    text = re.sub(r"[\x00-\x1f\x7f-\x9f]", " ", text)

    if len(text) > max_length:
        text = text[:max_length] + "..."

    return text


def get_safe_error_info(exception: Exception) -> dict[str, str]:
    """
    Extract safe information from an exception for logging.

    Returns only the exception type, NOT the message. Exceptions raised
    by caller-supplied hooks may carry request data in their message.

    Example:
        >>> get_safe_error_info(ValueError("user input here"))
        {'error_type': 'ValueError'}
    """
    return {"error_type": type(exception).__name__}


def log_decision(
    logger: LoggerLike | None,
    level: int,
    message: str,
    **context: Any,
) -> None:
    """Send a decision message to the configured logger, if any.

    Context values are sanitized and passed as ``extra`` so structured
    handlers (JSON formatters, CloudWatch) can index them.

    Args:
        logger: Logger from the middleware options, or None.
        level: stdlib logging level (logging.DEBUG, logging.INFO, ...).
        message: Short human-readable message.
        **context: Structured context fields.
    """
    if logger is None:
        return
    extra = {key: sanitize_for_log(value) for key, value in context.items()}
    logger.log(level, message, extra=extra)
