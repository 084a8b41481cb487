"""
Logging utility functions and helpers.
"""

import logging
from typing import Any, Dict, Optional


# Customer snapshot fields and credentials never go into log files as-is
SENSITIVE_FIELDS = {
    'token', 'secret', 'authorization', 'password', 'address', 'card'
}


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Usage:
        from utils.logger import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


def sanitize_log_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of data that is safe to pass as logging `extra`.

    Tokens keep their first 8 characters so two log lines can still be
    matched up; every other sensitive string is replaced. Nested dicts
    are handled recursively.
    """
    sanitized = dict(data)

    for key, value in sanitized.items():
        lowered = key.lower()

        if isinstance(value, dict):
            sanitized[key] = sanitize_log_data(value)

        elif isinstance(value, str) and any(field in lowered for field in SENSITIVE_FIELDS):
            if 'token' in lowered and len(value) > 8:
                sanitized[key] = f"{value[:8]}..."
            else:
                sanitized[key] = "***REDACTED***"

    return sanitized


def log_request(
    logger: logging.Logger,
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    extra: Optional[Dict[str, Any]] = None
):
    """
    Log one HTTP request, picking the level from the status code.

    Usage:
        log_request(logger, "POST", "/orders/checkout", 201, 45.2)
    """
    log_data = {
        "method": method,
        "path": path,
        "status_code": status_code,
        "duration_ms": round(duration_ms, 2),
    }

    if extra:
        log_data.update(sanitize_log_data(extra))

    message = f"{method} {path} - {status_code}"

    if status_code >= 500:
        logger.error(message, extra=log_data)
    elif status_code >= 400:
        logger.warning(message, extra=log_data)
    else:
        logger.info(message, extra=log_data)
