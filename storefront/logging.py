"""
Logging for the storefront package.

Only the "storefront" logger is configured; the root logger belongs to
the application. Its level comes from LOG_LEVEL. A stdout handler is
attached only when nothing else handles the records (no handlers on the
root logger at import time), so an application that configures logging
itself sees cart records exactly once.

Usage:
    from storefront.logging import get_logger
    logger = get_logger(__name__)
"""

import logging
import os
import sys
from functools import cache

PACKAGE_LOGGER = "storefront"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _get_log_level() -> int:
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def configure_logging() -> logging.Logger:
    """Set up the package logger. Safe to call more than once."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(_get_log_level())

    if not package_logger.handlers and not logging.getLogger().handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)

    return package_logger


configure_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    """
    Logger for a storefront module.

    Names outside the package are nested under it so that every cart
    record goes through the package logger.
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def _escape_log_injection(value: str) -> str:
    """Escape control characters that could forge log lines (CWE-117)."""
    return (
        value.replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\x00", "")
    )


def sanitize_id_for_logging(id_value: str | None, max_length: int = 32) -> str:
    """
    Escape and truncate a product id or identity key.

    Identity keys embed variant ids chosen by the shopper, so they get the
    same treatment as any other user-controlled value. Empty gives "N/A".
    """
    if not id_value:
        return "N/A"
    return _escape_log_injection(str(id_value))[:max_length]


def sanitize_string_for_logging(value: str | None, max_length: int = 50) -> str:
    """Escape free text (product names, storage errors); longer text ends in '...'."""
    if not value:
        return "N/A"
    safe_value = _escape_log_injection(str(value))
    if len(safe_value) <= max_length:
        return safe_value
    return safe_value[:max_length] + "..."


__all__ = [
    "PACKAGE_LOGGER",
    "configure_logging",
    "get_logger",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
]
