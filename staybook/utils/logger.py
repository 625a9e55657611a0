"""Process-wide logging setup for the booking service."""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

from staybook.utils.config import get_settings


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_LOGGER_INITIALIZED = False


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a single stdout handler to the ``staybook`` logger tree.

    Safe to call repeatedly; only the first call installs the handler.
    """

    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    resolved_level = (level or get_settings().log_level).upper()

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    package_logger = logging.getLogger("staybook")
    package_logger.setLevel(resolved_level)
    package_logger.addHandler(handler)
    package_logger.propagate = False
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the configured ``staybook`` hierarchy."""
    configure_logging()
    if not name.startswith("staybook"):
        name = f"staybook.{name}"
    return logging.getLogger(name)


def format_fields(**fields: Any) -> str:
    """Render ``key=value`` pairs in the pipe style used across log lines."""
    return " | ".join(f"{key}={value}" for key, value in fields.items())
