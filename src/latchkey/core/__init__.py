"""Core Latchkey utilities.

This module exports core utilities for use throughout the application.
"""

from latchkey.core.config import Settings, get_settings
from latchkey.core.durations import DEFAULT_DURATION_SECONDS, parse_duration_seconds
from latchkey.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "DEFAULT_DURATION_SECONDS",
    "Settings",
    "bind_correlation_id",
    "clear_context",
    "configure_logging",
    "get_logger",
    "get_settings",
    "parse_duration_seconds",
]
