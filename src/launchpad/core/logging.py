"""
launchpad.core.logging - Structured Logging Setup
===================================================

Every module logs through ``structlog.get_logger()`` and binds its own
context (``component="stage_runner"``, ``stage="apply"``). This module
configures the processor chain once, at CLI startup.

Output Formats:
    console: coloured key=value lines for a human watching the deploy
    json:    one JSON object per line for CI log collectors

Usage:
    >>> from launchpad.core.logging import configure_logging
    >>> configure_logging("DEBUG", fmt="json")
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    """Configure structlog for the current process.

    Args:
        level: Standard logging level name (DEBUG, INFO, WARNING, ...).
        fmt: "console" or "json".
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
