"""
Retry Logging
=============
structlog setup for applications and tests using the retry executor.

Usage:
    from with_retries import setup_logging

    setup_logging(level="DEBUG", json_output=False)
"""

import logging
import os
import sys
from typing import Optional

import structlog

DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def setup_logging(
    level: Optional[str] = None,
    json_output: bool = True,
) -> None:
    """
    Configure structlog over stdlib logging.

    Args:
        level: Logging level name (defaults to $LOG_LEVEL, then INFO)
        json_output: Render JSON lines (production) or console output
    """
    log_level = getattr(logging, (level or DEFAULT_LEVEL).upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        stream=sys.stdout,
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=False,
    )


def get_logger(name: Optional[str] = None):
    """Get a structlog logger, bound to the given name."""
    return structlog.get_logger(name)
