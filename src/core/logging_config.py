"""Structured logging configuration.

This module builds structlog loggers with a stable JSON format shared by
the ingest and store layers. Loggers write to stderr and are wrapped
locally, so the host application's structlog configuration is untouched.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_PROCESSORS = [
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.add_log_level,
    structlog.processors.JSONRenderer(),
]
_WRAPPER_CLASS = structlog.make_filtering_bound_logger(logging.INFO)


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with structured output on stderr.
    """
    return structlog.wrap_logger(
        structlog.PrintLogger(file=sys.stderr),
        processors=_PROCESSORS,
        wrapper_class=_WRAPPER_CLASS,
        logger_name=name,
    )
