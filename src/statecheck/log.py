"""structlog configuration for the command line.

Library modules only call ``structlog.get_logger(__name__)``; configuring
output is left to the entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def _stderr_logger_factory(*args: Any) -> structlog.PrintLogger:
    # Resolved per logger so a swapped sys.stderr (e.g. under test runners) is honoured.
    return structlog.PrintLogger(sys.stderr)


def configure_logging(*, level: str = "WARNING", json_output: bool = False) -> None:
    log_level = getattr(logging, level.upper())
    renderer: Any
    if json_output:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )


__all__ = ["configure_logging"]
