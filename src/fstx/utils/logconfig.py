"""structlog configuration for command-line runs.

Library code only calls ``structlog.get_logger()``; applications decide
where the events go. The CLI routes them to stderr so stdout stays clean
for reports.
"""

import logging
import os
import sys
from typing import TextIO

import structlog

from fstx.core.constants import ENV_LOG_LEVEL

DEFAULT_LOG_LEVEL = "WARNING"


def resolve_log_level(level: str | None = None) -> int:
    """Resolve a level name from the argument, FSTX_LOG_LEVEL, or the default.

    Raises:
        ValueError: If the name is not a standard logging level
    """
    name = (level or os.getenv(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL).strip().upper()
    value = logging.getLevelNamesMapping().get(name)
    if value is None:
        raise ValueError(f"Unknown log level: {name}")
    return value


def configure_logging(level: str | None = None, stream: TextIO | None = None) -> None:
    """Send structlog events at ``level`` and above to ``stream`` (stderr)."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(resolve_log_level(level)),
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )
