"""Structured logging setup for the command-line entry points.

Log events go to stderr through ``structlog``'s console renderer so they never
mix with tree or file output on stdout. Verbosity maps ``-v`` to INFO and
``-vv`` to DEBUG; the default shows warnings only.
"""

from __future__ import annotations

import logging
import sys

import structlog


def verbose_to_level(verbose: int) -> int:
    """Map a ``-v`` count to a stdlib logging level."""
    levels = {
        0: logging.WARNING,
        1: logging.INFO,
    }
    return levels.get(verbose, logging.DEBUG)


def configure_logging(verbose: int = 0, quiet: bool = False) -> None:
    """Configure structlog and the stdlib root logger for one CLI run."""
    level = logging.CRITICAL + 10 if quiet else verbose_to_level(verbose)

    logging.root.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    logging.root.addHandler(handler)
    logging.root.setLevel(level)

    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


__all__ = ["configure_logging", "verbose_to_level"]
