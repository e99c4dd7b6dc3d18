"""structlog setup for the availability editor.

Console output for local use, JSON lines when ``AVAILABILITY_LOG_JSON`` is
set. Log lines go to stderr so script output on stdout stays parseable.

Anything logged inside ``partner_context()`` carries the partner's id, so
the sync client, serializer and drag controller need not pass it along.
"""

import logging
import sys
from contextlib import AbstractContextManager

import structlog


def setup_logging(json_output: bool = False, log_level: str = "INFO") -> None:
    """Configure structlog processors and the output renderer.

    Args:
        json_output: Emit JSON lines instead of the console renderer.
        log_level: Minimum level name, e.g. "DEBUG" or "WARNING".
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    processors = [
        # partner_id and friends from partner_context()
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    processors.append(renderer)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # urllib3 retries and connection pool messages
    root = logging.getLogger()
    root.handlers = [logging.StreamHandler(sys.stderr)]
    root.setLevel(numeric_level)


def partner_context(partner_id: str, **extra) -> AbstractContextManager:
    """Bind ``partner_id`` (and any extra keys) to every log line in the block.

    Usage:
        with partner_context("p-123", action="save"):
            client.save_weekly_schedule(...)
    """
    return structlog.contextvars.bound_contextvars(partner_id=partner_id, **extra)


def get_logger(name: str) -> structlog.BoundLogger:
    """Logger for a module; pass ``__name__``."""
    return structlog.get_logger(name)
