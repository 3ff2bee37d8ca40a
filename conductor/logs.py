"""Structured logging configuration using structlog.

Every module logs through ``get_logger(__name__)``; events are routed into the
standard library ``logging`` tree, so the effective level is a plain stdlib
level. The CLI shell calls ``configure_logging`` once at startup with the
persisted ``LEVEL`` preference:

- console: colored key/value output on stderr (default)
- json: one JSON object per line

Until ``configure_logging`` runs, events go through the stdlib defaults
(WARNING and above), which keeps library use and tests quiet.
"""

import logging
import sys
from typing import Any, Literal

import structlog
from structlog.types import Processor

_SHARED: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.PositionalArgumentsFormatter(),
]


def get_console_processors() -> list[Processor]:
    """Get processors for console output."""
    return [
        *_SHARED,
        structlog.processors.TimeStamper(fmt="%H:%M:%S"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        ),
    ]


def get_json_processors() -> list[Processor]:
    """Get processors for JSON output."""
    return [
        *_SHARED,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


def _configure_structlog(processors: list[Processor]) -> None:
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_logging(
    level: int | None = None,
    *,
    renderer: Literal["console", "json"] = "console",
) -> None:
    """Configure structured logging for the process.

    Args:
        level: A stdlib logging level. ``None`` keeps WARNING.
        renderer: ``"console"`` or ``"json"``.
    """
    if renderer not in ("console", "json"):
        raise ValueError(f"unknown log renderer {renderer!r}")

    _configure_structlog(
        get_json_processors() if renderer == "json" else get_console_processors()
    )
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=logging.WARNING if level is None else level,
        force=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Example:
        logger = get_logger(__name__)
        logger.debug("preference_written", key="LEVEL", value="20")
    """
    return structlog.stdlib.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables (e.g. the program name) for subsequent log calls."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all context variables from the logging context."""
    structlog.contextvars.clear_contextvars()


if not structlog.is_configured():
    _configure_structlog(get_console_processors())
