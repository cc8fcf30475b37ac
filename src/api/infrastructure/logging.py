"""structlog setup for the ledger API.

Console rendering with colours when attached to a terminal (or when
``FORCE_COLOR`` is set), JSON lines otherwise.
"""

import logging
import os
import sys

import structlog

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
]


def _wants_colors() -> bool:
    forced = os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes")
    return forced or sys.stdout.isatty()


def _renderer(colors: bool) -> structlog.types.Processor:
    if colors:
        return structlog.dev.ConsoleRenderer(colors=True)
    return structlog.processors.JSONRenderer()


def configure_logging(debug: bool = False) -> None:
    """Configure structlog for the process.

    Debug events (row writes, key cache hits) are emitted only when
    ``debug`` is set.
    """
    level = logging.DEBUG if debug else logging.INFO
    colors = _wants_colors()
    tail: list[structlog.types.Processor] = (
        [] if colors else [structlog.processors.format_exc_info]
    )

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, *tail, _renderer(colors)],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

