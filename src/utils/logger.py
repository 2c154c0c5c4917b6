"""Structured logging for the ledger, kept off the console's stdout."""

import logging
import sys
from typing import Literal

import structlog
from structlog.typing import Processor


def setup_logging(
    level: str = "WARNING",
    format_type: Literal["json", "console"] = "console",
) -> None:
    """
    Route ledger events to stderr.

    The menu prompts and reports own stdout; events such as
    ``reservation_created`` or ``record_line_skipped`` go to stderr so a
    redirected log never splits a prompt.

    Args:
        level: Lowest level emitted (DEBUG, INFO, WARNING, ERROR)
        format_type: 'json' for one event per line, 'console' for reading at a terminal
    """
    # Every event carries the active date once bind_active_date has run
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if format_type == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.rich_traceback,
        )

    min_level = getattr(logging, level.upper())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", level=min_level, stream=sys.stderr)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Module-level ledger logger, e.g. ``get_logger(__name__)``."""
    return structlog.get_logger(name)


def bind_active_date(date_label: str) -> None:
    """
    Tag every later event with the date whose ledger is loaded.

    Args:
        date_label: Date label that just became active
    """
    structlog.contextvars.bind_contextvars(active_date=date_label)


def clear_active_date() -> None:
    """Stop tagging events with an active date."""
    structlog.contextvars.unbind_contextvars("active_date")
