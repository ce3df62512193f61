"""Structured logging configuration for plan-mode.

Uses structlog for structured, context-rich logging that supports
both human-readable console output and machine-readable JSON format.
"""

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from plan_mode.config import PlanModeSettings


def configure_logging(settings: "PlanModeSettings | None" = None) -> None:
    """Configure structured logging based on settings.

    Args:
        settings: Application settings. If None, uses defaults.
    """
    log_level = logging.WARNING
    log_format = "console"

    if settings is not None:
        log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
        log_format = settings.log_format

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance.

    Args:
        name: Optional logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name) if name else structlog.get_logger()


def bind_context(**kwargs: object) -> None:
    """Bind context variables to all subsequent log calls in the current context.

    Example:
        bind_context(session_id="abc123")
        logger.info("plan_claimed")  # Will include session_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


class Loggers:
    """Pre-configured logger instances for plan-mode components."""

    @staticmethod
    def store() -> structlog.stdlib.BoundLogger:
        """Logger for the plan store and retention sweep."""
        return get_logger("plan_mode.store")

    @staticmethod
    def locks() -> structlog.stdlib.BoundLogger:
        """Logger for plan locks."""
        return get_logger("plan_mode.locks")

    @staticmethod
    def engine() -> structlog.stdlib.BoundLogger:
        """Logger for the plan action engine."""
        return get_logger("plan_mode.engine")

    @staticmethod
    def mode() -> structlog.stdlib.BoundLogger:
        """Logger for planning mode and the active plan."""
        return get_logger("plan_mode.mode")

    @staticmethod
    def cli() -> structlog.stdlib.BoundLogger:
        """Logger for the interactive /plan command."""
        return get_logger("plan_mode.cli")
