"""Structured logging for the API, the CLI and background tasks.

``log_format=json`` emits one JSON object per event for log shippers;
anything else renders colored key/value lines for a terminal. Events are
snake_case names with keyword context, e.g.
``logger.info("entry_created", campaign_id=..., entry_id=...)``.
"""

import logging
import sys

import structlog

from prizejet.settings import settings

# Libraries that are chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "passlib")


def _renderer(log_format: str):
    if log_format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer()]


def configure_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        log_level: Level name (defaults to settings)
        log_format: ``json`` or ``console`` (defaults to settings)
    """
    level = logging.getLevelName((log_level or settings.log_level).upper())
    if not isinstance(level, int):
        level = logging.INFO
    log_format = (log_format or settings.log_format).lower()

    timestamper = structlog.processors.TimeStamper(
        fmt="iso" if log_format == "json" else "%Y-%m-%d %H:%M:%S", utc=log_format == "json"
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            timestamper,
            *_renderer(log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    # Third-party libraries log through the standard library
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s", stream=sys.stdout, level=level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.BoundLogger:
    """Logger that tags every event with the emitting module."""
    return structlog.get_logger(name).bind(logger=name)
