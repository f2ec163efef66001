from __future__ import annotations

import logging

import structlog

from chatscroll.core.config import ScrollSettings, get_settings

_LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _get_log_level(settings: ScrollSettings) -> int:
    return _LOG_LEVEL_MAP.get(settings.log_level.upper(), logging.INFO)


def configure_logging(settings: ScrollSettings | None = None) -> None:
    """Configure structlog for the process.

    Widgets and the controller only call ``structlog.get_logger``; the
    embedding application decides when (and whether) to call this.
    """
    settings = settings or get_settings()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer()
            if settings.log_format == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level(settings)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
