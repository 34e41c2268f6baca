"""Structured logging configuration."""
import logging
import structlog
from core.config import settings


def configure_logging(log_level: str | None = None, json_logs: bool | None = None):
    """
    Configure structured logging with structlog.

    Args:
        log_level: Override for settings.log_level
        json_logs: Force JSON (True) or console (False) output; defaults to JSON unless debug
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    if json_logs is None:
        json_logs = not settings.debug

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_logs:
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors += [
            structlog.dev.set_exc_info,
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    # Every line carries the service name so logs can be told apart from Chatwoot's own
    structlog.contextvars.bind_contextvars(service=settings.app_name)


def get_logger(name: str):
    """Get a logger instance."""
    return structlog.get_logger(name)
