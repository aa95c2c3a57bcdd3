from __future__ import annotations

import logging

import structlog

from .config import LOG_FORMATS


def configure_logging(log_format: str = "console", *, level: int = logging.INFO) -> None:
    """Configure structlog once at startup.

    ``log_format`` is ``"console"`` for human-readable output or ``"json"``
    for one JSON object per line.
    """
    if log_format == "console":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
    elif log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        raise ValueError(f"Invalid log format: {log_format!r}. Must be one of {LOG_FORMATS}.")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
