"""Structured logging helpers built on top of structlog.

Console output is human readable; the JSONL file (when enabled) gets one
object per event. Request handlers bind method/path into contextvars so
every event logged while serving a request carries them.
"""

from __future__ import annotations

import logging
from typing import Any

import structlog

from uid_ops.config import LOG_FILE, LOG_FILE_ENABLED, LOG_LEVEL, VERBOSE_LOGGING

BoundLogger = structlog.stdlib.BoundLogger

# Chatty third-party loggers capped at WARNING
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy", "sqlalchemy.engine", "httpx", "httpcore")

_configured = False


def _coerce_level(level_name: str) -> int:
    """Translate a string/int environment value into a logging level."""
    if level_name.isdigit():
        return int(level_name)
    return getattr(logging, level_name.upper(), logging.INFO)


def _handler(handler: logging.Handler, level: int, renderer: Any, pre_chain: list) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain))
    return handler


def _configure_logging() -> None:
    global _configured
    if _configured:
        return

    level = logging.DEBUG if VERBOSE_LOGGING else _coerce_level(LOG_LEVEL)
    shared = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    handlers = [_handler(logging.StreamHandler(), level, structlog.dev.ConsoleRenderer(colors=True), shared)]
    if LOG_FILE_ENABLED:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            _handler(
                logging.FileHandler(LOG_FILE, encoding="utf-8"),
                level,
                structlog.processors.JSONRenderer(),
                shared,
            )
        )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)
    for h in handlers:
        root_logger.addHandler(h)
    logging.captureWarnings(True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            *shared,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str = "uid_ops", **bindings: Any) -> BoundLogger:
    """Return the structured logger, optionally bound with context."""
    if not _configured:
        _configure_logging()
    logger = structlog.get_logger(name)
    if bindings:
        logger = logger.bind(**bindings)
    return logger


def bind_context(**context: Any) -> None:
    structlog.contextvars.bind_contextvars(**context)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
