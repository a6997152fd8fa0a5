"""
structlog setup for the backend.

JSON lines by default, colored console output when LOG_LEVEL is DEBUG.
Records from stdlib loggers (``logging.getLogger(__name__)``) and from
structlog loggers go through the same processor chain.
"""

import logging
import sys
from typing import Any, Optional

import structlog

from .config import settings

# Event keys whose values are credentials; only a short prefix is kept
SECRET_KEYS = frozenset({"api_key", "bundler_api_key", "x-api-key", "authorization"})
SECRET_PREFIX_LENGTH = 8

# Loggers whose per-request chatter duplicates RequestLoggingMiddleware
QUIET_LOGGERS = ("uvicorn.access", "httpcore", "httpx")


def mask_secrets(logger: Any, method_name: str, event_dict: dict) -> dict:
    for key in SECRET_KEYS.intersection(event_dict):
        value = event_dict[key]
        if isinstance(value, str) and value:
            event_dict[key] = f"{value[:SECRET_PREFIX_LENGTH]}..."
    return event_dict


def setup_logging(log_level: Optional[str] = None) -> None:
    """Route all application logging through structlog.

    Args:
        log_level: Override log level (default: settings.log_level)
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        mask_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderer: structlog.types.Processor
    if level == logging.DEBUG:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
