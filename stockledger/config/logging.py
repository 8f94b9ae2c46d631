"""
structlog setup shared by the API and manage.py.

Console output in development, JSON lines everywhere else. Request handlers
bind a ``request_id`` through contextvars so ledger events logged deep in the
use cases can be tied back to the HTTP call that caused them.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from stockledger.config.settings import get_settings

_configured = False


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Stamp app name, version and environment on every event."""
    settings = get_settings()
    event_dict["app"] = settings.app_name
    event_dict["version"] = settings.app_version
    event_dict["environment"] = settings.environment
    return event_dict


def redact_binary(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Replace raw bytes (photo blobs, backup payloads) with their size."""
    for key, value in event_dict.items():
        if isinstance(value, bytes | bytearray):
            event_dict[key] = f"<{len(value)} bytes>"
    return event_dict


def configure_logging(
    log_level: str | None = None,
    json_output: bool | None = None,
    force: bool = False,
) -> None:
    """
    Configure structlog for the application.

    Args:
        log_level: Override for settings.log_level (e.g. "DEBUG" from the CLI)
        json_output: Force JSON (True) or console (False) rendering;
            defaults to console in development only
        force: Reconfigure even if logging was already set up
    """
    global _configured
    if _configured and not force:
        return

    settings = get_settings()
    level_name = (log_level or settings.log_level).upper()
    if json_output is None:
        json_output = not settings.is_development

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        redact_binary,
        add_app_context,
    ]

    if json_output:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level_name, logging.INFO),
        force=force,
    )

    # aiosqlite logs every statement at DEBUG
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    _configured = True


def bind_request_context(**values: Any) -> None:
    """Attach values (e.g. request_id) to every log line of the current task."""
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Module-level logger; bound fields accumulate per call site."""
    return structlog.get_logger(name)
