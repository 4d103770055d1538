"""Structlog setup shared by UAPMP services.

Call `configure_service_logging` once at startup, then take loggers from
`create_service_logger`. Request handlers bind the correlation id with
`bind_request_context` so every line of a request carries it.

Output is console text by default and JSON in production; `LOG_FORMAT`
overrides either. `LOG_TO_FILE`, `LOG_FILE_PATH`, `LOG_MAX_BYTES` and
`LOG_BACKUP_COUNT` control the optional rotating log file.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any
from uuid import UUID

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars
from structlog.typing import Processor

DEFAULT_LOG_MAX_BYTES = 100 * 1024 * 1024
DEFAULT_LOG_BACKUP_COUNT = 10
_TRUTHY = ("true", "1", "yes")


def add_service_context(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Stamp `service.name` and `deployment.environment` on every event."""
    event_dict["service.name"] = os.getenv("SERVICE_NAME", "unknown")
    event_dict["deployment.environment"] = os.getenv("ENVIRONMENT", "development")
    return event_dict


def _wants_json(environment: str) -> bool:
    log_format = os.getenv("LOG_FORMAT", "").lower()
    if log_format:
        return log_format == "json"
    return environment == "production"


def _processor_chain(use_json: bool) -> list[Processor]:
    chain: list[Processor] = [
        merge_contextvars,
        add_service_context,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]
    if use_json:
        chain += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        chain += [structlog.dev.set_exc_info, structlog.dev.ConsoleRenderer(colors=True)]
    return chain


def _rotating_file_handler(service_name: str, log_file_path: str | None) -> logging.Handler:
    path = Path(log_file_path or os.getenv("LOG_FILE_PATH", f"/app/logs/{service_name}.log"))
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(path),
        maxBytes=int(os.getenv("LOG_MAX_BYTES", str(DEFAULT_LOG_MAX_BYTES))),
        backupCount=int(os.getenv("LOG_BACKUP_COUNT", str(DEFAULT_LOG_BACKUP_COUNT))),
        encoding="utf-8",
    )


def configure_service_logging(
    service_name: str,
    environment: str | None = None,
    log_level: str = "INFO",
    log_to_file: bool | None = None,
    log_file_path: str | None = None,
) -> None:
    """Route stdlib logging and structlog through one processor chain.

    `environment`, `log_to_file` and `log_file_path` fall back to the
    ENVIRONMENT, LOG_TO_FILE and LOG_FILE_PATH variables.
    """
    environment = environment or os.getenv("ENVIRONMENT", "development")
    os.environ.setdefault("SERVICE_NAME", service_name)
    os.environ.setdefault("ENVIRONMENT", environment)

    if log_to_file is None:
        log_to_file = os.getenv("LOG_TO_FILE", "false").lower() in _TRUTHY

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_to_file:
        handlers.append(_rotating_file_handler(service_name, log_file_path))

    logging.basicConfig(
        format="%(message)s",
        handlers=handlers,
        level=getattr(logging, log_level.upper()),
        force=True,
    )
    structlog.configure(
        processors=_processor_chain(_wants_json(environment)),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def create_service_logger(name: str | None = None) -> Any:
    logger = structlog.get_logger()
    return logger.bind(logger_name=name) if name else logger


def bind_request_context(correlation_id: UUID | str, operation: str) -> None:
    """Bind per-request correlation context for every log line of the request."""
    clear_contextvars()
    bind_contextvars(correlation_id=str(correlation_id), operation=operation)
