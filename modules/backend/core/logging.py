"""
structlog setup for the notes server, CLI and client.

Every module, server and client side alike, logs through structlog
configured here. Settings come from config/settings/logging.yaml, already
validated as LoggingSchema by the application config.

JSON records carry:
    timestamp   - ISO 8601, UTC
    level       - debug .. critical
    logger      - module path, e.g. modules.backend.services.note
    event       - the message
    func_name, lineno  - call site
    source      - Origin context, set explicitly (web, cli, client, ...)
    request_id  - Request correlation ID (inside an HTTP request)

Usage:
    from modules.backend.core.logging import get_logger, setup_logging

    setup_logging(level="DEBUG", format_type="console")

    logger = get_logger(__name__)
    logger.info("Note moved", extra={"note_id": 4, "parent_id": 1})

    log_with_source(logger, "client", "warning", "Save failed", note_id=3)

Log File:
    logs/system.jsonl when the file handler is enabled; filter by 'source'.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import Processor

from modules.backend.core.config import get_app_config, project_path
from modules.backend.core.config_schema import FileHandlerSchema, LoggingSchema

VALID_SOURCES = frozenset({
    "web",
    "cli",
    "api",
    "client",
    "internal",
    "unknown",
})
"""Values accepted for the 'source' field and the X-Frontend-ID header."""

# Libraries that log every statement or connection at INFO/DEBUG
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "httpx", "httpcore")


def _logging_settings() -> LoggingSchema:
    return get_app_config().logging


def _resolve_log_path(configured_path: str) -> Path:
    """Resolve the log file path relative to project root."""
    return project_path(configured_path)


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def _file_handler(
    file_settings: FileHandlerSchema,
    formatter: logging.Formatter,
) -> RotatingFileHandler:
    log_path = _resolve_log_path(file_settings.path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        filename=str(log_path),
        maxBytes=file_settings.max_bytes,
        backupCount=file_settings.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Arguments left as None fall back to logging.yaml. The file handler
    always writes JSON; the console uses format_type ('json' or 'console').

    Raises:
        AttributeError: If level is not a stdlib level name
    """
    settings = _logging_settings()
    handlers = settings.handlers

    log_level = getattr(logging, (level or settings.level).upper())
    console_format = format_type or settings.format
    console_enabled = handlers.console.enabled if enable_console is None else enable_console
    file_enabled = handlers.file.enabled if enable_file_logging is None else enable_file_logging

    pre_chain = _shared_processors()
    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=pre_chain,
    )
    if console_format == "console":
        console_formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
            foreign_pre_chain=pre_chain,
        )
    else:
        console_formatter = json_formatter

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)

    if console_enabled:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(console_formatter)
        root_logger.addHandler(stream_handler)

    if file_enabled:
        root_logger.addHandler(_file_handler(handlers.file, json_formatter))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """Structlog logger for a module; pass __name__."""
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log a message tagged with an explicit source.

    For code running outside an HTTP request (the client glue and the
    notes CLI), where no middleware has bound a frontend.

    Raises:
        AttributeError: for a level the logger has no method for
    """
    log_method = getattr(logger, level.lower())
    log_method(message, source=source, **kwargs)
