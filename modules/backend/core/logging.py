"""
Centralized Logging Configuration.

structlog on top of the stdlib logging tree, configured from
config/settings/logging.yaml. Every module logs through ``get_logger``;
third-party libraries that log through stdlib end up in the same handlers
with the same JSON shape.

JSON record fields:
    timestamp, level, logger, event   - always present
    func_name, lineno                 - call site
    request_id, source, method, path  - bound per request by RequestContextMiddleware
    source                            - set explicitly outside requests (log_with_source)

Usage:
    logger = get_logger(__name__)
    logger.info("Note saved", extra={"note_id": "abc"})
    log_with_source(logger, "client", "warning", "Auto-save failed", note_id="abc")

Records go to stdout and to logs/system.jsonl (rotated); filter by "source".
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Any

import structlog
from structlog.typing import Processor

from modules.backend.core.config import get_app_config, resolve_project_path
from modules.backend.core.config_schema import FileHandlerSchema

VALID_SOURCES = frozenset({
    "web",
    "client",
    "cli",
    "internal",
    "unknown",
})
"""Values accepted for the ``source`` field. Anything else is logged as ``unknown``."""

_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx", "aiosqlite")


def _shared_processors() -> list[Processor]:
    """Processors applied to structlog and foreign (stdlib) records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
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


def _formatter(renderer: Processor, shared: list[Processor], with_exc_info: bool = False) -> logging.Formatter:
    processors: list[Processor] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if with_exc_info:
        processors.append(structlog.processors.format_exc_info)
    processors.append(renderer)
    return structlog.stdlib.ProcessorFormatter(processors=processors, foreign_pre_chain=shared)


def _file_handler(file_config: FileHandlerSchema, formatter: logging.Formatter) -> logging.Handler:
    log_path = resolve_project_path(file_config.path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(log_path),
        maxBytes=file_config.max_bytes,
        backupCount=file_config.backup_count,
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
    Configure structured logging. Safe to call more than once; existing
    root handlers are replaced.

    Arguments override the matching value from logging.yaml.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        format_type: 'json' or 'console' for the stdout handler (the file is always JSON)
        enable_console: Toggle the stdout handler
        enable_file_logging: Toggle the JSONL file handler
    """
    config = get_app_config().logging
    level = level or config.level
    format_type = format_type or config.format
    if enable_console is None:
        enable_console = config.handlers.console.enabled
    if enable_file_logging is None:
        enable_file_logging = config.handlers.file.enabled

    shared = _shared_processors()
    structlog.configure(
        processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = _formatter(structlog.processors.JSONRenderer(), shared, with_exc_info=True)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if enable_console:
        console = logging.StreamHandler(sys.stdout)
        if format_type == "console":
            console.setFormatter(
                _formatter(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()), shared)
            )
        else:
            console.setFormatter(json_formatter)
        root.addHandler(console)

    if enable_file_logging:
        root.addHandler(_file_handler(config.handlers.file, json_formatter))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """Return a structlog logger; pass ``__name__``."""
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log with an explicit ``source`` field, for code running outside an
    HTTP request (the notepad client, run.py actions).

    Raises:
        AttributeError: If level is not a logger method name
    """
    getattr(logger, level.lower())(message, source=source, **kwargs)
