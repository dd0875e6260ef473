"""Centralized logging configuration for the enrichment pipeline."""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Iterator, Optional

MODULE_DIR = Path(__file__).resolve().parent
SCRIPT_DIR = MODULE_DIR.parent.resolve()
LOG_DIR_ENV = "ENRICHMENT_LOG_DIR"
LOG_FILE_NAME = "app.log"
DEFAULT_LOG_LEVEL = logging.INFO

_logger: Optional[logging.Logger] = None
_log_context: contextvars.ContextVar[Dict[str, object]] = contextvars.ContextVar(
    "word_enrichment_log_context", default={}
)


class JSONLogFormatter(logging.Formatter):
    """Render log records as structured JSON strings."""

    DEFAULT_FIELDS: tuple[str, ...] = (
        "session_id",
        "word_id",
        "event",
        "stage",
        "topic",
        "duration_ms",
        "status",
    )

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        message = record.getMessage()
        payload: Dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "pid": record.process,
            "thread": record.threadName,
        }

        for attr in self.DEFAULT_FIELDS:
            value = getattr(record, attr, None)
            if value is not None:
                payload[attr] = value

        extra_attributes = _extract_extra_attributes(record)
        if extra_attributes:
            payload["extra"] = extra_attributes

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def _extract_extra_attributes(record: logging.LogRecord) -> Dict[str, object]:
    reserved: set[str] = {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "message",
        "taskName",
    }
    extra: Dict[str, object] = {}
    for key, value in record.__dict__.items():
        if key in reserved or key in JSONLogFormatter.DEFAULT_FIELDS:
            continue
        extra[key] = value
    return extra


class LogContextFilter(logging.Filter):
    """Inject values from context variables into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        context = _log_context.get()
        for key, value in context.items():
            setattr(record, key, value)
        return True


def _resolve_log_dir() -> Path:
    override = os.environ.get(LOG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return SCRIPT_DIR / "log"


def _configure_handlers(logger: logging.Logger, log_dir: Path) -> None:
    formatter = JSONLogFormatter()
    context_filter = LogContextFilter()

    file_handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME, maxBytes=5 * 1024 * 1024, backupCount=5
    )
    file_handler.setFormatter(formatter)
    file_handler.addFilter(context_filter)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    stream_handler.addFilter(context_filter)

    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)


def setup_logging(log_level: int = DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Configure application-wide logging with a rotating file handler."""
    global _logger

    if _logger is not None:
        configure_logging_level(log_level=log_level)
        return _logger

    log_dir = _resolve_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("word_enrichment")
    logger.setLevel(log_level)
    logger.propagate = False
    _configure_handlers(logger, log_dir)

    _logger = logger
    configure_logging_level(log_level=log_level)
    return logger


def get_logger() -> logging.Logger:
    """Return the configured logger instance, initializing if necessary."""
    global _logger
    if _logger is None:
        _logger = setup_logging()
    return _logger


def configure_logging_level(debug_enabled: bool = False, log_level: Optional[int] = None) -> int:
    """Adjust the global logger level based on debug preference or explicit level."""
    logger = get_logger()
    if log_level is not None:
        level = log_level
    else:
        level = logging.DEBUG if debug_enabled else DEFAULT_LOG_LEVEL
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
    return level


def get_log_context() -> Dict[str, object]:
    """Return the active structured logging context."""

    return dict(_log_context.get())


def push_log_context(**values: object) -> contextvars.Token[Dict[str, object]]:
    """Merge ``values`` into the structured logging context and return a token."""

    current = dict(_log_context.get())
    for key, value in list(values.items()):
        if value is None:
            values.pop(key, None)
    current.update(values)
    return _log_context.set(current)


def pop_log_context(token: contextvars.Token[Dict[str, object]]) -> None:
    """Restore the logging context from ``token``."""

    _log_context.reset(token)


@contextlib.contextmanager
def log_context(**values: object) -> Iterator[None]:
    """Context manager that temporarily enriches log context with ``values``."""

    token = push_log_context(**values)
    try:
        yield
    finally:
        pop_log_context(token)


def clear_log_context() -> None:
    """Clear all structured logging context values."""

    _log_context.set({})


# Initialize logger on import so every module shares the same handlers.
logger = get_logger()
