from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

# Attributes every LogRecord carries; anything else on a record is context.
_RESERVED_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {
    "message",
    "asctime",
    "taskName",
    "color_message",
    "level_color",
    "reset",
}

_LOG_CONTEXT: ContextVar[dict[str, Any] | None] = ContextVar("scribe_log_context", default=None)

DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

APP_LOGGER_PREFIX = "scribe"

# Third-party loggers are held at WARNING unless listed here.
_THIRD_PARTY_LEVELS: dict[str, int] = {
    "uvicorn": logging.WARNING,
    "uvicorn.error": logging.INFO,
    "uvicorn.access": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "supabase": logging.WARNING,
    "postgrest": logging.WARNING,
    "supabase_auth": logging.WARNING,
    "storage3": logging.WARNING,
    "realtime": logging.WARNING,
}

_PLAIN_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(filename)s:%(lineno)d | %(message)s"
_COLOR_FORMAT = (
    "%(level_color)s%(asctime)s | %(levelname)s%(reset)s | "
    "%(name)s | %(filename)s:%(lineno)d | "
    "%(level_color)s%(message)s%(reset)s"
)


class ContextInjectionFilter(logging.Filter):
    """Copies the active log_context() fields onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in (_LOG_CONTEXT.get() or {}).items():
            if key not in _RESERVED_RECORD_ATTRS:
                setattr(record, key, value)
        return True


class ThirdPartyFilter(logging.Filter):
    """Drop records from non-app loggers below their configured threshold."""

    def __init__(self, levels: Mapping[str, int]) -> None:
        super().__init__()
        self.levels = dict(levels)

    def _threshold(self, name: str) -> int:
        best: tuple[int, int] | None = None
        for prefix, level in self.levels.items():
            if name == prefix or name.startswith(prefix + "."):
                if best is None or len(prefix) > best[0]:
                    best = (len(prefix), level)
        return best[1] if best else logging.WARNING

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == "__main__" or name == APP_LOGGER_PREFIX or name.startswith(APP_LOGGER_PREFIX + "."):
            return True
        return record.levelno >= self._threshold(name)


class ContextFormatter(logging.Formatter):
    """Formatter that appends extra fields as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        extras = {key: value for key, value in record.__dict__.items() if key not in _RESERVED_RECORD_ATTRS}
        if not extras:
            return message
        context = " ".join(f"{key}={value}" for key, value in extras.items())
        return f"{message} [{context}]"


class ColorFormatter(ContextFormatter):
    _RESET = "\x1b[0m"
    _LEVEL_COLORS = {
        "DEBUG": "\x1b[36m",
        "INFO": "\x1b[32m",
        "WARNING": "\x1b[33m",
        "ERROR": "\x1b[31m",
        "CRITICAL": "\x1b[1;31m",
    }

    def format(self, record: logging.LogRecord) -> str:
        record.level_color = self._LEVEL_COLORS.get(record.levelname, "")  # type: ignore[attr-defined]
        record.reset = self._RESET  # type: ignore[attr-defined]
        return super().format(record)


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Temporarily attach context fields to all log lines in this scope."""

    current = _LOG_CONTEXT.get() or {}
    token = _LOG_CONTEXT.set({**current, **kwargs})
    try:
        yield
    finally:
        _LOG_CONTEXT.reset(token)


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _resolve_level(level_name: str | None) -> int:
    raw = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper().strip()
    return getattr(logging, raw, logging.INFO)


def setup_logging(*, log_level: str | None = None) -> None:
    """
    Configure process-wide logging.

    Environment variables:
    - LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
    - LOG_COLOR: enable ANSI colors (default: auto when TTY)
    """
    level = _resolve_level(log_level)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.captureWarnings(True)

    handler = logging.StreamHandler(sys.stdout)
    formatter: logging.Formatter
    if _env_flag("LOG_COLOR", sys.stdout.isatty()):
        formatter = ColorFormatter(_COLOR_FORMAT, datefmt=DEFAULT_DATE_FORMAT)
    else:
        formatter = ContextFormatter(_PLAIN_FORMAT, datefmt=DEFAULT_DATE_FORMAT)
    handler.setFormatter(formatter)
    handler.addFilter(ContextInjectionFilter())
    handler.addFilter(ThirdPartyFilter(_THIRD_PARTY_LEVELS))

    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    logging.getLogger(APP_LOGGER_PREFIX).setLevel(level)

    logging.getLogger(__name__).info("Logging configured", extra={"log_level": logging.getLevelName(level)})
