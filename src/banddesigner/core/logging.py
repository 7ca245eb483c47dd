"""
Logging configuration for BandDesigner.

Provides structured logging with JSON output for production
and human-readable output for development. Context passed through
``extra`` (band and object IDs, formulas, error codes) is kept in both.
"""

import logging
import sys
from typing import Any

import orjson

DEFAULT_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d - %(message)s"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
        "asctime",
    }
)


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Fields a caller attached with ``extra={...}``."""
    return {
        k: v
        for k, v in record.__dict__.items()
        if k not in _STANDARD_ATTRS and not k.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for log aggregators.

    One object per line; ``extra`` context is nested under ``"extra"``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        context = extra_fields(record)
        if context:
            log_data["extra"] = context

        return orjson.dumps(log_data, default=str).decode("utf-8")


class ConsoleFormatter(logging.Formatter):
    """
    Console formatter for development.

    Level names are coloured and ``extra`` context is appended as
    ``key=value`` pairs, e.g. ``[band_id=detail object_id=sum]``.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, colors: bool = True):
        super().__init__(fmt or DEFAULT_CONSOLE_FORMAT, datefmt)
        self.colors = colors

    def format(self, record: logging.LogRecord) -> str:
        context = extra_fields(record)
        levelname = record.levelname
        if self.colors:
            record.levelname = f"{self.COLORS.get(levelname, self.RESET)}{levelname}{self.RESET}"
        try:
            text = super().format(record)
        finally:
            record.levelname = levelname
        if context:
            pairs = " ".join(f"{k}={v}" for k, v in context.items())
            text = f"{text} [{pairs}]"
        return text


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    log_format: str | None = None,
) -> None:
    """
    Set up application logging on the root logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Whether to output JSON logs (for production)
        log_format: Console format string, ignored for JSON logs
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level.upper())
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level.upper())
    if json_logs:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            ConsoleFormatter(log_format, datefmt="%Y-%m-%d %H:%M:%S", colors=sys.stdout.isatty())
        )
    root_logger.addHandler(handler)

    # Lark logs grammar construction at DEBUG
    for noisy in ("uvicorn.access", "httpx", "lark"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={"log_level": log_level, "json_logs": json_logs},
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger, usually ``get_logger(__name__)``."""
    return logging.getLogger(name)


class LoggerMixin:
    """
    Mixin class that provides a logger attribute.

    The logger is named after the class, e.g.
    ``banddesigner.services.print_service.PrintService``.
    """

    @property
    def logger(self) -> logging.Logger:
        return logging.getLogger(self.__class__.__module__ + "." + self.__class__.__name__)
