"""Structured logging configuration for btcodec.

Provides logging setup with correlation IDs, structured output and
configurable log levels. Library code only ever calls ``get_logger``;
handlers are installed by ``setup_logging`` from the CLI or the embedding
application.
"""

from __future__ import annotations

import json
import logging
import logging.config
import time
import uuid
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from btcodec.utils.exceptions import BTCodecError
from btcodec.utils.rich_logging import FileFormatter, create_rich_handler

if TYPE_CHECKING:
    from btcodec.models import ObservabilityConfig

correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

_ROOT_LOGGER = "btcodec"


class CorrelationFilter(logging.Filter):
    """Filter to add correlation ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add correlation ID to log record."""
        record.correlation_id = correlation_id.get() or "no-correlation-id"
        return True


class StructuredFormatter(logging.Formatter):
    """Formats records as one JSON object per line.

    Fields passed through ``extra=`` are copied into the object alongside
    the standard ones.
    """

    RESERVED: ClassVar[frozenset[str]] = frozenset(
        vars(logging.LogRecord("", 0, "", 0, "", (), None))
    ) | {"message", "asctime", "correlation_id", "taskName"}

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry: dict[str, Any] = {
            "timestamp": record.created,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        if hasattr(record, "correlation_id"):
            log_entry["correlation_id"] = record.correlation_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in self.RESERVED:
                log_entry.setdefault(key, value)

        return json.dumps(log_entry, default=str)


def setup_logging(config: ObservabilityConfig) -> None:
    """Set up logging configuration.

    Console output goes through Rich on stderr, or through a JSON stream
    handler when structured logging is enabled. A rotating file handler is
    added when ``log_file`` is set.
    """
    level = config.log_level.value

    if config.log_file:
        Path(config.log_file).parent.mkdir(parents=True, exist_ok=True)

    logging_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": StructuredFormatter,
            },
            "simple": {
                "()": FileFormatter,
                "format": "%(asctime)s %(levelname)s %(name)s.%(funcName)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "filters": {
            "correlation": {
                "()": CorrelationFilter,
            },
        },
        "handlers": {},
        "loggers": {
            _ROOT_LOGGER: {
                "level": level,
                "handlers": [],
                "propagate": False,
            },
        },
    }

    if config.structured_logging:
        logging_config["handlers"]["console"] = {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "structured",
            "filters": ["correlation"],
            "stream": "ext://sys.stderr",
        }
        logging_config["loggers"][_ROOT_LOGGER]["handlers"].append("console")

    if config.log_file:
        logging_config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "structured" if config.structured_logging else "simple",
            "filters": ["correlation"],
            "filename": config.log_file,
            "maxBytes": 10 * 1024 * 1024,  # 10MB
            "backupCount": 5,
            "encoding": "utf-8",
        }
        logging_config["loggers"][_ROOT_LOGGER]["handlers"].append("file")

    logging.config.dictConfig(logging_config)

    if not config.structured_logging:
        logging.getLogger(_ROOT_LOGGER).addHandler(create_rich_handler(level=level))

    if config.log_correlation_id:
        correlation_id.set(str(uuid.uuid4()))


def get_logger(name: str) -> logging.Logger:
    """Get a logger namespaced under ``btcodec``."""
    if name == _ROOT_LOGGER or name.startswith(f"{_ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_LOGGER}.{name}")


def set_correlation_id(corr_id: str | None = None) -> str:
    """Set correlation ID for the current context."""
    if corr_id is None:
        corr_id = str(uuid.uuid4())
    correlation_id.set(corr_id)
    return corr_id


def get_correlation_id() -> str | None:
    """Get the current correlation ID."""
    return correlation_id.get()


class LoggingContext:
    """Context manager that logs the start, end and duration of an operation."""

    def __init__(
        self,
        operation: str,
        log_level: int = logging.DEBUG,
        slow_threshold: float = 1.0,
        logger: logging.Logger | None = None,
        **kwargs: Any,
    ):
        """Initialize operation context manager.

        Args:
            operation: Name of the operation
            log_level: Level for start/completion messages
            slow_threshold: Duration in seconds above which completion is
                logged at INFO
            logger: Logger to use (defaults to this module's logger)
            **kwargs: Additional context to include in logs

        """
        self.operation = operation
        self.kwargs = kwargs
        self.logger = logger or get_logger(__name__)
        self.log_level = log_level
        self.slow_threshold = slow_threshold
        self.start_time: float | None = None

    def __enter__(self):
        """Enter the context manager."""
        self.start_time = time.time()
        set_correlation_id()
        self.logger.log(
            self.log_level,
            "Starting %s",
            self.operation,
            extra=self.kwargs,
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit the context manager."""
        duration = time.time() - self.start_time if self.start_time else 0

        if exc_type is None:
            level = self.log_level
            if duration >= self.slow_threshold:
                level = max(level, logging.INFO)
            self.logger.log(
                level,
                "Completed %s in %.3fs",
                self.operation,
                duration,
                extra=self.kwargs,
            )
        else:
            # Expected codec failures are reported by the caller; log quietly
            level = logging.DEBUG if isinstance(exc_val, BTCodecError) else logging.ERROR
            self.logger.log(
                level,
                "Failed %s in %.3fs: %s",
                self.operation,
                duration,
                exc_val,
                extra=self.kwargs,
                exc_info=level >= logging.ERROR,
            )

        return False  # Don't suppress exceptions


def log_exception(logger: logging.Logger, exc: Exception, context: str = "") -> None:
    """Log an exception with context."""
    if isinstance(exc, BTCodecError):
        logger.error(
            "%s: %s",
            context,
            exc.message,
            extra={"details": exc.details},
        )
    else:
        logger.exception("%s: %s", context, exc)
