"""Rich logging integration for btcodec.

Provides the Rich console handler used for CLI log output and a plain
formatter for log files.
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

_MARKUP_RE = re.compile(r"\[/?[^\]]+\]")


class CorrelationRichHandler(RichHandler):
    """RichHandler that tags records with the current correlation ID.

    The function name is prefixed in pink so decode/encode call sites stand
    out in verbose output.
    """

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record with correlation ID and function name."""
        try:
            if not hasattr(record, "correlation_id"):
                from btcodec.utils.logging_config import correlation_id

                record.correlation_id = correlation_id.get() or "no-correlation-id"

            func_name = getattr(record, "funcName", None)
            if self.markup and func_name:
                record.msg = f"[#ff69b4]{func_name}[/#ff69b4] {escape(record.getMessage())}"
                record.args = ()

            super().emit(record)
        except Exception:
            self.handleError(record)

    def handleError(self, record: logging.LogRecord) -> None:
        """Report logging failures on stderr without re-entering logging."""
        try:
            sys.stderr.write(
                f"Logging error: {record.levelname} {record.name}: {record.msg}\n"
            )
        except Exception:  # noqa: S110
            pass


def strip_rich_markup(text: str) -> str:
    """Strip Rich markup like ``[red]`` or ``[/#ff69b4]`` from text."""
    return _MARKUP_RE.sub("", text)


class FileFormatter(logging.Formatter):
    """Formatter for file output that strips Rich markup."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record, stripping Rich markup for file output."""
        return strip_rich_markup(super().format(record))


def create_rich_handler(
    console: Console | None = None,
    level: int | str = logging.INFO,
    show_path: bool = False,
    rich_tracebacks: bool = True,
    **kwargs: Any,
) -> logging.Handler:
    """Create a RichHandler with correlation ID support.

    Logs go to stderr by default so they never mix with codec output on
    stdout.

    Args:
        console: Optional Rich Console instance
        level: Log level
        show_path: Whether to show file paths in log output
        rich_tracebacks: Whether to use rich tracebacks
        **kwargs: Extra RichHandler keyword arguments

    Returns:
        Configured RichHandler instance

    """
    if console is None:
        console = Console(stderr=True, markup=True)

    kwargs.setdefault("markup", True)
    return CorrelationRichHandler(
        console=console,
        level=level,
        show_path=show_path,
        rich_tracebacks=rich_tracebacks,
        **kwargs,
    )
