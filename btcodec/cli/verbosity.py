"""Verbosity management for the btcodec CLI.

Provides multi-level verbosity control with -q, -v, -vv and -vvv flags.
"""

from __future__ import annotations

import logging
from enum import IntEnum


class VerbosityLevel(IntEnum):
    """Verbosity levels for CLI commands."""

    QUIET = 0  # Only errors
    NORMAL = 1  # Default: configured log level
    VERBOSE = 2  # -v: info
    DEBUG = 3  # -vv: debug messages
    TRACE = 4  # -vvv: debug with stack traces


class VerbosityManager:
    """Maps verbosity flags to logging levels."""

    COUNT_TO_LEVEL: dict[int, VerbosityLevel] = {
        0: VerbosityLevel.NORMAL,
        1: VerbosityLevel.VERBOSE,
        2: VerbosityLevel.DEBUG,
        3: VerbosityLevel.TRACE,
    }

    LEVEL_TO_LOGGING: dict[VerbosityLevel, int | None] = {
        VerbosityLevel.QUIET: logging.ERROR,
        VerbosityLevel.NORMAL: None,  # keep configured level
        VerbosityLevel.VERBOSE: logging.INFO,
        VerbosityLevel.DEBUG: logging.DEBUG,
        VerbosityLevel.TRACE: logging.DEBUG,
    }

    def __init__(self, verbosity_count: int = 0, quiet: bool = False):
        """Initialize verbosity manager.

        Args:
            verbosity_count: Number of -v flags (clamped to 0-3)
            quiet: -q flag; wins over any -v

        """
        self.verbosity_count = max(0, min(3, verbosity_count))
        if quiet:
            self.level = VerbosityLevel.QUIET
        else:
            self.level = self.COUNT_TO_LEVEL[self.verbosity_count]
        self.logging_level = self.LEVEL_TO_LOGGING[self.level]

    @classmethod
    def from_count(cls, count: int, quiet: bool = False) -> VerbosityManager:
        """Create VerbosityManager from flag count."""
        return cls(count, quiet=quiet)

    def log_level_name(self, default: str) -> str:
        """Return the logging level name to use, falling back to ``default``."""
        if self.logging_level is None:
            return default
        return logging.getLevelName(self.logging_level)

    def should_show_stack_trace(self) -> bool:
        """Check if stack traces should be shown."""
        return self.level == VerbosityLevel.TRACE
