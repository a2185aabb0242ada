"""Shared utilities: exceptions and logging."""

from __future__ import annotations

from btcodec.utils import exceptions, logging_config, rich_logging

__all__ = ["exceptions", "logging_config", "rich_logging"]
