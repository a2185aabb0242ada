"""Configuration management.

This module handles configuration loading from TOML files and the environment.
"""

from __future__ import annotations

from btcodec.config.config import (
    ConfigManager,
    get_config,
    init_config,
    reload_config,
    set_config,
)
from btcodec.models import Config

__all__ = [
    "Config",
    "ConfigManager",
    "get_config",
    "init_config",
    "reload_config",
    "set_config",
]
