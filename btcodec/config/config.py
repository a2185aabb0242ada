"""Configuration management for btcodec.

Provides centralized configuration with TOML support, validation and
hierarchical loading from defaults → config file → environment → CLI.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import toml

from btcodec.models import Config
from btcodec.utils.exceptions import ConfigurationError
from btcodec.utils.logging_config import get_logger, setup_logging

CONFIG_FILENAME = "btcodec.toml"

# Global configuration instance
_config_manager: ConfigManager | None = None

# Mapping of environment variables to config paths
ENV_MAPPINGS: dict[str, str] = {
    # Codec
    "BTCODEC_MAX_DEPTH": "codec.max_depth",
    "BTCODEC_DUPLICATE_KEYS": "codec.duplicate_keys",
    # Interchange
    "BTCODEC_INT_BITS": "interchange.int_bits",
    "BTCODEC_INDENT": "interchange.indent",
    # Observability
    "BTCODEC_LOG_LEVEL": "observability.log_level",
    "BTCODEC_LOG_FILE": "observability.log_file",
    "BTCODEC_STRUCTURED_LOGGING": "observability.structured_logging",
    "BTCODEC_LOG_CORRELATION_ID": "observability.log_correlation_id",
}


def _parse_env_value(raw: str) -> bool | int | str:
    low = raw.lower()
    if low in {"true", "yes", "on"}:
        return True
    if low in {"false", "no", "off"}:
        return False
    try:
        return int(raw)
    except ValueError:
        return raw


def _set_nested(d: dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    cur = d
    for p in parts[:-1]:
        cur = cur.setdefault(p, {})
    cur[parts[-1]] = value


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(
        self,
        config_file: str | Path | None = None,
        configure_logging: bool = True,
    ):
        """Initialize configuration manager.

        Args:
            config_file: Path to TOML config file. If None, searches for
                btcodec.toml in the standard locations
            configure_logging: Apply the observability section to logging

        """
        self.config_file = self._find_config_file(config_file)
        self.config = self._load_config()
        if configure_logging:
            self._setup_logging()

    def _find_config_file(
        self,
        config_file: str | Path | None,
    ) -> Path | None:
        """Find configuration file in standard locations."""
        if config_file:
            return Path(config_file)

        search_paths = [
            Path.cwd() / CONFIG_FILENAME,
            Path.home() / ".config" / "btcodec" / CONFIG_FILENAME,
            Path.home() / f".{CONFIG_FILENAME}",
        ]

        for path in search_paths:
            if path.exists():
                return path

        return None

    def _load_config(self) -> Config:
        """Load configuration from file and environment."""
        config_data: dict[str, Any] = {}

        if self.config_file and self.config_file.exists():
            try:
                with open(self.config_file, encoding="utf-8") as f:
                    config_data.update(toml.load(f))
            except (OSError, toml.TomlDecodeError) as e:
                logging.warning(
                    "Failed to load config file %s: %s", self.config_file, e
                )

        config_data = self._merge_config(config_data, self._get_env_config())

        try:
            return Config(**config_data)
        except Exception as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigurationError(msg) from e

    def _get_env_config(self) -> dict[str, Any]:
        """Get configuration from environment variables."""
        env_config: dict[str, Any] = {}
        for env_name, cfg_path in ENV_MAPPINGS.items():
            raw = os.getenv(env_name)
            if raw is None:
                continue
            _set_nested(env_config, cfg_path, _parse_env_value(raw))
        return env_config

    def _merge_config(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Merge configuration dictionaries recursively."""
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value

        return result

    def apply_overrides(self, overrides: dict[str, Any]) -> Config:
        """Apply dotted-path overrides (e.g. from CLI options) and revalidate.

        ``None`` values are skipped so unset CLI options leave config alone.
        """
        data = self.config.model_dump(mode="json")
        patch: dict[str, Any] = {}
        for path, value in overrides.items():
            if value is not None:
                _set_nested(patch, path, value)
        if not patch:
            return self.config

        try:
            self.config = Config(**self._merge_config(data, patch))
        except Exception as e:
            msg = f"Invalid configuration override: {e}"
            raise ConfigurationError(msg) from e
        return self.config

    def export(self, fmt: str = "toml") -> str:
        """Export current configuration as a string in the given format.

        Args:
            fmt: one of "toml" or "json"

        """
        data = self.config.model_dump(mode="json", exclude_none=True)
        fmt = (fmt or "toml").lower()
        if fmt == "toml":
            return toml.dumps(data)
        if fmt == "json":
            return json.dumps(data, indent=2)
        msg = f"Unsupported export format: {fmt}"
        raise ConfigurationError(msg)

    def _setup_logging(self) -> None:
        """Set up logging configuration."""
        setup_logging(self.config.observability)
        get_logger(__name__).debug(
            "Loaded configuration from %s",
            self.config_file or "defaults",
        )


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager.config


def init_config(
    config_file: str | Path | None = None,
    configure_logging: bool = True,
) -> ConfigManager:
    """Initialize the global configuration manager."""
    global _config_manager
    _config_manager = ConfigManager(config_file, configure_logging=configure_logging)
    return _config_manager


def reload_config() -> Config:
    """Reload configuration from file."""
    if _config_manager is None:
        msg = "Configuration not initialized"
        raise ConfigurationError(msg)

    _config_manager.config = _config_manager._load_config()  # noqa: SLF001
    _config_manager._setup_logging()  # noqa: SLF001
    return _config_manager.config


def set_config(new_config: Config) -> None:
    """Replace the global configuration at runtime.

    Reconfigures logging based on the new config.
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(None, configure_logging=False)
    _config_manager.config = new_config
    _config_manager._setup_logging()  # noqa: SLF001
