"""Unit tests for configuration management.

Tests:
- defaults, TOML files and environment overrides
- validation errors
- dotted overrides and export
- global get/init/reload/set helpers
"""

from __future__ import annotations

import json

import pytest
import toml

from btcodec.config import config as config_module
from btcodec.config.config import (
    ConfigManager,
    get_config,
    init_config,
    reload_config,
    set_config,
)
from btcodec.models import Config, DuplicateKeyPolicy, LogLevel
from btcodec.utils.exceptions import ConfigurationError

pytestmark = [pytest.mark.unit, pytest.mark.config]


@pytest.fixture
def config_file(tmp_path):
    """Write a btcodec.toml and return its path."""
    path = tmp_path / "custom.toml"
    path.write_text(
        "[codec]\n"
        "max_depth = 32\n"
        'duplicate_keys = "reject"\n'
        "\n"
        "[interchange]\n"
        "int_bits = 32\n",
        encoding="utf-8",
    )
    return path


class TestConfigManagerLoading:
    """Test configuration loading."""

    def test_defaults(self):
        manager = ConfigManager(configure_logging=False)
        assert manager.config_file is None
        assert manager.config.codec.max_depth == 256
        assert manager.config.codec.duplicate_keys is DuplicateKeyPolicy.LAST
        assert manager.config.interchange.int_bits == 64
        assert manager.config.interchange.indent is None
        assert manager.config.observability.log_level is LogLevel.WARNING

    def test_explicit_file(self, config_file):
        manager = ConfigManager(config_file, configure_logging=False)
        assert manager.config_file == config_file
        assert manager.config.codec.max_depth == 32
        assert manager.config.codec.duplicate_keys is DuplicateKeyPolicy.REJECT
        assert manager.config.interchange.int_bits == 32

    def test_finds_file_in_working_directory(self, tmp_path):
        (tmp_path / "btcodec.toml").write_text(
            "[interchange]\nindent = 2\n", encoding="utf-8"
        )
        manager = ConfigManager(configure_logging=False)
        assert manager.config_file == tmp_path / "btcodec.toml"
        assert manager.config.interchange.indent == 2

    def test_finds_file_in_user_config_dir(self, tmp_path, monkeypatch):
        home = tmp_path / "home"
        user_dir = home / ".config" / "btcodec"
        user_dir.mkdir(parents=True)
        (user_dir / "btcodec.toml").write_text(
            "[codec]\nmax_depth = 10\n", encoding="utf-8"
        )
        monkeypatch.setenv("HOME", str(home))
        manager = ConfigManager(configure_logging=False)
        assert manager.config.codec.max_depth == 10

    def test_malformed_toml_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("this is not toml\n", encoding="utf-8")
        manager = ConfigManager(path, configure_logging=False)
        assert manager.config.codec.max_depth == 256

    def test_invalid_value_raises(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[codec]\nmax_depth = 0\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            ConfigManager(path, configure_logging=False)

    def test_invalid_policy_raises(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text('[codec]\nduplicate_keys = "merge"\n', encoding="utf-8")
        with pytest.raises(ConfigurationError):
            ConfigManager(path, configure_logging=False)


class TestEnvironmentOverrides:
    """Test BTCODEC_* environment variables."""

    def test_env_overrides_defaults(self, monkeypatch):
        monkeypatch.setenv("BTCODEC_MAX_DEPTH", "12")
        monkeypatch.setenv("BTCODEC_DUPLICATE_KEYS", "first")
        monkeypatch.setenv("BTCODEC_LOG_LEVEL", "debug")
        monkeypatch.setenv("BTCODEC_STRUCTURED_LOGGING", "yes")
        config = ConfigManager(configure_logging=False).config
        assert config.codec.max_depth == 12
        assert config.codec.duplicate_keys is DuplicateKeyPolicy.FIRST
        assert config.observability.log_level is LogLevel.DEBUG
        assert config.observability.structured_logging is True

    def test_env_overrides_file(self, monkeypatch, config_file):
        monkeypatch.setenv("BTCODEC_INT_BITS", "16")
        config = ConfigManager(config_file, configure_logging=False).config
        assert config.interchange.int_bits == 16
        # Untouched file values survive the merge
        assert config.codec.max_depth == 32

    def test_invalid_env_value_raises(self, monkeypatch):
        monkeypatch.setenv("BTCODEC_INT_BITS", "128")
        with pytest.raises(ConfigurationError):
            ConfigManager(configure_logging=False)

    def test_bool_env_false(self, monkeypatch):
        monkeypatch.setenv("BTCODEC_LOG_CORRELATION_ID", "off")
        config = ConfigManager(configure_logging=False).config
        assert config.observability.log_correlation_id is False


class TestApplyOverrides:
    """Test dotted-path overrides."""

    def test_none_values_skipped(self):
        manager = ConfigManager(configure_logging=False)
        before = manager.config
        result = manager.apply_overrides({"codec.max_depth": None})
        assert result is before

    def test_override_applied(self):
        manager = ConfigManager(configure_logging=False)
        result = manager.apply_overrides(
            {"codec.max_depth": 8, "interchange.indent": 2}
        )
        assert result.codec.max_depth == 8
        assert result.interchange.indent == 2
        assert manager.config is result

    def test_invalid_override_raises(self):
        manager = ConfigManager(configure_logging=False)
        with pytest.raises(ConfigurationError):
            manager.apply_overrides({"codec.max_depth": 1000})


class TestExport:
    """Test configuration export."""

    def test_export_toml(self):
        manager = ConfigManager(configure_logging=False)
        data = toml.loads(manager.export("toml"))
        assert data["codec"]["max_depth"] == 256
        assert data["codec"]["duplicate_keys"] == "last"
        assert "indent" not in data["interchange"]

    def test_export_json(self):
        manager = ConfigManager(configure_logging=False)
        data = json.loads(manager.export("json"))
        assert data["observability"]["log_level"] == "WARNING"

    def test_export_unsupported_format(self):
        manager = ConfigManager(configure_logging=False)
        with pytest.raises(ConfigurationError):
            manager.export("yaml")


class TestGlobalConfig:
    """Test module-level configuration helpers."""

    def test_get_config_creates_manager(self):
        assert config_module._config_manager is None  # noqa: SLF001
        config = get_config()
        assert isinstance(config, Config)
        assert config_module._config_manager is not None  # noqa: SLF001

    def test_init_config(self, config_file):
        manager = init_config(config_file, configure_logging=False)
        assert get_config() is manager.config
        assert get_config().codec.max_depth == 32

    def test_reload_requires_init(self):
        with pytest.raises(ConfigurationError):
            reload_config()

    def test_reload_picks_up_changes(self, config_file):
        init_config(config_file, configure_logging=False)
        config_file.write_text("[codec]\nmax_depth = 7\n", encoding="utf-8")
        assert reload_config().codec.max_depth == 7

    def test_set_config(self):
        new_config = Config(codec={"max_depth": 3})
        set_config(new_config)
        assert get_config() is new_config
