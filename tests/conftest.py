"""Pytest configuration and shared fixtures for btcodec tests."""

from __future__ import annotations

import logging
import os

import pytest


def pytest_configure(config):
    """Register all project markers to avoid warnings when ini isn't loaded."""
    markers = [
        ("unit", "marks tests as unit tests"),
        ("core", "marks tests as core codec tests"),
        ("config", "marks tests as configuration tests"),
        ("cli", "marks tests as CLI tests"),
        ("logging", "marks tests as logging tests"),
        ("property", "marks tests as property-based tests"),
    ]
    for name, desc in markers:
        config.addinivalue_line("markers", f"{name}: {desc}")


@pytest.fixture(autouse=True)
def _isolate_config_env(monkeypatch, tmp_path):
    """Keep user config files and BTCODEC_* variables out of tests.

    ConfigManager searches the working directory and the home directory for
    ``btcodec.toml``, so both point at an empty temporary directory.
    """
    for name in list(os.environ):
        if name.startswith("BTCODEC_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def cleanup_logging():
    """Clean up logging handlers after each test to prevent closed file errors."""
    yield
    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        logger = logging.getLogger(logger_name)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)


@pytest.fixture(autouse=True)
def _reset_global_config():
    """Drop the process-wide ConfigManager between tests."""
    yield
    from btcodec.config import config as config_module

    config_module._config_manager = None  # noqa: SLF001
