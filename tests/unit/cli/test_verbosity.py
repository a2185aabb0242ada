"""Unit tests for verbosity system.

Tests the VerbosityManager and verbosity level handling.
"""

from __future__ import annotations

import logging

import pytest

from btcodec.cli.verbosity import VerbosityLevel, VerbosityManager

pytestmark = [pytest.mark.cli, pytest.mark.unit]


class TestVerbosityLevel:
    """Test VerbosityLevel enum."""

    def test_verbosity_level_comparison(self):
        """Test verbosity level comparisons."""
        assert VerbosityLevel.QUIET < VerbosityLevel.NORMAL
        assert VerbosityLevel.NORMAL < VerbosityLevel.VERBOSE
        assert VerbosityLevel.VERBOSE < VerbosityLevel.DEBUG
        assert VerbosityLevel.DEBUG < VerbosityLevel.TRACE


class TestVerbosityManager:
    """Test VerbosityManager class."""

    def test_from_count_default(self):
        """Default verbosity keeps the configured log level."""
        vm = VerbosityManager.from_count(0)
        assert vm.level == VerbosityLevel.NORMAL
        assert vm.logging_level is None
        assert vm.log_level_name("WARNING") == "WARNING"

    def test_from_count_verbose(self):
        """Test creating VerbosityManager with -v."""
        vm = VerbosityManager.from_count(1)
        assert vm.level == VerbosityLevel.VERBOSE
        assert vm.log_level_name("WARNING") == "INFO"

    def test_from_count_debug(self):
        """Test creating VerbosityManager with -vv."""
        vm = VerbosityManager.from_count(2)
        assert vm.logging_level == logging.DEBUG
        assert vm.log_level_name("WARNING") == "DEBUG"
        assert not vm.should_show_stack_trace()

    def test_from_count_trace(self):
        """Test creating VerbosityManager with -vvv."""
        vm = VerbosityManager.from_count(3)
        assert vm.level == VerbosityLevel.TRACE
        assert vm.should_show_stack_trace()

    def test_from_count_clamped(self):
        """Test that verbosity count is clamped to valid range."""
        assert VerbosityManager.from_count(-1).verbosity_count == 0
        assert VerbosityManager.from_count(10).verbosity_count == 3

    def test_quiet_wins(self):
        """-q overrides any -v flags."""
        vm = VerbosityManager.from_count(2, quiet=True)
        assert vm.level == VerbosityLevel.QUIET
        assert vm.log_level_name("DEBUG") == "ERROR"
