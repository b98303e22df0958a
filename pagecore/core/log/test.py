"""Unit tests for logging helpers."""

import io
import logging

import pytest

from pagecore.core.log import get_logger, level_from_name, setup_logging


class TestLevelFromName:
    """Tests for level name translation."""

    @pytest.mark.unit
    def test_known_names(self):
        """Level names resolve case-insensitively."""
        assert level_from_name("debug") == logging.DEBUG
        assert level_from_name("WARNING") == logging.WARNING
        assert level_from_name(" error ") == logging.ERROR

    @pytest.mark.unit
    def test_unknown_name_uses_default(self):
        """Unknown names fall back to the default level."""
        assert level_from_name("chatty") == logging.INFO
        assert level_from_name("chatty", default=logging.ERROR) == logging.ERROR


class TestGetLogger:
    """Tests for get_logger."""

    @pytest.mark.unit
    def test_default_name(self):
        """Unnamed logger is the package logger."""
        assert get_logger().name == "pagecore"

    @pytest.mark.unit
    def test_named_logger(self):
        """Named logger keeps its name."""
        assert get_logger("cli").name == "cli"


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.mark.unit
    def test_accepts_level_name(self, monkeypatch):
        """String levels are translated before configuring."""
        calls = {}

        def fake_basic_config(**kwargs):
            calls.update(kwargs)

        monkeypatch.setattr(logging, "basicConfig", fake_basic_config)
        stream = io.StringIO()
        setup_logging("debug", stream=stream)

        assert calls["level"] == logging.DEBUG
        assert calls["stream"] is stream
        assert "%(levelname)s" in calls["format"]
