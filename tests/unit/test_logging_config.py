"""Unit tests for logging configuration."""

import logging

import pytest

from src.lib.logging_config import get_logger, resolve_log_level


@pytest.mark.unit
class TestResolveLogLevel:
    """Test suite for resolve_log_level."""

    def test_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("LEDGER_ENGINE_LOG_LEVEL", raising=False)

        assert resolve_log_level(logging.WARNING) == logging.WARNING

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("LEDGER_ENGINE_LOG_LEVEL", "debug")

        assert resolve_log_level() == logging.DEBUG

    def test_unknown_level_falls_back(self, monkeypatch):
        monkeypatch.setenv("LEDGER_ENGINE_LOG_LEVEL", "chatty")

        assert resolve_log_level(logging.INFO) == logging.INFO


@pytest.mark.unit
def test_get_logger_returns_named_logger():
    assert get_logger("src.services.xirr_solver").name == "src.services.xirr_solver"
