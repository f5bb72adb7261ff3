"""Unit tests for the logging configuration module."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import structlog

from plex_updater.config import Settings
from plex_updater.logging import get_logger, setup_logging


@pytest.fixture(autouse=True)
def _reset_root_logger():
    """Reset root logger state before and after each test."""
    original_handlers = logging.root.handlers[:]
    original_level = logging.root.level
    logging.root.handlers.clear()
    yield
    for handler in logging.root.handlers:
        handler.close()
    logging.root.handlers.clear()
    logging.root.handlers.extend(original_handlers)
    logging.root.setLevel(original_level)
    structlog.reset_defaults()


def _settings(**overrides: object) -> Settings:
    defaults: dict[str, object] = {"_env_file": None}
    defaults.update(overrides)
    return Settings(**defaults)


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_console_handler_uses_processor_formatter(self) -> None:
        setup_logging(_settings())

        console = [h for h in logging.root.handlers if type(h) is logging.StreamHandler]
        assert len(console) == 1
        assert isinstance(console[0].formatter, structlog.stdlib.ProcessorFormatter)

    def test_level_from_settings(self) -> None:
        setup_logging(_settings(log_level="debug"))
        assert logging.root.level == logging.DEBUG

    def test_invalid_level_defaults_to_info(self) -> None:
        setup_logging(_settings(log_level="NONEXISTENT"))
        assert logging.root.level == logging.INFO

    def test_reduces_httpx_noise(self) -> None:
        setup_logging(_settings(log_level="DEBUG"))
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_appends_to_log_file(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "plex_update_check.log"
        log_file.parent.mkdir()
        log_file.write_text("earlier run\n", encoding="utf-8")

        setup_logging(_settings(log_file=str(log_file)))
        get_logger("plex_updater.test").info("update_check_started", channel="stable")
        for handler in logging.root.handlers:
            handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert content.startswith("earlier run\n")
        assert "update_check_started" in content
        assert "channel" in content

    def test_creates_log_directory(self, tmp_path: Path) -> None:
        log_file = tmp_path / "nested" / "dir" / "update.log"
        setup_logging(_settings(log_file=str(log_file)))
        assert log_file.parent.is_dir()


class TestGetLogger:
    def test_returns_bound_logger(self) -> None:
        log = get_logger("plex_updater.test")
        assert hasattr(log, "info")
        assert hasattr(log, "error")
