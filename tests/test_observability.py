"""
Tests for observability — log level resolution and logging setup.
"""

import logging
from pathlib import Path

import pytest

from dynamic_plugins.core.observability.logging_config import resolve_level, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestResolveLevel:
    def test_default_is_info(self):
        assert resolve_level() == "INFO"

    def test_env_level(self):
        assert resolve_level(env_level="WARNING") == "WARNING"

    def test_quiet_beats_env(self):
        assert resolve_level(quiet=True, env_level="DEBUG") == "ERROR"

    def test_debug_beats_everything(self):
        assert resolve_level(debug=True, quiet=True, env_level="ERROR") == "DEBUG"


class TestSetupLogging:
    def test_single_console_handler(self, restore_root_logger):
        setup_logging("WARNING")
        setup_logging("WARNING")
        assert len(restore_root_logger.handlers) == 1
        assert restore_root_logger.level == logging.WARNING

    def test_invalid_level_falls_back_to_info(self, restore_root_logger):
        setup_logging("CHATTY")
        assert restore_root_logger.level == logging.INFO

    def test_file_handler(self, tmp_path: Path, restore_root_logger):
        log_file = tmp_path / "install.log"
        setup_logging("ERROR", log_file=str(log_file), log_file_level="DEBUG")
        assert restore_root_logger.level == logging.DEBUG

        logging.getLogger("dynamic_plugins.test").debug("fetched %s", "pkg")
        for handler in restore_root_logger.handlers:
            handler.flush()

        text = log_file.read_text()
        assert "fetched pkg" in text
        assert "DEBUG" in text
