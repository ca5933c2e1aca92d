"""
Unit tests for logging setup.
"""

import logging
import logging.handlers
from pathlib import Path

import pytest

from virtualtv.config import LoggingConfig
from virtualtv.utils import get_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way the test runner left it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging."""

    def test_console_and_file(self, temp_dir: Path, restore_root_logger):
        """Test both handlers are installed from config."""
        config = LoggingConfig(level="DEBUG", file=str(temp_dir / "logs" / "tv.log"))

        root = setup_logging(config)

        file_handlers = [
            h for h in root.handlers if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert root.level == logging.DEBUG
        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 10 * 1024 * 1024
        assert file_handlers[0].backupCount == 5
        assert (temp_dir / "logs" / "tv.log").exists()

    def test_file_logging_disabled(self, restore_root_logger):
        """Test no file handler when file logging is off."""
        root = setup_logging(LoggingConfig(log_to_file=False))

        assert not any(
            isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers
        )
        assert any(isinstance(h, logging.StreamHandler) for h in root.handlers)

    def test_repeated_setup_does_not_duplicate(self, restore_root_logger):
        """Test calling setup twice keeps one handler per target."""
        config = LoggingConfig(log_to_file=False)

        setup_logging(config)
        root = setup_logging(config)

        assert len(root.handlers) == 1

    def test_log_directory_override(self, temp_dir: Path, restore_root_logger):
        """Test the log directory can be redirected."""
        setup_logging(LoggingConfig(log_to_console=False), log_directory=temp_dir)

        assert (temp_dir / "virtualtv.log").exists()

    def test_get_logger(self):
        """Test module loggers are named."""
        assert get_logger("virtualtv.test").name == "virtualtv.test"
