"""Tests for console and JSON file logging setup."""

import logging

import pytest

from daily_trader.config import Settings
from daily_trader.logging import setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    def test_file_handlers(self, tmp_path):
        settings = Settings(_env_file=None, log_dir=tmp_path / "logs")
        setup_logging(settings)

        root = logging.getLogger()
        assert len(root.handlers) == 3
        logging.getLogger("daily_trader.test").error("ledger write failed")
        for handler in root.handlers:
            handler.flush()

        assert "ledger write failed" in (tmp_path / "logs" / "daily_trader.log").read_text()
        assert "ledger write failed" in (tmp_path / "logs" / "error.log").read_text()

    def test_console_only(self, tmp_path):
        settings = Settings(_env_file=None, log_dir=tmp_path / "logs", log_to_file=False)
        setup_logging(settings)
        assert len(logging.getLogger().handlers) == 1
        assert not (tmp_path / "logs").exists()

    def test_cli_level_wins(self, tmp_path):
        settings = Settings(_env_file=None, log_dir=tmp_path, log_level="INFO")
        setup_logging(settings, cli_log_level="debug")
        assert logging.getLogger().handlers[0].level == logging.DEBUG

    def test_quiets_database_loggers(self, tmp_path):
        setup_logging(Settings(_env_file=None, log_dir=tmp_path))
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
