"""Logging setup for the trading session: Rich on the terminal, JSON on disk."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pythonjsonlogger.json import JsonFormatter  # type: ignore[import-untyped]
from rich.console import Console
from rich.logging import RichHandler

from daily_trader.config import Settings

console = Console()

# Database drivers log every statement at INFO
_NOISY_LOGGERS = ("aiosqlite", "sqlalchemy.engine", "sqlalchemy.pool")


def _json_file_handler(
    path: Path, level: int | str, settings: Settings, formatter: logging.Formatter
) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=settings.log_max_bytes,
        backupCount=settings.log_backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(settings: Settings, *, cli_log_level: str | None = None) -> None:
    """Route trading logs to the terminal and to rotating JSON files.

    ``daily_trader.log`` receives everything at ``log_file_level`` and above;
    ``error.log`` only failures (ledger errors, broken subscribers). Both are
    skipped when ``log_to_file`` is off.

    Args:
        settings: Provides levels, the log directory and rotation limits.
        cli_log_level: Console level from ``--log-level``; wins over settings.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    console_handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        show_time=True,
        show_path=False,
    )
    console_handler.setLevel((cli_log_level or settings.log_level).upper())
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root.addHandler(console_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if not settings.log_to_file:
        return

    settings.log_dir.mkdir(parents=True, exist_ok=True)
    formatter = JsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(message)s %(funcName)s %(lineno)d",
        rename_fields={"asctime": "timestamp", "levelname": "level"},
    )
    root.addHandler(
        _json_file_handler(
            settings.log_dir / "daily_trader.log",
            settings.log_file_level.upper(),
            settings,
            formatter,
        )
    )
    root.addHandler(
        _json_file_handler(settings.log_dir / "error.log", logging.ERROR, settings, formatter)
    )
