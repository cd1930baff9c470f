"""Application configuration via Pydantic Settings."""

from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LimitResetPolicy(str, Enum):
    LOGIN = "login"
    CALENDAR_DAY = "calendar_day"


class Settings(BaseSettings):
    """All application settings, loaded from .env or environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Account ─────────────────────────────────────────────────
    starting_krw_balance: float = Field(default=1_000_000, ge=0, description="Opening KRW cash")
    starting_usd_balance: float = Field(default=750, ge=0, description="Opening USD cash")

    # ── Trading Limits ──────────────────────────────────────────
    max_stock_types: int = Field(default=5, ge=1, description="Max distinct holdings")
    limit_reset_policy: LimitResetPolicy = Field(
        default=LimitResetPolicy.LOGIN,
        description="When the daily purchase flag re-arms (every login or every calendar day)",
    )

    # ── Valuation ───────────────────────────────────────────────
    usd_krw_rate: float = Field(
        default=1200.0, gt=0, description="Fixed KRW per USD used for portfolio valuation"
    )

    # ── Simulation ──────────────────────────────────────────────
    broadcast_interval_seconds: float = Field(
        default=3.0, gt=0, description="Seconds between snapshot broadcasts"
    )
    trade_delay_seconds: float = Field(
        default=0.8, ge=0, description="Artificial processing delay before a trade executes"
    )
    refresh_delay_seconds: float = Field(
        default=0.5, ge=0, description="Artificial delay for a market overview refresh"
    )
    auth_delay_seconds: float = Field(
        default=1.0, ge=0, description="Artificial delay for login/register"
    )
    price_floor: float = Field(
        default=1000.0, gt=0, description="Price floor for all but micro-priced crypto"
    )
    price_seed: int | None = Field(
        default=None, description="Seed for the price feed RNG (None = nondeterministic)"
    )

    # ── Storage ─────────────────────────────────────────────────
    db_path: Path | None = Field(
        default=None, description="SQLite file for the trade ledger (None = in-memory)"
    )
    token_path: Path = Field(
        default=Path(".daily_trader_token"), description="Where the auth token is stored"
    )

    # ── Logging ─────────────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Console logging level")
    log_file_level: str = Field(default="DEBUG", description="JSON log file level")
    log_to_file: bool = Field(default=True, description="Also write JSON log files")
    log_dir: Path = Field(default=Path("logs"), description="Directory for log files")
    log_max_bytes: int = Field(default=5_000_000, description="Rotate log files at this size")
    log_backup_count: int = Field(default=3, description="Rotated log files to keep")


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the cached settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
