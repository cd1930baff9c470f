"""Shared fixtures: zero-delay settings, a fresh ledger, and a logged-in session."""

import random

import pytest

from daily_trader.config import Settings
from daily_trader.db.models import init_db
from daily_trader.db.repository import Repository
from daily_trader.session.auth import MemoryTokenStore
from daily_trader.session.scheduler import TradingSession
from daily_trader.trading.executor import OrderExecutor
from daily_trader.trading.limits import TradingLimitsGate
from daily_trader.trading.state import EngineState


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,  # Don't read .env in tests
        trade_delay_seconds=0,
        refresh_delay_seconds=0,
        auth_delay_seconds=0,
        broadcast_interval_seconds=0.01,
        price_seed=42,
    )


@pytest.fixture
async def repo(tmp_path):
    db = await init_db(str(tmp_path / "test.db"))
    yield Repository(db)
    await db.dispose()


@pytest.fixture
def state():
    return EngineState.fresh(krw=1_000_000, usd=750)


@pytest.fixture
def limits():
    return TradingLimitsGate(max_stock_types=5)


@pytest.fixture
def executor(state, limits, repo):
    return OrderExecutor(state, limits, repo)


@pytest.fixture
async def session(settings):
    s = TradingSession(settings, rng=random.Random(7), token_store=MemoryTokenStore())
    await s.initialize()
    await s.login("trader@example.com", "secret")
    yield s
    await s.logout()
    await s.shutdown()
