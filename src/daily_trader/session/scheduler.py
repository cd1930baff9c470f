"""Trading session — composition root that owns the engine state and drives broadcasts."""

import asyncio
import logging
import random
from collections.abc import Callable
from datetime import date

from sqlalchemy.ext.asyncio import AsyncEngine

from daily_trader.config import Settings, get_settings
from daily_trader.db.models import init_db
from daily_trader.db.repository import Repository
from daily_trader.domain.errors import InstrumentNotFound, NotAuthenticated
from daily_trader.domain.models import (
    Balance,
    Instrument,
    Market,
    MarketOverview,
    MessageKind,
    PortfolioSnapshot,
    RegisterResult,
    SnapshotMessage,
    TradeHistoryPage,
    TradeResult,
    TradeStatus,
    TradingLimits,
    User,
)
from daily_trader.domain.ports import RateProvider, TokenStore, TradeRepository
from daily_trader.market.catalog import group_by_market
from daily_trader.market.feed import PriceFeedGenerator
from daily_trader.session.auth import Authenticator, FileTokenStore
from daily_trader.session.broadcast import BroadcastLoop, SnapshotBroker, Subscriber
from daily_trader.trading.executor import OrderExecutor
from daily_trader.trading.limits import TradingLimitsGate
from daily_trader.trading.portfolio import FixedRateProvider, PortfolioValuation
from daily_trader.trading.state import EngineState

logger = logging.getLogger(__name__)


class TradingSession:
    """One authenticated account: state, limits, execution, valuation, and broadcasts.

    Nothing is shared between sessions, so tests can build as many as they need.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        rng: random.Random | None = None,
        rate_provider: RateProvider | None = None,
        token_store: TokenStore | None = None,
        repo: TradeRepository | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.settings = settings or get_settings()
        self.state = EngineState.fresh(
            krw=self.settings.starting_krw_balance,
            usd=self.settings.starting_usd_balance,
        )
        self.feed = PriceFeedGenerator(
            rng or random.Random(self.settings.price_seed),
            floor=self.settings.price_floor,
        )
        self.limits = TradingLimitsGate(
            self.settings.max_stock_types,
            policy=self.settings.limit_reset_policy,
            clock=clock,
        )
        self.valuation = PortfolioValuation(
            rate_provider or FixedRateProvider(self.settings.usd_krw_rate)
        )
        self.broker = SnapshotBroker()
        self.auth = Authenticator(
            token_store or FileTokenStore(self.settings.token_path),
            delay_seconds=self.settings.auth_delay_seconds,
        )
        self.repo: TradeRepository | None = repo
        self.executor: OrderExecutor | None = None
        self._db: AsyncEngine | None = None
        self._loop = BroadcastLoop(
            self.tick, interval_seconds=self.settings.broadcast_interval_seconds
        )

    async def initialize(self) -> None:
        """Set up the trade ledger and the executor."""
        logger.info("Initializing trading session...")
        if self.repo is None:
            db_path = str(self.settings.db_path) if self.settings.db_path else None
            self._db = await init_db(db_path)
            self.repo = Repository(self._db)

        self.executor = OrderExecutor(
            self.state,
            self.limits,
            self.repo,
            delay_seconds=self.settings.trade_delay_seconds,
        )
        logger.info(
            "Trading session ready — KRW %.0f, USD %.2f, max %d instrument types",
            self.state.balance.krw,
            self.state.balance.usd,
            self.limits.max_stock_types,
        )

    async def shutdown(self) -> None:
        """Clean up all resources."""
        logger.info("Shutting down trading session...")
        await self.stop_broadcast()
        if self.executor is not None:
            await self.executor.drain()
        self.broker.clear()
        if self._db is not None:
            await self._db.dispose()
            self._db = None
        logger.info("Trading session shut down")

    # ── Authentication ─────────────────────────────────────────

    @property
    def is_authenticated(self) -> bool:
        return self.auth.is_authenticated

    @property
    def user(self) -> User | None:
        return self.auth.current_user

    async def login(self, email: str, password: str) -> User:
        user = await self.auth.login(email, password)
        self.limits.reset_on_login()
        return user

    async def register(self, email: str, password: str, name: str) -> RegisterResult:
        return await self.auth.register(email, password, name)

    async def logout(self) -> None:
        """End the session: stop broadcasting and drop every subscriber."""
        await self.stop_broadcast()
        self.broker.clear()
        self.auth.logout()

    # ── Broadcasts ─────────────────────────────────────────────

    @property
    def broadcasting(self) -> bool:
        return self._loop.running

    def start_broadcast(self, *, max_ticks: int | None = None) -> None:
        self._require_auth()
        self._loop.start(max_ticks=max_ticks)

    async def stop_broadcast(self) -> None:
        await self._loop.stop()

    async def wait_broadcast(self) -> None:
        await self._loop.wait()

    def subscribe(self, kind: MessageKind, callback: Subscriber) -> None:
        self.broker.subscribe(kind, callback)

    def unsubscribe(self, kind: MessageKind, callback: Subscriber) -> None:
        self.broker.unsubscribe(kind, callback)

    def tick(self) -> list[SnapshotMessage]:
        """Advance prices one step, then publish a full snapshot."""
        self.feed.tick(self.state.instruments)
        return self.publish_snapshot()

    def publish_snapshot(self) -> list[SnapshotMessage]:
        """Publish prices, portfolio, balance and limits to their subscribers."""
        return [
            self.broker.publish(MessageKind.STOCK_UPDATE, self._stock_payload()),
            *self._publish_account(),
        ]

    def _publish_account(self) -> list[SnapshotMessage]:
        return [
            self.broker.publish(MessageKind.PORTFOLIO_UPDATE, self.get_portfolio()),
            self.broker.publish(MessageKind.BALANCE_UPDATE, self.get_balance()),
            self.broker.publish(MessageKind.TRADING_LIMITS_UPDATE, self.get_trading_limits()),
        ]

    def _stock_payload(self) -> dict[str, list[Instrument]]:
        return group_by_market(i.model_copy() for i in self.state.instruments)

    # ── Trading ────────────────────────────────────────────────

    async def buy(self, instrument_id: str, quantity: int) -> TradeResult:
        if not self.is_authenticated:
            return self._not_authenticated()
        result = await self._require_executor().buy(instrument_id, quantity)
        if result.success:
            self._publish_account()
        return result

    async def sell(self, instrument_id: str, quantity: int) -> TradeResult:
        if not self.is_authenticated:
            return self._not_authenticated()
        result = await self._require_executor().sell(instrument_id, quantity)
        if result.success:
            self._publish_account()
        return result

    # ── Queries ────────────────────────────────────────────────

    def get_portfolio(self) -> PortfolioSnapshot:
        return self.valuation.value(self.state.holdings.values()).model_copy(deep=True)

    def get_balance(self) -> Balance:
        return self.state.balance.model_copy()

    def get_trading_limits(self) -> TradingLimits:
        return self.limits.snapshot(self.state.holdings)

    def get_instruments(self, market: Market | None = None) -> list[Instrument]:
        return [
            i.model_copy()
            for i in self.state.instruments
            if market is None or i.market is market
        ]

    def get_instrument(self, instrument_id: str) -> Instrument:
        instrument = self.state.instrument(instrument_id)
        if instrument is None:
            raise InstrumentNotFound(f"Instrument {instrument_id!r} not found.")
        return instrument.model_copy()

    async def get_trade_history(self, page: int = 1, page_size: int = 20) -> TradeHistoryPage:
        self._require_auth()
        if self.repo is None:
            raise RuntimeError("TradingSession not initialized — call initialize() first")
        return await self.repo.get_trade_page(page=page, page_size=page_size)

    async def refresh(self) -> MarketOverview:
        """Return the full trading screen state after the simulated refresh delay."""
        self._require_auth()
        if self.settings.refresh_delay_seconds > 0:
            await asyncio.sleep(self.settings.refresh_delay_seconds)
        grouped = self._stock_payload()
        limits = self.get_trading_limits()
        return MarketOverview(
            can_buy_today=limits.can_buy_today,
            domestic=grouped[Market.DOMESTIC.value],
            international=grouped[Market.INTERNATIONAL.value],
            crypto=grouped[Market.CRYPTO.value],
            trading_limits=limits,
        )

    # ── Helpers ────────────────────────────────────────────────

    def _require_auth(self) -> None:
        if not self.is_authenticated:
            raise NotAuthenticated("Log in first.")

    def _require_executor(self) -> OrderExecutor:
        if self.executor is None:
            raise RuntimeError("TradingSession not initialized — call initialize() first")
        return self.executor

    def _not_authenticated(self) -> TradeResult:
        error = NotAuthenticated("Log in before trading.")
        return TradeResult(
            success=False,
            status=TradeStatus.REJECTED,
            reason=error.message,
            error=error.kind,
        )
