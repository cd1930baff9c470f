"""Domain models — instruments, holdings, balances, trade records, and snapshots."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from daily_trader.domain.errors import ErrorKind


# ── Markets & Currencies ───────────────────────────────────────


class Currency(str, Enum):
    KRW = "krw"
    USD = "usd"


class Market(str, Enum):
    DOMESTIC = "domestic"
    INTERNATIONAL = "international"
    CRYPTO = "crypto"

    @property
    def currency(self) -> Currency:
        """Currency the market settles in: KRW at home, USD everywhere else."""
        return Currency.KRW if self is Market.DOMESTIC else Currency.USD


# ── Market Data ────────────────────────────────────────────────


class Instrument(BaseModel):
    """A tradable unit in the fixed catalog. Prices are mutated in place by the feed."""

    id: str
    name: str
    code: str
    market: Market
    price: float = Field(gt=0)
    change: float = 0.0
    change_percent: float = 0.0

    @property
    def currency(self) -> Currency:
        return self.market.currency

    @property
    def previous_close(self) -> float:
        return self.price - self.change


# ── Account State ──────────────────────────────────────────────


class Holding(BaseModel):
    """A position in one instrument. Shares the live ``Instrument`` with the catalog."""

    instrument: Instrument
    quantity: int = Field(gt=0)
    avg_price: float = Field(gt=0)
    purchase_date: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def instrument_id(self) -> str:
        return self.instrument.id

    @property
    def market(self) -> Market:
        return self.instrument.market

    @property
    def market_value(self) -> float:
        """Value at the live price, in the instrument's own currency."""
        return self.instrument.price * self.quantity

    @property
    def cost_basis(self) -> float:
        return self.avg_price * self.quantity


class Balance(BaseModel):
    """Cash per currency. Never negative; changed only by trade execution."""

    krw: float = Field(default=0.0, ge=0)
    usd: float = Field(default=0.0, ge=0)

    def of(self, currency: Currency) -> float:
        return self.krw if currency is Currency.KRW else self.usd

    def adjust(self, currency: Currency, delta: float) -> None:
        if currency is Currency.KRW:
            self.krw += delta
        else:
            self.usd += delta


class TradingLimits(BaseModel):
    """Daily purchase and holding-type limits as seen by clients."""

    can_buy_today: bool
    max_stock_types: int
    current_stock_types: int


class PortfolioSnapshot(BaseModel):
    """Aggregate valuation in home currency, derived from holdings on every read."""

    total_value: float = 0.0
    total_cost: float = 0.0
    total_return: float = 0.0
    total_return_percent: float = 0.0
    holdings: list[Holding] = Field(default_factory=list)


# ── Trades ─────────────────────────────────────────────────────


class TradeType(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class TradeRecord(BaseModel):
    """Immutable ledger entry appended on every successful execution."""

    model_config = ConfigDict(frozen=True)

    id: int
    trade_type: TradeType
    instrument_id: str
    instrument_name: str
    instrument_code: str
    market: Market
    currency: Currency
    quantity: int
    price: float
    total_amount: float
    timestamp: datetime


class TradeHistoryPage(BaseModel):
    """One page of the trade ledger, most recent first."""

    trades: list[TradeRecord] = Field(default_factory=list)
    total_count: int = 0
    current_page: int = 1
    total_pages: int = 0
    has_more: bool = False


class TradeStatus(str, Enum):
    FILLED = "filled"
    REJECTED = "rejected"
    ERROR = "error"


class TradeResult(BaseModel):
    """Outcome of a BUY or SELL request."""

    success: bool
    status: TradeStatus
    reason: str
    error: ErrorKind | None = None
    trade: TradeRecord | None = None


# ── Session & Broadcast ────────────────────────────────────────


class MessageKind(str, Enum):
    STOCK_UPDATE = "STOCK_UPDATE"
    PORTFOLIO_UPDATE = "PORTFOLIO_UPDATE"
    BALANCE_UPDATE = "BALANCE_UPDATE"
    TRADING_LIMITS_UPDATE = "TRADING_LIMITS_UPDATE"


class SnapshotMessage(BaseModel):
    """A point-in-time payload delivered to subscribers of one message kind."""

    type: MessageKind
    data: Any
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class MarketOverview(BaseModel):
    """Everything a client needs to render the trading screen in one read."""

    can_buy_today: bool
    domestic: list[Instrument] = Field(default_factory=list)
    international: list[Instrument] = Field(default_factory=list)
    crypto: list[Instrument] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))
    trading_limits: TradingLimits


class User(BaseModel):
    id: str
    email: str
    name: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class RegisterResult(BaseModel):
    ok: bool
    message: str
