"""Port interfaces (Protocols) that the domain depends on.

Infrastructure adapters implement these protocols so that the engine never couples
to a specific ledger backend, FX source, or token storage.
"""

from typing import Protocol

from daily_trader.domain.models import (
    Currency,
    Instrument,
    TradeHistoryPage,
    TradeRecord,
    TradeType,
)

# ── FX Rates ───────────────────────────────────────────────────


class RateProvider(Protocol):
    """Source of currency conversion rates used for valuation only."""

    def rate(self, source: Currency, target: Currency) -> float: ...


# ── Trade Ledger ───────────────────────────────────────────────


class TradeRepository(Protocol):
    """Append-only store for executed trades."""

    async def record_trade(
        self,
        trade_type: TradeType,
        instrument: Instrument,
        quantity: int,
        price: float,
        total_amount: float,
    ) -> TradeRecord: ...

    async def count_trades(self) -> int: ...
    async def get_trade_page(self, page: int = 1, page_size: int = 20) -> TradeHistoryPage: ...


# ── Auth Token Storage ─────────────────────────────────────────


class TokenStore(Protocol):
    """Keeps the opaque auth token between runs."""

    def load(self) -> str | None: ...
    def save(self, token: str) -> None: ...
    def clear(self) -> None: ...
