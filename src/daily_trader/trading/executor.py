"""Order execution — validates and applies BUY/SELL requests against the engine state."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from daily_trader.domain.errors import (
    ErrorKind,
    InstrumentNotFound,
    InsufficientBalance,
    InsufficientHoldings,
    InvalidQuantity,
    LimitExceeded,
    NotHeld,
    TooManyStockTypes,
    TradingError,
)
from daily_trader.domain.models import (
    Holding,
    Instrument,
    TradeRecord,
    TradeResult,
    TradeStatus,
    TradeType,
)
from daily_trader.domain.ports import TradeRepository
from daily_trader.trading.limits import LimitViolation, TradingLimitsGate
from daily_trader.trading.state import EngineState

logger = logging.getLogger(__name__)


def _validate_quantity(quantity: object) -> int:
    # bool is an int subclass; True is not a quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantity(f"Quantity must be a positive whole number, got {quantity!r}.")
    return quantity


class OrderExecutor:
    """Executes BUY/SELL requests for one account.

    Every request waits out the simulated processing delay, then runs validation,
    the ledger insert, and the in-memory commit under one lock. Preconditions are
    checked before anything is written, so a rejected order leaves no trace.
    Once a request holds the lock it runs to completion in its own task, even if
    the caller is cancelled.
    """

    def __init__(
        self,
        state: EngineState,
        limits: TradingLimitsGate,
        repo: TradeRepository,
        *,
        delay_seconds: float = 0.0,
    ) -> None:
        self._state = state
        self._limits = limits
        self._repo = repo
        self._delay = delay_seconds
        self._lock = asyncio.Lock()
        self._in_flight: set[asyncio.Task[TradeResult]] = set()

    async def buy(self, instrument_id: str, quantity: int) -> TradeResult:
        """Buy ``quantity`` units of an instrument at its live price."""
        return await self._submit(
            TradeType.BUY, self._execute_buy, instrument_id, quantity, "Purchase completed."
        )

    async def sell(self, instrument_id: str, quantity: int) -> TradeResult:
        """Sell ``quantity`` units of a held instrument at its live price."""
        return await self._submit(
            TradeType.SELL, self._execute_sell, instrument_id, quantity, "Sale completed."
        )

    async def drain(self) -> None:
        """Wait for trades whose callers were cancelled mid-execution."""
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    async def _submit(
        self,
        side: TradeType,
        execute: Callable[[str, object], Awaitable[TradeRecord]],
        instrument_id: str,
        quantity: int,
        success_reason: str,
    ) -> TradeResult:
        await self._simulate_latency()
        await self._lock.acquire()
        # The task owns the lock from here and releases it when the trade settles
        task = asyncio.ensure_future(
            self._attempt(side, execute, instrument_id, quantity, success_reason)
        )
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return await asyncio.shield(task)

    async def _attempt(
        self,
        side: TradeType,
        execute: Callable[[str, object], Awaitable[TradeRecord]],
        instrument_id: str,
        quantity: int,
        success_reason: str,
    ) -> TradeResult:
        try:
            record = await execute(instrument_id, quantity)
        except TradingError as e:
            return self._rejected(side, instrument_id, e)
        except Exception as e:
            return self._failed(side, instrument_id, e)
        finally:
            self._lock.release()
        return TradeResult(
            success=True,
            status=TradeStatus.FILLED,
            reason=success_reason,
            trade=record,
        )

    # ── BUY ────────────────────────────────────────────────────

    async def _execute_buy(self, instrument_id: str, quantity: object) -> TradeRecord:
        qty = _validate_quantity(quantity)

        instrument = self._state.instrument(instrument_id)
        key = instrument.id if instrument else instrument_id

        check = self._limits.check(key, self._state.holdings)
        if not check.allowed:
            if check.violation is LimitViolation.DAILY_LIMIT:
                raise LimitExceeded(check.reason)
            raise TooManyStockTypes(check.reason)

        if instrument is None:
            raise InstrumentNotFound(f"Instrument {instrument_id!r} not found.")

        # Always the live price at execution time, never a client quote
        price = instrument.price
        total_cost = price * qty
        currency = instrument.currency
        available = self._state.balance.of(currency)
        if total_cost > available:
            raise InsufficientBalance(
                f"Insufficient {currency.value.upper()} balance: "
                f"need {total_cost:,.2f}, have {available:,.2f}."
            )

        record = await self._repo.record_trade(
            trade_type=TradeType.BUY,
            instrument=instrument,
            quantity=qty,
            price=price,
            total_amount=total_cost,
        )

        # Commit: nothing below awaits
        self._state.balance.adjust(currency, -total_cost)
        self._upsert_holding(instrument, qty, price)
        self._limits.record_purchase()

        logger.info(
            "BUY filled: %s (%s) x%d @ %s — %s %.2f",
            instrument.name,
            instrument.code,
            qty,
            price,
            currency.value.upper(),
            total_cost,
        )
        return record

    def _upsert_holding(self, instrument: Instrument, qty: int, price: float) -> None:
        existing = self._state.holdings.get(instrument.id)
        if existing is None:
            self._state.holdings[instrument.id] = Holding(
                instrument=instrument, quantity=qty, avg_price=price
            )
            return
        new_quantity = existing.quantity + qty
        new_avg = (existing.avg_price * existing.quantity + price * qty) / new_quantity
        existing.quantity = new_quantity
        existing.avg_price = round(new_avg, 2)

    # ── SELL ───────────────────────────────────────────────────

    async def _execute_sell(self, instrument_id: str, quantity: object) -> TradeRecord:
        qty = _validate_quantity(quantity)

        holding = self._state.holding(instrument_id)
        if holding is None:
            raise NotHeld(f"You do not hold instrument {instrument_id!r}.")
        if holding.quantity < qty:
            raise InsufficientHoldings(
                f"Insufficient holdings of {holding.instrument.code}: "
                f"requested {qty}, held {holding.quantity}."
            )

        instrument = holding.instrument
        price = instrument.price
        sell_value = price * qty
        currency = instrument.currency

        record = await self._repo.record_trade(
            trade_type=TradeType.SELL,
            instrument=instrument,
            quantity=qty,
            price=price,
            total_amount=sell_value,
        )

        self._state.balance.adjust(currency, sell_value)
        if holding.quantity == qty:
            del self._state.holdings[instrument.id]
        else:
            holding.quantity -= qty

        logger.info(
            "SELL filled: %s (%s) x%d @ %s — %s %.2f",
            instrument.name,
            instrument.code,
            qty,
            price,
            currency.value.upper(),
            sell_value,
        )
        return record

    # ── Helpers ────────────────────────────────────────────────

    async def _simulate_latency(self) -> None:
        if self._delay > 0:
            await asyncio.sleep(self._delay)

    def _rejected(self, side: TradeType, instrument_id: str, error: TradingError) -> TradeResult:
        logger.warning("%s rejected for %s: %s", side.value, instrument_id, error.message)
        return TradeResult(
            success=False,
            status=TradeStatus.REJECTED,
            reason=error.message,
            error=error.kind,
        )

    def _failed(self, side: TradeType, instrument_id: str, error: Exception) -> TradeResult:
        logger.error("Failed to execute %s for %s: %s", side.value, instrument_id, error)
        return TradeResult(
            success=False,
            status=TradeStatus.ERROR,
            reason=f"Trade could not be completed: {error}",
            error=ErrorKind.TRANSIENT,
        )
