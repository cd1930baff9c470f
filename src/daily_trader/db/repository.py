"""Data access layer using SQLModel."""

import math
from datetime import UTC, datetime

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from daily_trader.db.models import Trade
from daily_trader.domain.errors import InvalidPagination
from daily_trader.domain.models import (
    Currency,
    Instrument,
    Market,
    TradeHistoryPage,
    TradeRecord,
    TradeType,
)


def _to_record(row: Trade) -> TradeRecord:
    timestamp = row.timestamp
    # SQLite drops tzinfo on the way back out
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return TradeRecord(
        id=row.id,  # type: ignore[arg-type]
        trade_type=TradeType(row.trade_type),
        instrument_id=row.instrument_id,
        instrument_name=row.instrument_name,
        instrument_code=row.instrument_code,
        market=Market(row.market),
        currency=Currency(row.currency),
        quantity=row.quantity,
        price=row.price,
        total_amount=row.total_amount,
        timestamp=timestamp,
    )


class Repository:
    """SQLModel-based trade ledger."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    # ── Trades ──────────────────────────────────────────────────

    async def record_trade(
        self,
        trade_type: TradeType,
        instrument: Instrument,
        quantity: int,
        price: float,
        total_amount: float,
    ) -> TradeRecord:
        trade = Trade(
            timestamp=datetime.now(UTC),
            trade_type=trade_type.value,
            instrument_id=instrument.id,
            instrument_name=instrument.name,
            instrument_code=instrument.code,
            market=instrument.market.value,
            currency=instrument.currency.value,
            quantity=quantity,
            price=price,
            total_amount=total_amount,
        )
        async with AsyncSession(self._engine) as session:
            session.add(trade)
            await session.commit()
            await session.refresh(trade)
            return _to_record(trade)

    async def count_trades(self) -> int:
        async with AsyncSession(self._engine) as session:
            result = await session.exec(select(func.count()).select_from(Trade))
            return int(result.one())

    async def get_trade_page(self, page: int = 1, page_size: int = 20) -> TradeHistoryPage:
        """Return one page of trades, most recent first. ``page`` is 1-based."""
        if page < 1:
            raise InvalidPagination(f"page must be >= 1, got {page}.")
        if page_size < 1:
            raise InvalidPagination(f"page_size must be >= 1, got {page_size}.")

        total = await self.count_trades()
        offset = (page - 1) * page_size
        async with AsyncSession(self._engine) as session:
            statement = (
                select(Trade)
                .order_by(Trade.id.desc())  # type: ignore[union-attr]
                .offset(offset)
                .limit(page_size)
            )
            results = await session.exec(statement)
            trades = [_to_record(row) for row in results.all()]

        return TradeHistoryPage(
            trades=trades,
            total_count=total,
            current_page=page,
            total_pages=math.ceil(total / page_size),
            has_more=offset + page_size < total,
        )

    async def get_recent_trades(self, limit: int = 50) -> list[TradeRecord]:
        page = await self.get_trade_page(page=1, page_size=limit)
        return page.trades
