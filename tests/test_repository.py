"""Tests for the SQLite trade ledger."""

import pytest

from daily_trader.db.models import init_db
from daily_trader.db.repository import Repository
from daily_trader.domain.errors import InvalidPagination
from daily_trader.domain.models import Currency, Market, TradeType
from daily_trader.market.catalog import default_catalog, find_instrument


async def _record(repo, code="005930", trade_type=TradeType.BUY, quantity=1):
    instrument = find_instrument(default_catalog(), code)
    return await repo.record_trade(
        trade_type=trade_type,
        instrument=instrument,
        quantity=quantity,
        price=instrument.price,
        total_amount=instrument.price * quantity,
    )


class TestTradeRecording:
    async def test_record_trade(self, repo):
        record = await _record(repo, quantity=5)
        assert record.id > 0
        assert record.trade_type == TradeType.BUY
        assert record.instrument_id == "1"
        assert record.instrument_name == "Samsung Electronics"
        assert record.market == Market.DOMESTIC
        assert record.currency == Currency.KRW
        assert record.total_amount == 357_500
        assert record.timestamp.tzinfo is not None

    async def test_count_trades(self, repo):
        assert await repo.count_trades() == 0
        await _record(repo)
        await _record(repo, code="AAPL", trade_type=TradeType.SELL)
        assert await repo.count_trades() == 2

    async def test_in_memory_ledger(self):
        engine = await init_db(None)
        try:
            repo = Repository(engine)
            await _record(repo)
            assert await repo.count_trades() == 1
        finally:
            await engine.dispose()


class TestPagination:
    async def test_most_recent_first(self, repo):
        first = await _record(repo, code="005930")
        second = await _record(repo, code="AAPL")
        page = await repo.get_trade_page()
        assert [t.id for t in page.trades] == [second.id, first.id]

    async def test_pages(self, repo):
        for _ in range(5):
            await _record(repo)

        page1 = await repo.get_trade_page(page=1, page_size=2)
        assert len(page1.trades) == 2
        assert page1.total_count == 5
        assert page1.total_pages == 3
        assert page1.current_page == 1
        assert page1.has_more

        page3 = await repo.get_trade_page(page=3, page_size=2)
        assert len(page3.trades) == 1
        assert not page3.has_more

        page4 = await repo.get_trade_page(page=4, page_size=2)
        assert page4.trades == []
        assert not page4.has_more

        ids = [t.id for p in (page1, await repo.get_trade_page(2, 2), page3) for t in p.trades]
        assert ids == sorted(ids, reverse=True)
        assert len(set(ids)) == 5

    async def test_empty_ledger(self, repo):
        page = await repo.get_trade_page()
        assert page.trades == []
        assert page.total_count == 0
        assert page.total_pages == 0
        assert not page.has_more

    @pytest.mark.parametrize("page, page_size", [(0, 20), (1, 0), (-1, -1)])
    async def test_invalid_pagination(self, repo, page, page_size):
        with pytest.raises(InvalidPagination):
            await repo.get_trade_page(page=page, page_size=page_size)

    async def test_recent_trades(self, repo):
        for _ in range(3):
            await _record(repo)
        assert len(await repo.get_recent_trades(limit=2)) == 2
