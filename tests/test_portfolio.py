"""Tests for portfolio valuation."""

import pytest

from daily_trader.domain.models import Currency, Holding
from daily_trader.market.catalog import default_catalog, find_instrument
from daily_trader.trading.portfolio import FixedRateProvider, PortfolioValuation


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def valuation():
    return PortfolioValuation(FixedRateProvider(1200.0))


class TestFixedRateProvider:
    def test_rates(self):
        rates = FixedRateProvider(1200.0)
        assert rates.rate(Currency.KRW, Currency.KRW) == 1.0
        assert rates.rate(Currency.USD, Currency.KRW) == 1200.0
        assert rates.rate(Currency.KRW, Currency.USD) == pytest.approx(1 / 1200)

    def test_invalid_rate(self):
        with pytest.raises(ValueError):
            FixedRateProvider(0)


class TestValuation:
    def test_empty_portfolio(self, valuation):
        snapshot = valuation.value([])
        assert snapshot.total_value == 0
        assert snapshot.total_cost == 0
        assert snapshot.total_return == 0
        assert snapshot.total_return_percent == 0
        assert snapshot.holdings == []

    def test_domestic_only(self, catalog, valuation):
        samsung = find_instrument(catalog, "005930")
        holding = Holding(instrument=samsung, quantity=5, avg_price=70000)
        snapshot = valuation.value([holding])
        assert snapshot.total_value == 357500
        assert snapshot.total_cost == 350000
        assert snapshot.total_return == 7500
        assert snapshot.total_return_percent == pytest.approx(7500 / 350000 * 100)

    def test_foreign_holdings_converted(self, catalog, valuation):
        aapl = find_instrument(catalog, "AAPL")
        aapl.price = 200.0
        holding = Holding(instrument=aapl, quantity=2, avg_price=150.0)
        snapshot = valuation.value([holding])
        assert snapshot.total_value == pytest.approx(200.0 * 2 * 1200)
        assert snapshot.total_cost == pytest.approx(150.0 * 2 * 1200)

    def test_custom_rate_provider(self, catalog):
        class DoubleRate:
            def rate(self, source, target):
                return 1.0 if source is target else 2.0

        btc = find_instrument(catalog, "BTC")
        holding = Holding(instrument=btc, quantity=1, avg_price=btc.price)
        snapshot = PortfolioValuation(DoubleRate()).value([holding])
        assert snapshot.total_value == pytest.approx(btc.price * 2)

    def test_return_identities_hold_for_mixed_portfolio(self, catalog, valuation):
        holdings = [
            Holding(instrument=find_instrument(catalog, "005930"), quantity=3, avg_price=69000),
            Holding(instrument=find_instrument(catalog, "MSFT"), quantity=1, avg_price=400.0),
            Holding(instrument=find_instrument(catalog, "ADA"), quantity=100, avg_price=0.5),
        ]
        snapshot = valuation.value(holdings)
        assert snapshot.total_return == pytest.approx(snapshot.total_value - snapshot.total_cost)
        assert snapshot.total_return_percent == pytest.approx(
            snapshot.total_return / snapshot.total_cost * 100
        )
