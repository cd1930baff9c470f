"""Tests for the simulated price feed."""

import random

from daily_trader.domain.models import Instrument, Market
from daily_trader.market.catalog import default_catalog
from daily_trader.market.feed import PriceFeedGenerator, change_percent


class FixedRandom(random.Random):
    """Random source that always returns the same draw."""

    def __init__(self, value: float) -> None:
        super().__init__()
        self.value = value

    def random(self) -> float:
        return self.value


def _domestic(price: float, change: float = 0.0) -> Instrument:
    return Instrument(
        id="1", name="Test", code="000001", market=Market.DOMESTIC, price=price, change=change
    )


class TestPriceFeed:
    def test_change_percent_matches_change_after_ticks(self):
        catalog = default_catalog()
        feed = PriceFeedGenerator(random.Random(1))
        for _ in range(20):
            feed.tick(catalog)
        for i in catalog:
            assert i.change_percent == change_percent(i.price, i.change)
        assert feed.ticks == 20

    def test_change_measured_from_previous_close(self):
        instrument = _domestic(71500, change=1500)  # previous close 70000
        feed = PriceFeedGenerator(FixedRandom(0.75))  # +500 for domestic
        feed.tick([instrument])
        assert instrument.price == 72000
        assert instrument.change == 2000
        assert instrument.change_percent == round(2000 / 70000 * 100, 2)

    def test_domestic_floor(self):
        instrument = _domestic(1500)
        feed = PriceFeedGenerator(FixedRandom(0.0))  # -1000
        feed.tick([instrument])
        assert instrument.price == 1000
        assert instrument.change == -500
        assert instrument.change_percent == -33.33

    def test_micro_priced_crypto_floor(self):
        ada = Instrument(
            id="14", name="Cardano", code="ADA", market=Market.CRYPTO, price=0.485, change=-0.023
        )
        feed = PriceFeedGenerator(FixedRandom(0.0))  # -500 for crypto
        feed.tick([ada])
        assert ada.price == 0.001

    def test_custom_floor(self):
        instrument = _domestic(1500)
        feed = PriceFeedGenerator(FixedRandom(0.0), floor=10)
        feed.tick([instrument])
        assert instrument.price == 500

    def test_prices_never_below_floor(self):
        catalog = default_catalog()
        feed = PriceFeedGenerator(random.Random(3))
        for _ in range(50):
            feed.tick(catalog)
        for i in catalog:
            assert i.price >= 0.001
            if i.market is not Market.CRYPTO:
                assert i.price >= 1000

    def test_seeded_feeds_agree(self):
        a, b = default_catalog(), default_catalog()
        PriceFeedGenerator(random.Random(99)).tick(a)
        PriceFeedGenerator(random.Random(99)).tick(b)
        assert [i.price for i in a] == [i.price for i in b]

    def test_change_percent_zero_base(self):
        assert change_percent(100, 100) == 0.0
