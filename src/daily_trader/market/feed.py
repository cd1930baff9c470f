"""Simulated price feed — random per-tick perturbations of the instrument catalog.

This is a stochastic stand-in for a market data stream, not a model of real price
dynamics. Each tick nudges every instrument by a bounded random amount whose scale
depends on the market, clamps it to a floor, and recomputes the day change against
the previous close.
"""

import logging
import random
from collections.abc import Iterable

from daily_trader.domain.models import Instrument, Market

logger = logging.getLogger(__name__)

# Full width of the uniform perturbation per market, in local-currency units.
_TICK_SCALE = {
    Market.DOMESTIC: 2000.0,
    Market.INTERNATIONAL: 5.0,
    Market.CRYPTO: 1000.0,
}

DEFAULT_PRICE_FLOOR = 1000.0
MICRO_PRICE_FLOOR = 0.001


def _is_micro_priced(instrument: Instrument) -> bool:
    return instrument.market is Market.CRYPTO and instrument.price < 1


class PriceFeedGenerator:
    """Applies one random walk step to every instrument per ``tick()``."""

    def __init__(
        self,
        rng: random.Random | None = None,
        *,
        floor: float = DEFAULT_PRICE_FLOOR,
        micro_floor: float = MICRO_PRICE_FLOOR,
    ) -> None:
        self._rng = rng or random.Random()
        self._floor = floor
        self._micro_floor = micro_floor
        self._ticks = 0

    @property
    def ticks(self) -> int:
        return self._ticks

    def tick(self, instruments: Iterable[Instrument]) -> None:
        """Perturb every instrument in place."""
        count = 0
        for instrument in instruments:
            self._step(instrument)
            count += 1
        self._ticks += 1
        logger.debug("Price tick #%d applied to %d instruments", self._ticks, count)

    def _step(self, instrument: Instrument) -> None:
        micro = _is_micro_priced(instrument)
        delta = (self._rng.random() - 0.5) * _TICK_SCALE[instrument.market]
        floor = self._micro_floor if micro else self._floor
        new_price = max(instrument.price + delta, floor)

        previous_close = instrument.previous_close
        new_change = new_price - previous_close

        instrument.price = round(new_price, 4) if micro else round(new_price, 2)
        instrument.change = round(new_change, 2)
        instrument.change_percent = change_percent(instrument.price, instrument.change)


def change_percent(price: float, change: float) -> float:
    """``change / (price - change) * 100`` rounded to 2 decimals (0 when undefined)."""
    base = price - change
    if base == 0:
        return 0.0
    return round(change / base * 100, 2)
