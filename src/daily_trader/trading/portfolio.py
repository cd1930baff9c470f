"""Portfolio valuation — value, cost and return folded over holdings in home currency."""

from collections.abc import Iterable

from daily_trader.domain.models import Currency, Holding, PortfolioSnapshot
from daily_trader.domain.ports import RateProvider


class FixedRateProvider:
    """RateProvider backed by a single fixed KRW-per-USD rate."""

    def __init__(self, usd_krw: float = 1200.0) -> None:
        if usd_krw <= 0:
            raise ValueError("usd_krw must be positive")
        self._usd_krw = usd_krw

    def rate(self, source: Currency, target: Currency) -> float:
        if source is target:
            return 1.0
        if source is Currency.USD and target is Currency.KRW:
            return self._usd_krw
        return 1.0 / self._usd_krw


class PortfolioValuation:
    """Recomputes portfolio aggregates from holdings and live prices.

    Conversion applies to valuation only; balances stay in their own currency.
    """

    def __init__(self, rates: RateProvider, *, home: Currency = Currency.KRW) -> None:
        self._rates = rates
        self._home = home

    @property
    def home_currency(self) -> Currency:
        return self._home

    def value(self, holdings: Iterable[Holding]) -> PortfolioSnapshot:
        held = list(holdings)
        total_value = 0.0
        total_cost = 0.0
        for holding in held:
            fx = self._rates.rate(holding.instrument.currency, self._home)
            total_value += holding.market_value * fx
            total_cost += holding.cost_basis * fx

        total_return = total_value - total_cost
        total_return_percent = total_return / total_cost * 100 if total_cost > 0 else 0.0

        return PortfolioSnapshot(
            total_value=total_value,
            total_cost=total_cost,
            total_return=total_return,
            total_return_percent=total_return_percent,
            holdings=held,
        )
