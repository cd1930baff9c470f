"""Mutable engine state owned by a single trading session."""

from pydantic import BaseModel, Field

from daily_trader.domain.models import Balance, Holding, Instrument
from daily_trader.market.catalog import default_catalog, find_instrument


class EngineState(BaseModel):
    """Instrument catalog, cash balance, and holdings for one account.

    ``holdings`` is keyed by instrument id and keeps purchase order.
    """

    instruments: list[Instrument] = Field(default_factory=default_catalog)
    balance: Balance = Field(default_factory=Balance)
    holdings: dict[str, Holding] = Field(default_factory=dict)

    def instrument(self, key: str) -> Instrument | None:
        return find_instrument(self.instruments, key)

    def holding(self, key: str) -> Holding | None:
        """Find a holding by instrument id or ticker code."""
        if key in self.holdings:
            return self.holdings[key]
        instrument = self.instrument(key)
        if instrument is None:
            return None
        return self.holdings.get(instrument.id)

    @classmethod
    def fresh(cls, *, krw: float, usd: float) -> "EngineState":
        return cls(balance=Balance(krw=krw, usd=usd))
