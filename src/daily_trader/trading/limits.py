"""Trading limits gate — one purchase per trading day, bounded distinct holdings."""

import logging
from collections.abc import Callable, Mapping
from datetime import date
from enum import Enum

from pydantic import BaseModel

from daily_trader.config import LimitResetPolicy
from daily_trader.domain.models import Holding, TradingLimits

logger = logging.getLogger(__name__)


class LimitViolation(str, Enum):
    DAILY_LIMIT = "daily_limit"
    TOO_MANY_TYPES = "too_many_types"


class LimitCheck(BaseModel):
    """Result of asking the gate whether a purchase may proceed."""

    allowed: bool
    reason: str = ""
    violation: LimitViolation | None = None


class TradingLimitsGate:
    """Decides, per trading day, whether a BUY may proceed.

    Under ``LimitResetPolicy.LOGIN`` every login re-arms the daily purchase.
    Under ``LimitResetPolicy.CALENDAR_DAY`` it re-arms when ``clock()`` moves to a
    new date, and logins leave it alone.
    """

    def __init__(
        self,
        max_stock_types: int,
        *,
        policy: LimitResetPolicy = LimitResetPolicy.LOGIN,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._max_stock_types = max_stock_types
        self._policy = policy
        self._clock = clock
        self._can_buy_today = True
        self._trading_day = clock()

    @property
    def can_buy_today(self) -> bool:
        self._roll_day()
        return self._can_buy_today

    @property
    def max_stock_types(self) -> int:
        return self._max_stock_types

    def check(self, instrument_id: str, holdings: Mapping[str, Holding]) -> LimitCheck:
        """Return whether buying ``instrument_id`` is allowed given current holdings."""
        if not self.can_buy_today:
            return LimitCheck(
                allowed=False,
                reason="Daily purchase already used. Try again on the next trading day.",
                violation=LimitViolation.DAILY_LIMIT,
            )

        if instrument_id not in holdings and len(holdings) >= self._max_stock_types:
            return LimitCheck(
                allowed=False,
                reason=f"You can hold at most {self._max_stock_types} different instruments.",
                violation=LimitViolation.TOO_MANY_TYPES,
            )

        return LimitCheck(allowed=True)

    def record_purchase(self) -> None:
        self._roll_day()
        self._can_buy_today = False
        logger.info("Daily purchase used for trading day %s", self._trading_day)

    def reset_for_new_day(self) -> None:
        self._trading_day = self._clock()
        self._can_buy_today = True
        logger.info("Trading limits reset for %s", self._trading_day)

    def reset_on_login(self) -> None:
        if self._policy is LimitResetPolicy.LOGIN:
            self._can_buy_today = True
            logger.debug("Daily purchase re-armed on login")
        else:
            self._roll_day()

    def snapshot(self, holdings: Mapping[str, Holding]) -> TradingLimits:
        return TradingLimits(
            can_buy_today=self.can_buy_today,
            max_stock_types=self._max_stock_types,
            current_stock_types=len(holdings),
        )

    def _roll_day(self) -> None:
        if self._policy is not LimitResetPolicy.CALENDAR_DAY:
            return
        today = self._clock()
        if today != self._trading_day:
            logger.info("Trading day rolled over: %s -> %s", self._trading_day, today)
            self.reset_for_new_day()
