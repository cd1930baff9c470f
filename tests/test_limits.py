"""Tests for the trading limits gate."""

from datetime import date, timedelta

from daily_trader.config import LimitResetPolicy
from daily_trader.domain.models import Holding
from daily_trader.market.catalog import default_catalog
from daily_trader.trading.limits import LimitViolation, TradingLimitsGate


def _holdings(count: int) -> dict[str, Holding]:
    catalog = default_catalog()
    return {
        i.id: Holding(instrument=i, quantity=1, avg_price=i.price) for i in catalog[:count]
    }


class FakeClock:
    def __init__(self, today: date) -> None:
        self.today = today

    def __call__(self) -> date:
        return self.today


class TestCheck:
    def test_allowed_initially(self):
        gate = TradingLimitsGate(max_stock_types=5)
        check = gate.check("1", {})
        assert check.allowed
        assert check.violation is None

    def test_daily_limit_after_purchase(self):
        gate = TradingLimitsGate(max_stock_types=5)
        gate.record_purchase()
        check = gate.check("1", {})
        assert not check.allowed
        assert check.violation is LimitViolation.DAILY_LIMIT

    def test_too_many_types_for_new_instrument(self):
        gate = TradingLimitsGate(max_stock_types=5)
        check = gate.check("6", _holdings(5))
        assert not check.allowed
        assert check.violation is LimitViolation.TOO_MANY_TYPES
        assert "5" in check.reason

    def test_existing_instrument_ignores_type_cap(self):
        gate = TradingLimitsGate(max_stock_types=5)
        assert gate.check("1", _holdings(5)).allowed

    def test_daily_limit_wins_over_type_cap(self):
        gate = TradingLimitsGate(max_stock_types=5)
        gate.record_purchase()
        check = gate.check("6", _holdings(5))
        assert check.violation is LimitViolation.DAILY_LIMIT


class TestResets:
    def test_reset_for_new_day(self):
        gate = TradingLimitsGate(max_stock_types=5)
        gate.record_purchase()
        gate.reset_for_new_day()
        assert gate.can_buy_today

    def test_login_policy_rearms_on_login(self):
        gate = TradingLimitsGate(max_stock_types=5, policy=LimitResetPolicy.LOGIN)
        gate.record_purchase()
        gate.reset_on_login()
        assert gate.can_buy_today

    def test_calendar_policy_ignores_login(self):
        clock = FakeClock(date(2024, 1, 1))
        gate = TradingLimitsGate(
            max_stock_types=5, policy=LimitResetPolicy.CALENDAR_DAY, clock=clock
        )
        gate.record_purchase()
        gate.reset_on_login()
        assert not gate.can_buy_today

    def test_calendar_policy_rolls_over_at_midnight(self):
        clock = FakeClock(date(2024, 1, 1))
        gate = TradingLimitsGate(
            max_stock_types=5, policy=LimitResetPolicy.CALENDAR_DAY, clock=clock
        )
        gate.record_purchase()
        assert not gate.check("1", {}).allowed

        clock.today += timedelta(days=1)
        assert gate.check("1", {}).allowed

    def test_login_policy_does_not_roll_over(self):
        clock = FakeClock(date(2024, 1, 1))
        gate = TradingLimitsGate(max_stock_types=5, clock=clock)
        gate.record_purchase()
        clock.today += timedelta(days=1)
        assert not gate.can_buy_today


class TestSnapshot:
    def test_snapshot_counts_holdings(self):
        gate = TradingLimitsGate(max_stock_types=5)
        gate.record_purchase()
        limits = gate.snapshot(_holdings(3))
        assert limits.can_buy_today is False
        assert limits.max_stock_types == 5
        assert limits.current_stock_types == 3
