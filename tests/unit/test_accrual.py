"""
Unit tests for staking and vesting reward accrual
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from gamewallet.core.exceptions import InvalidSelection
from gamewallet.services.accrual import (
    accrual_window,
    accrue_rewards,
    daily_reward,
    elapsed_days,
    period_days,
    projected_return,
)

START = datetime(2026, 1, 1, tzinfo=timezone.utc)


class TestLinearAccrual:
    def test_full_year_at_ten_percent(self):
        assert accrue_rewards(Decimal("1000"), Decimal("10"), Decimal("365")) == Decimal("100")

    def test_partial_year(self):
        # 1000 * 36.5% / 365 = 1 per day
        assert accrue_rewards("1000", "36.5", "10") == Decimal("10")

    def test_fractional_days(self):
        assert accrue_rewards("1000", "36.5", "0.5") == Decimal("0.5")

    @pytest.mark.parametrize("elapsed", ["0", "-3"])
    def test_no_time_no_reward(self, elapsed):
        assert accrue_rewards("1000", "10", elapsed) == Decimal("0")

    def test_rounds_down_to_ledger_precision(self):
        rewards = accrue_rewards("1000", "8.5", "30")
        assert rewards == Decimal("6.98630136")

    @pytest.mark.parametrize("principal,apy,days,expected", [
        ("1000", "3.9", "365", "39"),
        ("2500", "7.3", "365", "182.5"),
        ("123.45", "4.2", "365", "5.1849"),
        ("0.5", "12.7", "365", "0.0635"),
        ("1000", "5.5", "730", "110"),
        ("3", "2.1", "365", "0.063"),
    ])
    def test_whole_years_pay_exact_apy(self, principal, apy, days, expected):
        assert accrue_rewards(principal, apy, days) == Decimal(expected)

    def test_daily_reward_matches_one_day_of_accrual(self):
        assert daily_reward("1000", "3.9") == accrue_rewards("1000", "3.9", "1")


class TestCompoundingAccrual:
    """Daily rate 0.001 (36.5% APY) keeps the expected values exact"""

    def test_daily(self):
        assert accrue_rewards("1000", "36.5", "2", frequency="daily", compound=True) == Decimal("2.001")

    def test_weekly_whole_periods(self):
        # 1000 * 1.007^2
        assert accrue_rewards("1000", "36.5", "14", frequency="weekly", compound=True) == Decimal("14.049")

    def test_weekly_with_partial_period(self):
        # one week compounds to 1007, then three linear days on 1007
        assert accrue_rewards("1000", "36.5", "10", frequency="weekly", compound=True) == Decimal("10.021")

    def test_monthly_single_period_matches_linear(self):
        assert accrue_rewards("1000", "36.5", "30", frequency="monthly", compound=True) == Decimal("30")

    def test_compounding_beats_linear(self):
        linear = accrue_rewards("1000", "12", "365")
        compounded = accrue_rewards("1000", "12", "365", frequency="daily", compound=True)
        assert compounded > linear

    def test_unknown_frequency(self):
        with pytest.raises(InvalidSelection):
            accrue_rewards("1000", "10", "30", frequency="hourly", compound=True)


class TestAccrualWindow:
    def test_elapsed_days(self):
        assert elapsed_days(START, START + timedelta(days=3, hours=12)) == Decimal("3.5")

    def test_elapsed_never_negative(self):
        assert elapsed_days(START, START - timedelta(days=1)) == Decimal("0")

    def test_naive_datetimes_are_utc(self):
        naive_end = datetime(2026, 1, 2)
        assert elapsed_days(START, naive_end) == Decimal("1")

    def test_window_stops_at_end_date(self):
        end = START + timedelta(days=30)
        assert accrual_window(START, end, START + timedelta(days=45)) == Decimal("30")

    def test_open_ended_window(self):
        assert accrual_window(START, None, START + timedelta(days=45)) == Decimal("45")

    def test_period_days(self):
        assert period_days("daily") == Decimal("1")
        assert period_days("weekly") == Decimal("7")
        assert period_days("monthly") == Decimal("30")


class TestProjections:
    def test_one_year_projection(self):
        compounded, profit = projected_return("1000", "10", 365)
        assert compounded == Decimal("1100")
        assert profit == Decimal("100")

    def test_zero_lock(self):
        compounded, profit = projected_return("1000", "10", 0)
        assert compounded == Decimal("1000")
        assert profit == Decimal("0")

    def test_half_year_is_below_linear_half(self):
        compounded, profit = projected_return("1000", "10", 182)
        assert Decimal("0") < profit < Decimal("50")

    def test_daily_reward(self):
        assert daily_reward("3650", "10") == Decimal("1")
