"""
Reward accrual math for staking and vesting positions.

Everything here is a pure function of its arguments; the same code drives
live balances, projections and final settlement.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Tuple

from gamewallet.core.clock import as_utc
from gamewallet.core.exceptions import InvalidSelection
from gamewallet.core.money import quantize, to_decimal
from gamewallet.models.enums import CompoundingFrequency

DAYS_PER_YEAR = Decimal("365")
SECONDS_PER_DAY = Decimal("86400")
# apy is a percentage: one day of rewards is principal * apy / PERCENT_DAYS
PERCENT_DAYS = Decimal("100") * DAYS_PER_YEAR

PERIOD_DAYS = {
    CompoundingFrequency.DAILY: Decimal("1"),
    CompoundingFrequency.WEEKLY: Decimal("7"),
    CompoundingFrequency.MONTHLY: Decimal("30"),
}


def period_days(frequency: Any) -> Decimal:
    try:
        return PERIOD_DAYS[CompoundingFrequency(frequency)]
    except ValueError:
        raise InvalidSelection(f"Unknown compounding frequency: {frequency}")


def elapsed_days(start: datetime, end: datetime) -> Decimal:
    """Whole and fractional days between two instants, never negative."""
    seconds = (as_utc(end) - as_utc(start)).total_seconds()
    if seconds <= 0:
        return Decimal("0")
    return Decimal(str(seconds)) / SECONDS_PER_DAY


def accrue_rewards(
    principal: Any,
    apy: Any,
    elapsed: Any,
    frequency: Any = CompoundingFrequency.DAILY,
    compound: bool = False,
) -> Decimal:
    """
    Rewards earned on ``principal`` after ``elapsed`` days.

    Without compounding the reward is linear: principal * apy * days / 36500.
    With compounding, each whole period adds its reward to the base of the
    next one; the trailing partial period accrues linearly on that base.
    Division comes last so whole-year terms land exactly on principal * apy/100.

    Args:
        principal: Amount locked in the position
        apy: Annual percentage yield, e.g. 10 for 10%
        elapsed: Days since the position opened (may be fractional)
        frequency: daily, weekly or monthly compounding period
        compound: Whether rewards are added to the base each period

    Returns:
        Earned rewards, rounded down to ledger precision
    """
    principal = to_decimal(principal)
    days = to_decimal(elapsed)
    if days <= 0 or principal <= 0:
        return Decimal("0")

    apy = to_decimal(apy)

    if not compound:
        return quantize(principal * apy * days / PERCENT_DAYS)

    period = period_days(frequency)
    whole_periods = int(days // period)
    remainder = days - period * whole_periods

    growth = (PERCENT_DAYS + apy * period) ** whole_periods * (PERCENT_DAYS + apy * remainder)
    total = principal * growth / PERCENT_DAYS ** (whole_periods + 1)
    return quantize(total - principal)


def accrual_window(start: datetime, end: Optional[datetime], now: datetime) -> Decimal:
    """Elapsed days that count for accrual: accrual stops at ``end`` when there is one."""
    stop = as_utc(now)
    if end is not None and as_utc(end) < stop:
        stop = as_utc(end)
    return elapsed_days(start, stop)


def daily_reward(amount: Any, apy: Any) -> Decimal:
    return quantize(to_decimal(amount) * to_decimal(apy) / PERCENT_DAYS)


def projected_return(amount: Any, apy: Any, lock_days: int) -> Tuple[Decimal, Decimal]:
    """
    Compounded amount and profit at the end of the lock:
    amount * (1 + apy/100) ** (lock_days / 365).
    """
    amount = to_decimal(amount)
    years = Decimal(lock_days) / DAYS_PER_YEAR
    compounded = amount * (Decimal("1") + to_decimal(apy) / Decimal("100")) ** years
    compounded = quantize(compounded)
    return compounded, compounded - quantize(amount)
