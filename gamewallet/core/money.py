"""
Decimal helpers for ledger amounts and odds
"""

from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Any

from gamewallet.core.config import settings
from gamewallet.core.exceptions import InvalidAmount, InvalidSelection

# Decimal precision for balances, payouts and odds
DECIMAL_PRECISION = Decimal("0.00000001")


def quantize(value: Decimal) -> Decimal:
    """Round down to ledger precision; the house never pays a fraction it does not hold."""
    return Decimal(value).quantize(DECIMAL_PRECISION, rounding=ROUND_DOWN)


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmount(f"Invalid amount: {value!r}")


def validate_amount(value: Any) -> Decimal:
    """Parse a strictly positive amount with at most 8 decimal places."""
    amount = to_decimal(value)
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmount("Amount must be positive", amount=str(value))
    if amount != amount.quantize(DECIMAL_PRECISION, rounding=ROUND_DOWN):
        raise InvalidAmount("Amount has more than 8 decimal places", amount=str(value))
    return amount


def validate_odds(value: Any) -> Decimal:
    odds = to_decimal(value)
    if not odds.is_finite() or odds < 1:
        raise InvalidAmount("Odds must be at least 1", odds=str(value))
    return quantize(odds)


def validate_currency(currency: str) -> str:
    code = (currency or "").upper()
    if code not in settings.supported_currencies:
        raise InvalidSelection(f"Unsupported currency: {currency}")
    return code
