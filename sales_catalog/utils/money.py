"""Monetary helpers. Amounts are Decimals with two decimal places."""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

CENT = Decimal('0.01')
ZERO = Decimal('0.00')
HUNDRED = Decimal('100')


def to_money(value: Union[Decimal, int, str, float, None]) -> Decimal:
    """
    Quantize a value to cents (half-up).

    Floats go through str() so that 5.1 becomes Decimal('5.10'), not its
    binary expansion.

    Raises:
        ValueError: if the value is not numeric.
    """
    if value is None:
        return ZERO
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f'Invalid monetary amount: {value!r}')
    if not amount.is_finite():
        raise ValueError(f'Invalid monetary amount: {value!r}')
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def percentage_of(amount: Decimal, percentage: Union[Decimal, int, str]) -> Decimal:
    """amount × percentage / 100, rounded to cents."""
    return to_money(amount * Decimal(str(percentage)) / HUNDRED)
