"""
Financial calculations module with precise Decimal arithmetic.

This module provides the monetary calculations used by the trading engine.
Everything works on Decimal so that cash debits and credits are exact
(``price x quantity`` with no float rounding), and only display helpers
round to cents.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

# Type alias for numeric inputs that will be converted to Decimal
NumericInput = Union[float, int, str, Decimal]

# Type alias for validated financial values (should always be Decimal)
FinancialDecimal = Decimal

CENTS = Decimal('0.01')


def to_decimal(value: NumericInput) -> FinancialDecimal:
    """
    Convert a numeric value to Decimal without rounding.

    Floats go through ``str`` so that 0.1 becomes Decimal('0.1') rather than
    its binary expansion.

    Examples:
        >>> to_decimal(170.0)
        Decimal('170.0')
        >>> to_decimal("12.3456")
        Decimal('12.3456')
    """
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money_to_decimal(value: NumericInput) -> FinancialDecimal:
    """
    Convert monetary values to Decimal rounded to cents.

    Args:
        value: The monetary value to convert (float, int, str, or Decimal)

    Returns:
        Decimal: The value as a Decimal rounded to 2 decimal places

    Examples:
        >>> money_to_decimal(10.99)
        Decimal('10.99')
        >>> money_to_decimal("15.555")
        Decimal('15.56')
    """
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_trade_value(price: NumericInput, quantity: int) -> FinancialDecimal:
    """
    Calculate the exact cash value of a trade.

    Unlike display values this is never rounded: the account is debited or
    credited by exactly this amount.

    Examples:
        >>> calculate_trade_value(Decimal('170.00'), 10)
        Decimal('1700.00')
        >>> calculate_trade_value(Decimal('12.3456'), 3)
        Decimal('37.0368')
    """
    return to_decimal(price) * quantity


def calculate_weighted_average_price(old_avg: NumericInput, old_quantity: int,
                                     price: NumericInput, quantity: int) -> FinancialDecimal:
    """
    Re-average a position after adding ``quantity`` units at ``price``.

    Args:
        old_avg: Current average price of the position
        old_quantity: Current quantity held
        price: Price of the new lot
        quantity: Quantity of the new lot

    Returns:
        Decimal: ((old_avg * old_quantity) + (price * quantity)) / (old_quantity + quantity)

    Raises:
        ZeroDivisionError: If the combined quantity is zero

    Examples:
        >>> calculate_weighted_average_price(Decimal('100'), 10, Decimal('200'), 10)
        Decimal('150')
    """
    total_quantity = old_quantity + quantity
    if total_quantity == 0:
        raise ZeroDivisionError("Total quantity cannot be zero")
    total_value = to_decimal(old_avg) * old_quantity + to_decimal(price) * quantity
    return total_value / total_quantity


def format_money(value: NumericInput) -> str:
    """Format a monetary value with thousands separators and 2 decimals."""
    return f"{money_to_decimal(value):,.2f}"
