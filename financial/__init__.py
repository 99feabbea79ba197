"""
Financial calculations and account handling for the trading platform.

This module provides precise financial calculations using Decimal arithmetic
to avoid floating-point precision issues in monetary calculations. The
per-user cash Account lives in financial.account.
"""

from .calculations import (
    to_decimal,
    money_to_decimal,
    calculate_trade_value,
    calculate_weighted_average_price,
    format_money
)

__all__ = [
    # Calculations
    'to_decimal',
    'money_to_decimal',
    'calculate_trade_value',
    'calculate_weighted_average_price',
    'format_money'
]
