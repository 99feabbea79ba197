"""
Unit tests for financial calculations module.

Tests cover precision, edge cases, and various input types to ensure
accurate financial calculations using Decimal arithmetic.
"""

import unittest
from decimal import Decimal
import sys
from pathlib import Path

# Add the parent directory to the path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from financial.calculations import (
    to_decimal,
    money_to_decimal,
    calculate_trade_value,
    calculate_weighted_average_price,
    format_money
)


class TestToDecimal(unittest.TestCase):
    """Test to_decimal function."""

    def test_float_goes_through_str(self):
        self.assertEqual(to_decimal(0.1), Decimal('0.1'))
        self.assertEqual(to_decimal(170.0), Decimal('170.0'))

    def test_no_rounding(self):
        self.assertEqual(to_decimal("12.345678"), Decimal('12.345678'))

    def test_decimal_passthrough(self):
        value = Decimal('1.23')
        self.assertIs(to_decimal(value), value)


class TestMoneyToDecimal(unittest.TestCase):
    """Test money_to_decimal function."""

    def test_float_input(self):
        """Test conversion from float."""
        self.assertEqual(money_to_decimal(10.99), Decimal('10.99'))
        self.assertEqual(money_to_decimal(1000.0), Decimal('1000.00'))

    def test_rounding_half_up(self):
        self.assertEqual(money_to_decimal("15.555"), Decimal('15.56'))
        self.assertEqual(money_to_decimal("15.554"), Decimal('15.55'))

    def test_int_input(self):
        self.assertEqual(money_to_decimal(100), Decimal('100.00'))
        self.assertEqual(money_to_decimal(-50), Decimal('-50.00'))


class TestTradeValue(unittest.TestCase):
    """Test calculate_trade_value function."""

    def test_exact_value(self):
        self.assertEqual(calculate_trade_value(Decimal('170.00'), 10), Decimal('1700.00'))
        self.assertEqual(calculate_trade_value(Decimal('12.3456'), 3), Decimal('37.0368'))

    def test_not_rounded_to_cents(self):
        self.assertNotEqual(calculate_trade_value(Decimal('0.0001'), 1), Decimal('0.00'))


class TestWeightedAveragePrice(unittest.TestCase):
    """Test average price re-calculation after a buy."""

    def test_equal_lots(self):
        self.assertEqual(
            calculate_weighted_average_price(Decimal('100'), 10, Decimal('200'), 10),
            Decimal('150')
        )

    def test_first_lot(self):
        self.assertEqual(
            calculate_weighted_average_price(Decimal('0'), 0, Decimal('42.5'), 4),
            Decimal('42.5')
        )

    def test_uneven_lots(self):
        self.assertEqual(
            calculate_weighted_average_price(Decimal('10'), 3, Decimal('20'), 1),
            Decimal('12.5')
        )

    def test_zero_total_quantity(self):
        with self.assertRaises(ZeroDivisionError):
            calculate_weighted_average_price(Decimal('10'), 0, Decimal('20'), 0)

    def test_incremental_matches_batch_average(self):
        fills = [(Decimal('10'), 3), (Decimal('12.5'), 1), (Decimal('9'), 6)]
        avg, qty = Decimal('0'), 0
        for price, quantity in fills:
            avg = calculate_weighted_average_price(avg, qty, price, quantity)
            qty += quantity
        self.assertEqual(avg, Decimal('9.65'))


class TestDisplayHelpers(unittest.TestCase):
    """Test format_money."""

    def test_format_money(self):
        self.assertEqual(format_money(Decimal('8300')), "8,300.00")
        self.assertEqual(format_money("1234567.891"), "1,234,567.89")


if __name__ == '__main__':
    unittest.main()
