"""
Unit tests for console table rendering.
"""

import io
import unittest
from datetime import datetime
from decimal import Decimal
from unittest.mock import patch
import sys
from pathlib import Path

# Add the parent directory to the path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console

from data.models.market_data import PricePoint
from data.models.portfolio import ValuationSnapshot
from display import console_output
from display.table_formatter import TableFormatter


class TestRichTables(unittest.TestCase):
    """Render into a recording console and check the text."""

    def setUp(self):
        self.buffer = io.StringIO()
        self.formatter = TableFormatter(Console(file=self.buffer, width=120, color_system=None))

    def output(self):
        return self.buffer.getvalue()

    def test_market_table(self):
        self.formatter.create_market_table([
            {'symbol': 'AAPL', 'name': 'Apple Inc.', 'price': Decimal('170.1234')},
        ])
        self.assertIn("AAPL", self.output())
        self.assertIn("170.1234", self.output())

    def test_holdings_table_unlisted_symbol(self):
        self.formatter.create_holdings_table("alice", [
            {'symbol': 'AAPL', 'quantity': 10, 'avg_price': Decimal('170'),
             'current_price': Decimal('171'), 'market_value': Decimal('1710')},
            {'symbol': 'GONE', 'quantity': 1, 'avg_price': Decimal('5'),
             'current_price': None, 'market_value': None},
        ])
        self.assertIn("$1,710.00", self.output())
        self.assertIn("N/A", self.output())

    def test_empty_holdings(self):
        with patch('display.table_formatter.print_info') as mock_info:
            self.formatter.create_holdings_table("alice", [])
        mock_info.assert_called_once()
        self.assertEqual(self.output(), "")

    def test_history_and_valuation_tables(self):
        when = datetime(2024, 1, 2, 9, 30, 0)
        self.formatter.create_price_history_table("AAPL", [PricePoint(Decimal('170'), when)])
        self.formatter.create_valuation_table("alice", [ValuationSnapshot(Decimal('8200'), when)])
        self.assertEqual(self.output().count("2024-01-02 09:30:00"), 2)
        self.assertIn("$8,200.00", self.output())

    def test_summary_table(self):
        self.formatter.create_summary_table("alice", {
            'cash': Decimal('9380'), 'holdings_value': Decimal('620'), 'total_value': Decimal('10000'),
        })
        self.assertIn("$10,000.00", self.output())


class TestColoramaFallback(unittest.TestCase):
    """Plain colored text when Rich output is switched off."""

    def setUp(self):
        console_output.set_colorama_only(True)
        self.addCleanup(console_output.set_colorama_only, False)

    def test_summary_printed_as_text(self):
        formatter = TableFormatter()
        with patch('sys.stdout', new_callable=io.StringIO) as stdout:
            formatter.create_summary_table("alice", {
                'cash': Decimal('1'), 'holdings_value': Decimal('2'), 'total_value': Decimal('3'),
            })
        self.assertIn("Total Value: $3.00", stdout.getvalue())
        self.assertFalse(console_output.has_rich_support())


if __name__ == '__main__':
    unittest.main()
