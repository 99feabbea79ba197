"""
Unit tests for the market registry and auto-ticking.
"""

import random
import time
import unittest
from decimal import Decimal
import sys
from pathlib import Path

# Add the parent directory to the path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.constants import DEFAULT_INSTRUMENTS
from market_data.market import Market
from market_data.price_series import PriceSeries
from test_helpers import wait_for


class TestMarketRegistry(unittest.TestCase):
    """Test instrument registration and lookup."""

    def setUp(self):
        self.market = Market()
        self.aapl = PriceSeries("AAPL", "Apple Inc.", "170.00")
        self.msft = PriceSeries("MSFT", "Microsoft Corp.", "310.00")
        self.market.register(self.aapl)
        self.market.register(self.msft)

    def test_lookup_is_case_insensitive(self):
        self.assertIs(self.market.lookup("aapl"), self.aapl)
        self.assertIs(self.market.lookup(" MSFT "), self.msft)
        self.assertIn("msft", self.market)

    def test_lookup_unknown(self):
        self.assertIsNone(self.market.lookup("ZZZZ"))
        self.assertIsNone(self.market.lookup(""))

    def test_list_all_in_registration_order(self):
        self.assertEqual([s.symbol for s in self.market.list_all()], ["AAPL", "MSFT"])
        self.assertEqual(len(self.market), 2)

    def test_duplicate_registration_rejected(self):
        with self.assertRaises(ValueError):
            self.market.register(PriceSeries("aapl", "Apple again", "1.00"))
        self.assertIs(self.market.lookup("AAPL"), self.aapl)

    def test_from_configs_seeds_default_instruments(self):
        market = Market.from_configs(DEFAULT_INSTRUMENTS)
        self.assertEqual([s.symbol for s in market.list_all()],
                         ["AAPL", "GOOGL", "MSFT", "TSLA", "INFY"])
        self.assertEqual(market.lookup("INFY").current_price(), Decimal('22.00'))
        self.assertEqual(market.lookup("GOOGL").name, "Alphabet Inc.")


class TestMarketTicking(unittest.TestCase):
    """Test tick cycles and the auto-tick job."""

    def setUp(self):
        self.market = Market([
            PriceSeries("AAPL", "Apple Inc.", "170.00", rng=random.Random(1)),
            PriceSeries("TSLA", "Tesla Inc.", "250.00", rng=random.Random(2)),
        ])

    def tearDown(self):
        self.market.stop()

    def test_tick_all(self):
        self.assertEqual(self.market.tick_all(), 2)
        for series in self.market.list_all():
            self.assertEqual(len(series.history()), 2)

    def test_stop_before_start_is_noop(self):
        self.market.stop()
        self.market.stop()
        self.assertFalse(self.market.is_ticking)

    def test_auto_tick_updates_prices(self):
        self.assertTrue(self.market.start_auto_tick(0.05))
        self.assertTrue(self.market.is_ticking)
        aapl = self.market.lookup("AAPL")
        self.assertTrue(wait_for(lambda: len(aapl.history()) >= 3))

    def test_start_twice_returns_false(self):
        self.assertTrue(self.market.start_auto_tick(0.5))
        self.assertFalse(self.market.start_auto_tick(0.5))

    def test_stop_prevents_future_ticks(self):
        self.market.start_auto_tick(0.05)
        aapl = self.market.lookup("AAPL")
        self.assertTrue(wait_for(lambda: len(aapl.history()) >= 2))

        self.market.stop()
        self.assertFalse(self.market.is_ticking)
        count = len(aapl.history())
        time.sleep(0.3)
        self.assertEqual(len(aapl.history()), count)

    def test_invalid_interval(self):
        with self.assertRaises(ValueError):
            self.market.start_auto_tick(0)
        self.assertFalse(self.market.is_ticking)


if __name__ == '__main__':
    unittest.main()
