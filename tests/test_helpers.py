"""
Test helper functions for building markets, exchanges and deterministic
random sources.
"""

import sys
import time
from decimal import Decimal
from pathlib import Path
from typing import Callable

sys.path.insert(0, str(Path(__file__).parent.parent))

from data.repositories.memory_repository import InMemoryRepository
from market_data.market import Market
from market_data.price_series import PriceSeries
from portfolio.exchange import Exchange


class FixedRandom:
    """Stand-in random source whose uniform() always returns the same value."""

    def __init__(self, value: float):
        self.value = value

    def uniform(self, a, b):
        return self.value


def create_market(**prices) -> Market:
    """Create a market with the given symbol=price instruments.

    Returns:
        Market with AAPL at 170.00 when no prices are given
    """
    if not prices:
        prices = {'AAPL': '170.00'}
    return Market(PriceSeries(symbol, f"{symbol} Corp.", price) for symbol, price in prices.items())


def create_exchange(market: Market = None, repository=None,
                    starting_cash: Decimal = Decimal('10000.00')) -> Exchange:
    """Create an exchange backed by an in-memory repository."""
    return Exchange(
        market or create_market(),
        repository if repository is not None else InMemoryRepository(),
        starting_cash,
    )


def wait_for(condition: Callable[[], bool], timeout: float = 3.0, interval: float = 0.02) -> bool:
    """Poll ``condition`` until it is true or ``timeout`` seconds pass."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        if condition():
            return True
        time.sleep(interval)
    return condition()
