"""
Simulated price series for one instrument.

Each PriceSeries keeps its current price and a bounded history ring. Reads
and ticks on one instrument are serialized by the instrument's own lock;
there is no locking across instruments.
"""

import logging
import random
import threading
from collections import deque
from datetime import datetime
from decimal import Decimal
from typing import Deque, List, Optional

from config.constants import (
    MAX_TICK_PERCENT, MIN_PRICE, PRICE_HISTORY_CAPACITY, PRICE_PRECISION
)
from data.models.market_data import PricePoint
from financial.calculations import NumericInput, to_decimal

logger = logging.getLogger(__name__)


class PriceSeries:
    """Current price plus recent history for a single symbol.

    Prices move by a uniform random step of at most MAX_TICK_PERCENT per tick
    and never fall below MIN_PRICE.
    """

    def __init__(self, symbol: str, name: str, initial_price: NumericInput,
                 capacity: int = PRICE_HISTORY_CAPACITY, rng: Optional[random.Random] = None):
        """Initialize the series.

        Args:
            symbol: Ticker symbol (normalised to uppercase)
            name: Display name of the instrument
            initial_price: Starting price, recorded as the first history point
            capacity: Maximum number of history points kept
            rng: Random source for ticks; a private Random() if omitted

        Raises:
            ValueError: If initial_price or capacity is not positive
        """
        price = to_decimal(initial_price)
        if price <= 0:
            raise ValueError(f"Initial price for {symbol} must be positive, got {price}")
        if capacity <= 0:
            raise ValueError("capacity must be positive")

        self.symbol = symbol.strip().upper()
        self.name = name
        self._price = price
        self._history: Deque[PricePoint] = deque(maxlen=capacity)
        self._history.append(PricePoint(price=price))
        self._rng = rng or random.Random()
        self._lock = threading.Lock()

    def current_price(self) -> Decimal:
        with self._lock:
            return self._price

    def tick(self) -> Decimal:
        """Apply one randomized step and return the new price."""
        with self._lock:
            delta = Decimal(str(self._rng.uniform(-float(MAX_TICK_PERCENT), float(MAX_TICK_PERCENT))))
            moved = (self._price * (1 + delta / 100)).quantize(PRICE_PRECISION)
            self._price = max(MIN_PRICE, moved)
            self._history.append(PricePoint(price=self._price, timestamp=datetime.now()))
            new_price = self._price

        logger.debug(f"{self.symbol} ticked {delta:+.4f}% -> {new_price}")
        return new_price

    def history(self) -> List[PricePoint]:
        """Ordered copy of the full price history, oldest first."""
        with self._lock:
            return list(self._history)

    def recent_history(self, count: int) -> List[PricePoint]:
        """Last ``count`` history points, oldest first."""
        if count <= 0:
            return []
        with self._lock:
            points = list(self._history)
        return points[-count:]

    def __repr__(self) -> str:
        return f"PriceSeries(symbol={self.symbol!r}, price={self.current_price()})"
