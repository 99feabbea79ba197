"""Per-user holdings ledger.

The Ledger owns one user's holdings and the history of periodic valuation
snapshots. Every public method runs under the ledger's own lock, so two
ledgers never block each other.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import datetime
from decimal import Decimal
from typing import Deque, Dict, List, Optional

from config.constants import VALUATION_HISTORY_CAPACITY
from data.models.portfolio import Holding, ValuationSnapshot
from financial.calculations import calculate_weighted_average_price, to_decimal

logger = logging.getLogger(__name__)


class Ledger:
    """Holdings map plus bounded valuation history for one user."""

    def __init__(self, user_id: str, history_capacity: int = VALUATION_HISTORY_CAPACITY):
        """Initialize an empty ledger.

        Args:
            user_id: Owning user id
            history_capacity: Maximum number of valuation snapshots kept
        """
        if history_capacity <= 0:
            raise ValueError("history_capacity must be positive")
        self.user_id = user_id
        self._holdings: Dict[str, Holding] = {}
        self._valuations: Deque[ValuationSnapshot] = deque(maxlen=history_capacity)
        self._lock = threading.Lock()

    def buy(self, symbol: str, quantity: int, price: Decimal) -> Holding:
        """Add ``quantity`` units bought at ``price``.

        Creates the holding if absent, otherwise re-averages the cost basis.

        Returns:
            Copy of the resulting holding

        Raises:
            ValueError: If quantity or price is not positive (or price not finite)
        """
        if quantity <= 0:
            raise ValueError(f"Buy quantity must be positive, got {quantity}")
        price = to_decimal(price)
        if not price.is_finite() or price <= 0:
            raise ValueError(f"Buy price must be positive, got {price}")
        symbol = symbol.upper()

        with self._lock:
            holding = self._holdings.get(symbol)
            if holding is None:
                holding = Holding(symbol=symbol, quantity=quantity, avg_price=price)
                self._holdings[symbol] = holding
            else:
                holding.avg_price = calculate_weighted_average_price(
                    holding.avg_price, holding.quantity, price, quantity
                )
                holding.quantity += quantity
            result = holding.copy()

        logger.debug(f"{self.user_id}: holding {symbol} now {result.quantity} @ {result.avg_price}")
        return result

    def sell(self, symbol: str, quantity: int) -> bool:
        """Remove ``quantity`` units of ``symbol``.

        Returns:
            True on success; False (and no change) if the holding is absent or
            smaller than ``quantity``
        """
        if quantity <= 0:
            return False
        symbol = symbol.upper()

        with self._lock:
            holding = self._holdings.get(symbol)
            if holding is None or holding.quantity < quantity:
                return False
            holding.quantity -= quantity
            if holding.quantity == 0:
                del self._holdings[symbol]
        return True

    def get_holding(self, symbol: str) -> Optional[Holding]:
        with self._lock:
            holding = self._holdings.get(symbol.upper())
            return holding.copy() if holding else None

    def holdings_snapshot(self) -> Dict[str, Holding]:
        """Point-in-time copy of the holdings map."""
        with self._lock:
            return {symbol: holding.copy() for symbol, holding in self._holdings.items()}

    def record_valuation(self, total_value: Decimal, timestamp: Optional[datetime] = None) -> ValuationSnapshot:
        """Append a valuation snapshot, evicting the oldest past capacity."""
        snapshot = ValuationSnapshot(
            total_value=to_decimal(total_value),
            timestamp=timestamp or datetime.now(),
        )
        with self._lock:
            self._valuations.append(snapshot)
        return snapshot

    def valuation_history(self) -> List[ValuationSnapshot]:
        with self._lock:
            return list(self._valuations)

    def __repr__(self) -> str:
        return f"Ledger(user_id={self.user_id!r}, holdings={len(self._holdings)})"
