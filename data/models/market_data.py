"""Market data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class PricePoint:
    """One (timestamp, price) entry in an instrument's price history."""
    price: Decimal
    timestamp: datetime = field(default_factory=datetime.now)
