"""Trade data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from .portfolio import parse_price_field


@dataclass(frozen=True)
class TransactionRecord:
    """Represents a single executed buy or sell.

    Records are immutable once created. The quantity is signed: positive
    for a buy, negative for a sell. Serialized as one line of the
    append-only transaction log:

        userId,symbol,signedQuantity,price,isoTimestamp
    """
    user_id: str
    symbol: str
    quantity: int
    price: Decimal
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        # frozen dataclass, so normalise through object.__setattr__
        object.__setattr__(self, 'symbol', self.symbol.upper())
        if not isinstance(self.price, Decimal):
            object.__setattr__(self, 'price', Decimal(str(self.price)))

    @property
    def notional(self) -> Decimal:
        """Absolute cash value moved by this transaction (price x |quantity|)."""
        return self.price * abs(self.quantity)

    def to_csv_line(self) -> str:
        """Format as a transaction log line (without the trailing newline)."""
        return ",".join([
            self.user_id,
            self.symbol,
            str(self.quantity),
            str(self.price),
            self.timestamp.isoformat(),
        ])

    @classmethod
    def from_csv_line(cls, line: str) -> TransactionRecord:
        """Parse a transaction log line.

        Args:
            line: One line of the transaction log

        Returns:
            TransactionRecord instance

        Raises:
            ValueError: If the line does not have five parseable fields
        """
        parts = line.rstrip('\r\n').split(',')
        if len(parts) < 5:
            raise ValueError(f"Expected 5 fields in transaction line, got {len(parts)}: {line!r}")
        price = parse_price_field(parts[3], "price in transaction line")
        return cls(
            user_id=parts[0],
            symbol=parts[1],
            quantity=int(parts[2]),
            price=price,
            timestamp=datetime.fromisoformat(parts[4]),
        )

