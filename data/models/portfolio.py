"""Portfolio data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation


def parse_price_field(raw: str, context: str) -> Decimal:
    """Parse a price column from a record line.

    Raises:
        ValueError: If the text is not a finite decimal number
    """
    try:
        value = Decimal(raw)
    except InvalidOperation as e:
        raise ValueError(f"Invalid {context}: {raw!r}") from e
    # NaN, sNaN and Infinity parse but cannot be compared or valued
    if not value.is_finite():
        raise ValueError(f"Non-finite {context}: {raw!r}")
    return value


@dataclass
class Holding:
    """Represents a position in one instrument.

    The average price is the volume-weighted average of all buys; sells
    reduce the quantity but leave the average untouched. A holding only
    exists while its quantity is positive.
    """
    symbol: str
    quantity: int
    avg_price: Decimal

    def __post_init__(self):
        """Normalise symbol and convert price to Decimal."""
        self.symbol = self.symbol.upper()
        if not isinstance(self.avg_price, Decimal):
            self.avg_price = Decimal(str(self.avg_price))

    def market_value(self, price: Decimal) -> Decimal:
        """Value of this holding at the given price."""
        return price * self.quantity

    def copy(self) -> Holding:
        return Holding(symbol=self.symbol, quantity=self.quantity, avg_price=self.avg_price)

    def to_csv_line(self, user_id: str) -> str:
        """Format as a holdings dump line: userId,symbol,quantity,avgPrice."""
        return ",".join([user_id, self.symbol, str(self.quantity), str(self.avg_price)])

    @classmethod
    def from_csv_line(cls, line: str) -> tuple[str, Holding]:
        """Parse a holdings dump line.

        Args:
            line: One line of the holdings dump

        Returns:
            Tuple of (user_id, Holding)

        Raises:
            ValueError: If the line is malformed
        """
        parts = line.rstrip('\r\n').split(',')
        if len(parts) < 4:
            raise ValueError(f"Expected 4 fields in holdings line, got {len(parts)}: {line!r}")
        avg_price = parse_price_field(parts[3], "average price in holdings line")
        return parts[0], cls(symbol=parts[1], quantity=int(parts[2]), avg_price=avg_price)


@dataclass(frozen=True)
class ValuationSnapshot:
    """A timestamped total-portfolio-value record (cash + holdings)."""
    total_value: Decimal
    timestamp: datetime = field(default_factory=datetime.now)
