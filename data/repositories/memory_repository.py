"""In-memory repository implementation.

Keeps the same record formats as the CSV repository but never touches the
filesystem. Used when persistence is disabled and in tests.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional, Tuple
import logging

from config.constants import PRICE_HISTORY_EXPORT_TEMPLATE, VALUATION_EXPORT_TEMPLATE
from .base_repository import BaseRepository
from .csv_repository import sanitize_file_component
from ..models.market_data import PricePoint
from ..models.portfolio import Holding, ValuationSnapshot
from ..models.trade import TransactionRecord

logger = logging.getLogger(__name__)


class InMemoryRepository(BaseRepository):
    """Persistence sink that stores record lines in memory."""

    def __init__(self):
        self.transaction_lines: List[str] = []
        self.holdings_dump: List[str] = []
        self.exports: Dict[str, List[Tuple[str, str]]] = {}
        self._lock = threading.Lock()

    def append_transaction(self, record: TransactionRecord) -> None:
        with self._lock:
            self.transaction_lines.append(record.to_csv_line())

    def get_transactions(self, user_id: Optional[str] = None) -> List[TransactionRecord]:
        with self._lock:
            lines = list(self.transaction_lines)
        records = [TransactionRecord.from_csv_line(line) for line in lines]
        if user_id is not None:
            records = [r for r in records if r.user_id == user_id]
        return records

    def dump_holdings(self, accounts: Iterable) -> None:
        lines = self.holdings_lines(accounts)
        with self._lock:
            self.holdings_dump = lines
        logger.debug(f"Stored {len(lines)} holdings in memory")

    def load_holdings(self) -> List[Tuple[str, Holding]]:
        with self._lock:
            lines = list(self.holdings_dump)
        entries = []
        for line in lines:
            try:
                entries.append(Holding.from_csv_line(line))
            except ValueError as e:
                logger.warning(f"Skipping malformed holdings line: {e}")
        return entries

    def export_price_history(self, symbol: str, points: List[PricePoint]) -> str:
        name = PRICE_HISTORY_EXPORT_TEMPLATE.format(symbol=sanitize_file_component(symbol.upper()))
        with self._lock:
            self.exports[name] = [(p.timestamp.isoformat(), str(p.price)) for p in points]
        return name

    def export_valuation_history(self, user_id: str, snapshots: List[ValuationSnapshot]) -> str:
        name = VALUATION_EXPORT_TEMPLATE.format(user_id=sanitize_file_component(user_id))
        with self._lock:
            self.exports[name] = [(s.timestamp.isoformat(), str(s.total_value)) for s in snapshots]
        return name
