"""CSV-based repository implementation."""

from __future__ import annotations

import os
import re
import threading
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Tuple
import pandas as pd
import logging

from config.constants import (
    DEFAULT_DATA_DIR,
    HOLDINGS_DUMP_NAME,
    PRICE_HISTORY_EXPORT_COLUMNS,
    PRICE_HISTORY_EXPORT_TEMPLATE,
    TRANSACTION_LOG_COLUMNS,
    TRANSACTION_LOG_NAME,
    VALUATION_EXPORT_COLUMNS,
    VALUATION_EXPORT_TEMPLATE,
)
from .base_repository import BaseRepository, RepositoryError, PersistenceWriteError
from ..models.market_data import PricePoint
from ..models.portfolio import Holding, ValuationSnapshot, parse_price_field
from ..models.trade import TransactionRecord

logger = logging.getLogger(__name__)


def sanitize_file_component(value: str) -> str:
    """Replace anything that is not a letter or digit with an underscore."""
    return re.sub(r'[^a-zA-Z0-9]', '_', value)


class CSVRepository(BaseRepository):
    """CSV-based implementation of the persistence sink.

    Files (inside ``data_directory``):
        transactions.csv  userId,symbol,signedQuantity,price,isoTimestamp (append-only)
        portfolios.csv    userId,symbol,quantity,avgPrice (full rewrite on each dump)

    Fields are joined with commas without quoting, so ids containing commas
    cannot be read back reliably. All writes are serialized by one lock per
    repository so records never interleave.
    """

    def __init__(self, data_directory: Optional[str] = None):
        """Initialize CSV repository.

        Args:
            data_directory: Optional directory for the CSV files (defaults to trading_data)
        """
        self.data_dir = Path(data_directory or DEFAULT_DATA_DIR)
        self.transaction_log_file = self.data_dir / TRANSACTION_LOG_NAME
        self.holdings_file = self.data_dir / HOLDINGS_DUMP_NAME
        self._write_lock = threading.Lock()

        # Ensure data directory exists
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def append_transaction(self, record: TransactionRecord) -> None:
        """Append a transaction record to the log file.

        Args:
            record: TransactionRecord to append
        """
        line = record.to_csv_line() + '\n'
        try:
            with self._write_lock:
                with open(self.transaction_log_file, 'a', encoding='utf-8', newline='') as f:
                    f.write(line)
            logger.debug(f"Appended transaction: {line.strip()}")
        except OSError as e:
            logger.error(f"Failed to save transaction for {record.user_id} {record.symbol}: {e}")
            raise PersistenceWriteError(f"Failed to save transaction: {e}") from e

    def get_transactions(self, user_id: Optional[str] = None) -> List[TransactionRecord]:
        """Read transactions from the log file.

        Args:
            user_id: Optional user id to filter by

        Returns:
            List of TransactionRecord objects in log order
        """
        with self._write_lock:
            if not self.transaction_log_file.exists():
                return []
            try:
                df = pd.read_csv(
                    self.transaction_log_file,
                    header=None,
                    names=TRANSACTION_LOG_COLUMNS,
                    dtype=str,
                    keep_default_na=False,
                    on_bad_lines='skip',
                )
            except pd.errors.EmptyDataError:
                return []
            except (OSError, pd.errors.ParserError) as e:
                logger.error(f"Failed to load transaction log: {e}")
                raise RepositoryError(f"Failed to load transaction log: {e}") from e

        if user_id is not None:
            df = df[df['user_id'] == user_id]

        records = []
        for row in df.itertuples(index=False):
            try:
                records.append(TransactionRecord(
                    user_id=row.user_id,
                    symbol=row.symbol,
                    quantity=int(row.quantity),
                    price=parse_price_field(row.price, "price in transaction row"),
                    timestamp=datetime.fromisoformat(row.timestamp),
                ))
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed transaction row {tuple(row)}: {e}")
        return records

    def dump_holdings(self, accounts: Iterable) -> None:
        """Rewrite the holdings dump from the given accounts.

        The dump is written to a temporary file and then moved over the old
        one, so readers never observe a half-written dump.
        """
        lines = self.holdings_lines(accounts)
        tmp_file = self.holdings_file.with_name(self.holdings_file.name + '.tmp')
        try:
            with self._write_lock:
                with open(tmp_file, 'w', encoding='utf-8', newline='') as f:
                    for line in lines:
                        f.write(line + '\n')
                os.replace(tmp_file, self.holdings_file)
            logger.info(f"Saved {len(lines)} holdings to {self.holdings_file}")
        except OSError as e:
            logger.error(f"Failed to save portfolios: {e}")
            raise PersistenceWriteError(f"Failed to save portfolios: {e}") from e

    def load_holdings(self) -> List[Tuple[str, Holding]]:
        """Read the holdings dump, skipping malformed lines.

        Returns:
            List of (user_id, Holding)
        """
        if not self.holdings_file.exists():
            logger.info(f"Holdings file does not exist: {self.holdings_file}")
            return []

        try:
            with open(self.holdings_file, 'r', encoding='utf-8') as f:
                raw_lines = f.readlines()
        except OSError as e:
            logger.error(f"Failed to load portfolios: {e}")
            raise RepositoryError(f"Failed to load portfolios: {e}") from e

        entries = []
        for line_number, line in enumerate(raw_lines, start=1):
            if not line.strip():
                continue
            try:
                entries.append(Holding.from_csv_line(line))
            except ValueError as e:
                logger.warning(f"Skipping malformed holdings line {line_number}: {e}")
        return entries

    def export_price_history(self, symbol: str, points: List[PricePoint]) -> str:
        """Write an instrument's price history to price_history_<SYMBOL>.csv."""
        path = self.data_dir / PRICE_HISTORY_EXPORT_TEMPLATE.format(symbol=sanitize_file_component(symbol.upper()))
        df = pd.DataFrame(
            [(p.timestamp.isoformat(), str(p.price)) for p in points],
            columns=PRICE_HISTORY_EXPORT_COLUMNS,
        )
        self._write_export(df, path)
        return str(path)

    def export_valuation_history(self, user_id: str, snapshots: List[ValuationSnapshot]) -> str:
        """Write an account's valuation snapshots to portfolio_snapshots_<user>.csv."""
        path = self.data_dir / VALUATION_EXPORT_TEMPLATE.format(user_id=sanitize_file_component(user_id))
        df = pd.DataFrame(
            [(s.timestamp.isoformat(), str(s.total_value)) for s in snapshots],
            columns=VALUATION_EXPORT_COLUMNS,
        )
        self._write_export(df, path)
        return str(path)

    def _write_export(self, df: pd.DataFrame, path: Path) -> None:
        try:
            with self._write_lock:
                df.to_csv(path, index=False, lineterminator='\n')
            logger.info(f"Exported {len(df)} rows to {path}")
        except OSError as e:
            logger.error(f"Failed to export {path.name}: {e}")
            raise PersistenceWriteError(f"Failed to export {path.name}: {e}") from e
