"""Abstract base repository interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple

from ..models.market_data import PricePoint
from ..models.portfolio import Holding, ValuationSnapshot
from ..models.trade import TransactionRecord

if TYPE_CHECKING:
    from financial.account import Account


class BaseRepository(ABC):
    """Abstract base class for the persistence sink.

    The engine only needs two durable artifacts: an append-only transaction
    log and a full-rewrite dump of every account's holdings. Implementations
    must make each individual write indivisible with respect to concurrent
    writers (trade emission from the foreground, dumps from background jobs).
    """

    @abstractmethod
    def append_transaction(self, record: TransactionRecord) -> None:
        """Append one record to the transaction log.

        Args:
            record: TransactionRecord to append

        Raises:
            PersistenceWriteError: If the write fails
        """
        pass

    @abstractmethod
    def get_transactions(self, user_id: Optional[str] = None) -> List[TransactionRecord]:
        """Read transaction records back, optionally filtered by user.

        Args:
            user_id: Optional user id to filter by

        Returns:
            List of TransactionRecord objects in log order

        Raises:
            RepositoryError: If data access fails
        """
        pass

    @abstractmethod
    def dump_holdings(self, accounts: Iterable[Account]) -> None:
        """Replace the holdings dump with the current holdings of all accounts.

        Args:
            accounts: Accounts whose ledgers should be written

        Raises:
            PersistenceWriteError: If the write fails
        """
        pass

    @abstractmethod
    def load_holdings(self) -> List[Tuple[str, Holding]]:
        """Read the holdings dump.

        Returns:
            List of (user_id, Holding) in dump order; empty if no dump exists

        Raises:
            RepositoryError: If data access fails
        """
        pass

    @abstractmethod
    def export_price_history(self, symbol: str, points: List[PricePoint]) -> str:
        """Export an instrument's price history.

        Returns:
            Name or path of the written export

        Raises:
            PersistenceWriteError: If the write fails
        """
        pass

    @abstractmethod
    def export_valuation_history(self, user_id: str, snapshots: List[ValuationSnapshot]) -> str:
        """Export an account's valuation snapshots.

        Returns:
            Name or path of the written export

        Raises:
            PersistenceWriteError: If the write fails
        """
        pass

    @staticmethod
    def holdings_lines(accounts: Iterable[Account]) -> List[str]:
        """Build holdings dump lines (one per account/holding pair)."""
        lines = []
        for account in accounts:
            for holding in account.ledger.holdings_snapshot().values():
                lines.append(holding.to_csv_line(account.user_id))
        return lines


class RepositoryError(Exception):
    """Base exception for repository operations."""
    pass


class PersistenceWriteError(RepositoryError):
    """Exception raised when a write to the transaction log or dump fails."""
    pass

