"""
Per-user cash account.

Each Account owns one cash balance and exactly one Ledger. Single
operations (read, debit, credit, affordability check) are atomic on the
account's re-entrant lock. Compound operations that must check the balance
and then mutate cash and holdings together hold ``account.lock`` for the
whole sequence; because the lock is re-entrant the individual methods can
still be called inside that section.
"""

import logging
import threading
from decimal import Decimal

from config.constants import AFFORDABILITY_EPSILON, DEFAULT_STARTING_CASH
from portfolio.ledger import Ledger
from .calculations import NumericInput, to_decimal

logger = logging.getLogger(__name__)


class Account:
    """
    Cash balance for one user.

    Negative balances are not prevented here; callers check
    ``can_afford`` first, under ``lock``, before debiting.
    """

    def __init__(self, user_id: str, starting_cash: NumericInput = DEFAULT_STARTING_CASH):
        """Initialize the account.

        Args:
            user_id: Unique user id
            starting_cash: Opening cash balance
        """
        self.user_id = user_id
        self._cash = to_decimal(starting_cash)
        self._lock = threading.RLock()
        self.ledger = Ledger(user_id)

    @property
    def lock(self) -> threading.RLock:
        """Critical section covering this account's cash and its ledger."""
        return self._lock

    def cash(self) -> Decimal:
        """Get current cash balance."""
        with self._lock:
            return self._cash

    def can_afford(self, amount: NumericInput) -> bool:
        """True iff the balance covers ``amount`` (within a tiny rounding tolerance)."""
        amount = to_decimal(amount)
        with self._lock:
            return self._cash + AFFORDABILITY_EPSILON >= amount

    def debit(self, amount: NumericInput) -> Decimal:
        """Remove cash from the account.

        Args:
            amount: Amount to remove (non-negative)

        Returns:
            Balance after the debit
        """
        amount = to_decimal(amount)
        if amount < 0:
            raise ValueError("Debit amount cannot be negative")
        with self._lock:
            self._cash -= amount
            balance = self._cash
        logger.debug(f"Debited {amount} from {self.user_id}, balance {balance}")
        return balance

    def credit(self, amount: NumericInput) -> Decimal:
        """Add cash to the account.

        Args:
            amount: Amount to add (non-negative)

        Returns:
            Balance after the credit
        """
        amount = to_decimal(amount)
        if amount < 0:
            raise ValueError("Credit amount cannot be negative")
        with self._lock:
            self._cash += amount
            balance = self._cash
        logger.debug(f"Credited {amount} to {self.user_id}, balance {balance}")
        return balance

    def __repr__(self) -> str:
        return f"Account(user_id={self.user_id!r})"
