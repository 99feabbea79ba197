"""Trade execution module.

This module provides the Exchange class, which owns the account registry and
executes buy and sell orders against live market prices. Each trade checks
funds or holdings and updates cash and holdings as one atomic step per
account, then appends a TransactionRecord to the repository.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from config.constants import (
    DEFAULT_STARTING_CASH, ERROR_INSUFFICIENT_FUNDS, ERROR_INSUFFICIENT_HOLDINGS,
    ERROR_INVALID_QUANTITY, ERROR_SYMBOL_NOT_FOUND, ERROR_USER_NOT_FOUND
)
from data.models.portfolio import Holding
from data.models.trade import TransactionRecord
from data.repositories.base_repository import BaseRepository, RepositoryError
from financial.account import Account
from financial.calculations import NumericInput, calculate_trade_value, to_decimal
from market_data.market import Market
from market_data.price_series import PriceSeries

logger = logging.getLogger(__name__)


class ExchangeError(Exception):
    """Base exception for exchange operations."""
    pass


class UserNotFoundError(ExchangeError):
    """Exception raised when the user id has no account."""
    pass


class SymbolNotFoundError(ExchangeError):
    """Exception raised when the symbol is not listed on the market."""
    pass


class InvalidQuantityError(ExchangeError):
    """Exception raised when a trade quantity is not a positive integer."""
    pass


class InsufficientFundsError(ExchangeError):
    """Exception raised when insufficient cash for a buy."""
    pass


class InsufficientHoldingsError(ExchangeError):
    """Exception raised when insufficient holdings for a sell."""
    pass


@dataclass
class TradeResult:
    """Result of an executed trade.

    The trade has always been applied in memory. ``persisted`` reports whether
    the record reached the transaction log; a failed write does not reverse
    the trade.
    """
    record: TransactionRecord
    persisted: bool
    persistence_error: Optional[str] = None

    @property
    def notional(self) -> Decimal:
        """Cash moved by the trade."""
        return self.record.notional


def parse_quantity(raw: str) -> int:
    """Parse a quantity typed on the command line.

    Raises:
        InvalidQuantityError: If the text is not a positive whole number
    """
    try:
        quantity = int(str(raw).strip())
    except (TypeError, ValueError) as e:
        raise InvalidQuantityError(f"{ERROR_INVALID_QUANTITY}: {raw!r}") from e
    if quantity <= 0:
        raise InvalidQuantityError(f"{ERROR_INVALID_QUANTITY}: {raw!r}")
    return quantity


def _validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantityError(f"{ERROR_INVALID_QUANTITY}: {quantity!r}")
    return quantity


class Exchange:
    """Executes trades and owns the account registry.

    Lock order: the instrument price is read first (its lock released), then
    the account's critical section is entered; the ledger lock is only ever
    taken inside the account section.
    """

    def __init__(self, market: Market, repository: BaseRepository,
                 starting_cash: NumericInput = DEFAULT_STARTING_CASH):
        """Initialize the exchange.

        Args:
            market: Market providing live prices
            repository: Persistence sink for transactions and holdings
            starting_cash: Cash given to every newly registered account
        """
        self.market = market
        self.repository = repository
        self.starting_cash = to_decimal(starting_cash)
        self._accounts: Dict[str, Account] = OrderedDict()
        self._registry_lock = threading.Lock()
        logger.info(f"Exchange initialized with {type(repository).__name__}")

    # Account registry

    def register_account(self, user_id: str) -> Account:
        """Login or register: return the existing account or create one.

        Raises:
            ValueError: If the user id is empty
        """
        user_id = (user_id or "").strip()
        if not user_id:
            raise ValueError("User id cannot be empty")

        with self._registry_lock:
            account = self._accounts.get(user_id)
            if account is None:
                account = Account(user_id, self.starting_cash)
                self._accounts[user_id] = account
                logger.info(f"Registered account {user_id} with {self.starting_cash}")
        return account

    def get_account(self, user_id: str) -> Account:
        """Look up an existing account.

        Raises:
            UserNotFoundError: If no account exists for the id
        """
        user_id = (user_id or "").strip()
        with self._registry_lock:
            account = self._accounts.get(user_id)
        if account is None:
            raise UserNotFoundError(f"{ERROR_USER_NOT_FOUND} ({user_id})")
        return account

    def list_accounts(self) -> List[Account]:
        with self._registry_lock:
            return list(self._accounts.values())

    def _resolve(self, user_id: str, symbol: str, quantity) -> Tuple[Account, PriceSeries, int]:
        account = self.get_account(user_id)
        instrument = self.market.lookup(symbol)
        if instrument is None:
            raise SymbolNotFoundError(f"{ERROR_SYMBOL_NOT_FOUND}: {symbol}")
        return account, instrument, _validate_quantity(quantity)

    # Trading

    def buy(self, user_id: str, symbol: str, quantity: int) -> TradeResult:
        """Buy ``quantity`` units of ``symbol`` at the current price.

        Returns:
            TradeResult for the executed trade

        Raises:
            UserNotFoundError, SymbolNotFoundError, InvalidQuantityError,
            InsufficientFundsError: Validation failures; nothing is changed
        """
        account, instrument, quantity = self._resolve(user_id, symbol, quantity)
        price = instrument.current_price()
        cost = calculate_trade_value(price, quantity)

        with account.lock:
            if not account.can_afford(cost):
                raise InsufficientFundsError(
                    f"{ERROR_INSUFFICIENT_FUNDS}: need {cost}, have {account.cash()}"
                )
            account.debit(cost)
            account.ledger.buy(instrument.symbol, quantity, price)

        logger.info(f"BUY {account.user_id} {quantity} {instrument.symbol} @ {price} (cost {cost})")
        record = TransactionRecord(user_id=account.user_id, symbol=instrument.symbol,
                                   quantity=quantity, price=price)
        return self._record(record)

    def sell(self, user_id: str, symbol: str, quantity: int) -> TradeResult:
        """Sell ``quantity`` units of ``symbol`` at the current price.

        Returns:
            TradeResult for the executed trade (record quantity is negative)

        Raises:
            UserNotFoundError, SymbolNotFoundError, InvalidQuantityError,
            InsufficientHoldingsError: Validation failures; nothing is changed
        """
        account, instrument, quantity = self._resolve(user_id, symbol, quantity)
        price = instrument.current_price()
        proceeds = calculate_trade_value(price, quantity)

        with account.lock:
            if not account.ledger.sell(instrument.symbol, quantity):
                raise InsufficientHoldingsError(
                    f"{ERROR_INSUFFICIENT_HOLDINGS}: {quantity} {instrument.symbol}"
                )
            account.credit(proceeds)

        logger.info(f"SELL {account.user_id} {quantity} {instrument.symbol} @ {price} (proceeds {proceeds})")
        record = TransactionRecord(user_id=account.user_id, symbol=instrument.symbol,
                                   quantity=-quantity, price=price)
        return self._record(record)

    def _record(self, record: TransactionRecord) -> TradeResult:
        try:
            self.repository.append_transaction(record)
        except RepositoryError as e:
            # Trade already applied in memory
            logger.error(f"Trade executed but not logged ({record.to_csv_line()}): {e}")
            return TradeResult(record=record, persisted=False, persistence_error=str(e))
        return TradeResult(record=record, persisted=True)

    # Valuation

    def _price_holdings(self, holdings: Dict[str, Holding]) -> Decimal:
        """Sum of quantity x current price; unknown symbols contribute nothing."""
        total = Decimal('0')
        for symbol, holding in holdings.items():
            instrument = self.market.lookup(symbol)
            if instrument is None:
                continue
            total += holding.market_value(instrument.current_price())
        return total

    def valuation(self, account: Account) -> Dict[str, Decimal]:
        """Cash, holdings value and total value of one account.

        Holdings and cash are read together inside the account critical
        section, so a concurrent trade is counted entirely or not at all.
        Prices are looked up after the section is left.
        """
        with account.lock:
            holdings = account.ledger.holdings_snapshot()
            cash = account.cash()
        holdings_value = self._price_holdings(holdings)
        return {
            'cash': cash,
            'holdings_value': holdings_value,
            'total_value': holdings_value + cash,
        }

    def total_value(self, account: Account) -> Decimal:
        """Holdings value plus cash, read atomically."""
        return self.valuation(account)['total_value']

    # Persistence

    def save_holdings(self) -> None:
        """Write the full holdings dump for every account.

        Raises:
            RepositoryError: If the dump cannot be written
        """
        accounts = self.list_accounts()
        self.repository.dump_holdings(accounts)
        logger.info(f"Saved holdings for {len(accounts)} accounts")

    def load_holdings(self) -> int:
        """Replay the holdings dump into the ledgers.

        Unknown users are created with the starting cash; cash balances are
        not part of the dump and are not restored.

        Returns:
            Number of holdings restored
        """
        loaded = 0
        for user_id, holding in self.repository.load_holdings():
            try:
                account = self.register_account(user_id)
                with account.lock:
                    account.ledger.buy(holding.symbol, holding.quantity, holding.avg_price)
            except (ValueError, ArithmeticError) as e:
                logger.warning(f"Skipping holding {holding.symbol} for {user_id!r}: {e}")
                continue
            loaded += 1
        logger.info(f"Loaded {loaded} holdings")
        return loaded

    def transaction_history(self, user_id: str) -> List[TransactionRecord]:
        """Read the user's records back from the transaction log.

        Raises:
            RepositoryError: If the log cannot be read
        """
        return self.repository.get_transactions(user_id=(user_id or "").strip())
