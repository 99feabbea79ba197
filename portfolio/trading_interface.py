"""Trading interface module.

This module provides the command layer for the trading console. Each input
line is parsed into a command and dispatched to the exchange, the market or
the repository; results and errors are printed and the loop continues.
"""

import logging
from typing import Callable, Dict, List

from config.constants import DETAIL_HISTORY_POINTS, ERROR_SYMBOL_NOT_FOUND
from data.repositories.base_repository import BaseRepository, RepositoryError
from display.console_output import (
    print_error, print_header, print_info, print_plain, print_success, print_warning
)
from display.table_formatter import TableFormatter
from financial.calculations import format_money
from market_data.market import Market
from portfolio.exchange import Exchange, ExchangeError, SymbolNotFoundError, parse_quantity

logger = logging.getLogger(__name__)

HELP_TEXT = [
    "login <userId>                       register or log in",
    "market                               list instruments with live prices",
    "buy <userId> <symbol> <qty>          buy at the current price",
    "sell <userId> <symbol> <qty>         sell at the current price",
    "history <symbol> [save]              full price history (optionally exported)",
    "detail <symbol>                      name, price and recent history",
    "account <userId> balance             cash balance",
    "account <userId> holdings            holdings with market value",
    "account <userId> history             transaction log entries",
    "account <userId> value               total value (cash + holdings)",
    "account <userId> export              export valuation snapshots",
    "save                                 write the holdings dump now",
    "help                                 show this help",
    "exit | quit                          stop and save",
]

ACCOUNT_ACTIONS = ('balance', 'holdings', 'history', 'value', 'export')


class CommandUsageError(Exception):
    """Exception raised when a command has the wrong arguments."""
    pass


class TradingInterface:
    """Dispatches console commands to the trading engine."""

    def __init__(self, exchange: Exchange, market: Market, repository: BaseRepository,
                 formatter: TableFormatter = None):
        """Initialize trading interface.

        Args:
            exchange: Exchange executing trades and owning accounts
            market: Market with live prices
            repository: Repository used for exports
            formatter: Table formatter for output
        """
        self.exchange = exchange
        self.market = market
        self.repository = repository
        self.formatter = formatter or TableFormatter()
        self._commands: Dict[str, Callable[[List[str]], None]] = {
            'login': self.login,
            'market': self.show_market,
            'buy': self.buy,
            'sell': self.sell,
            'history': self.price_history,
            'detail': self.detail,
            'account': self.account,
            'save': self.save,
            'help': self.show_help,
        }
        logger.info("Trading interface initialized")

    def handle_command(self, line: str) -> bool:
        """Execute one command line.

        Returns:
            False when the user asked to exit, True otherwise
        """
        parts = line.strip().split()
        if not parts:
            return True

        command, args = parts[0].lower(), parts[1:]
        if command in ('exit', 'quit'):
            return False

        handler = self._commands.get(command)
        if handler is None:
            print_error(f"Unknown command: {command}. Type 'help' for a list of commands.")
            return True

        try:
            handler(args)
        except CommandUsageError as e:
            print_error(f"Usage: {e}")
        except ExchangeError as e:
            print_error(str(e))
        except RepositoryError as e:
            logger.error(f"Storage error while running {command!r}: {e}")
            print_error(f"Storage error: {e}")
        except ValueError as e:
            print_error(str(e))
        return True

    # Commands

    def login(self, args: List[str]) -> None:
        if len(args) != 1:
            raise CommandUsageError("login <userId>")
        account = self.exchange.register_account(args[0])
        print_success(f"Welcome {account.user_id}. Cash: {format_money(account.cash())}")

    def show_market(self, args: List[str]) -> None:
        quotes = [
            {'symbol': s.symbol, 'name': s.name, 'price': s.current_price()}
            for s in self.market.list_all()
        ]
        self.formatter.create_market_table(quotes)

    def buy(self, args: List[str]) -> None:
        if len(args) != 3:
            raise CommandUsageError("buy <userId> <symbol> <qty>")
        user_id, symbol, raw_quantity = args
        result = self.exchange.buy(user_id, symbol, parse_quantity(raw_quantity))
        record = result.record
        print_success(f"Bought {record.quantity} {record.symbol} @ {record.price} "
                      f"(cost {format_money(result.notional)})", "🛒")
        if not result.persisted:
            print_warning(f"Trade executed but not saved to the log: {result.persistence_error}")

    def sell(self, args: List[str]) -> None:
        if len(args) != 3:
            raise CommandUsageError("sell <userId> <symbol> <qty>")
        user_id, symbol, raw_quantity = args
        result = self.exchange.sell(user_id, symbol, parse_quantity(raw_quantity))
        record = result.record
        print_success(f"Sold {abs(record.quantity)} {record.symbol} @ {record.price} "
                      f"(proceeds {format_money(result.notional)})", "📤")
        if not result.persisted:
            print_warning(f"Trade executed but not saved to the log: {result.persistence_error}")

    def price_history(self, args: List[str]) -> None:
        if len(args) not in (1, 2) or (len(args) == 2 and args[1].lower() != 'save'):
            raise CommandUsageError("history <symbol> [save]")
        instrument = self._instrument(args[0])
        points = instrument.history()
        self.formatter.create_price_history_table(instrument.symbol, points)
        if len(args) == 2:
            target = self.repository.export_price_history(instrument.symbol, points)
            print_success(f"Saved {len(points)} price points to {target}", "💾")

    def detail(self, args: List[str]) -> None:
        if len(args) != 1:
            raise CommandUsageError("detail <symbol>")
        instrument = self._instrument(args[0])
        print_header(f"{instrument.symbol} - {instrument.name}")
        print_info(f"Current price: {instrument.current_price()}")
        self.formatter.create_price_history_table(
            instrument.symbol,
            instrument.recent_history(DETAIL_HISTORY_POINTS),
            title=f"Last {DETAIL_HISTORY_POINTS} prices for {instrument.symbol}",
        )

    def account(self, args: List[str]) -> None:
        if len(args) != 2 or args[1].lower() not in ACCOUNT_ACTIONS:
            raise CommandUsageError(f"account <userId> {'|'.join(ACCOUNT_ACTIONS)}")
        account = self.exchange.get_account(args[0])
        action = args[1].lower()

        if action == 'balance':
            print_info(f"{account.user_id} cash: {format_money(account.cash())}")
        elif action == 'holdings':
            rows = []
            for symbol, holding in account.ledger.holdings_snapshot().items():
                instrument = self.market.lookup(symbol)
                current = instrument.current_price() if instrument else None
                rows.append({
                    'symbol': symbol,
                    'quantity': holding.quantity,
                    'avg_price': holding.avg_price,
                    'current_price': current,
                    'market_value': holding.market_value(current) if current is not None else None,
                })
            self.formatter.create_holdings_table(account.user_id, rows)
        elif action == 'history':
            records = self.exchange.transaction_history(account.user_id)
            if not records:
                print_info(f"No transactions for {account.user_id}")
            for record in records:
                print_plain(record.to_csv_line())
        elif action == 'value':
            self.formatter.create_summary_table(account.user_id, self.exchange.valuation(account))
        elif action == 'export':
            snapshots = account.ledger.valuation_history()
            self.formatter.create_valuation_table(account.user_id, snapshots)
            target = self.repository.export_valuation_history(account.user_id, snapshots)
            print_success(f"Exported {len(snapshots)} snapshots to {target}", "💾")

    def save(self, args: List[str]) -> None:
        self.exchange.save_holdings()
        print_success("Holdings saved", "💾")

    def show_help(self, args: List[str]) -> None:
        print_header("Commands")
        for line in HELP_TEXT:
            print_plain(f"  {line}")

    def _instrument(self, symbol: str):
        instrument = self.market.lookup(symbol)
        if instrument is None:
            raise SymbolNotFoundError(f"{ERROR_SYMBOL_NOT_FOUND}: {symbol}")
        return instrument
