"""Table formatter module for Rich table formatting.

This module renders market quotes, holdings, price histories, valuation
snapshots and account summaries as Rich tables, with a colorama text layout
when Rich output is disabled.
"""

from typing import Any, Dict, List, Optional

from colorama import Fore, Style
from rich.table import Table

from data.models.market_data import PricePoint
from data.models.portfolio import ValuationSnapshot
from .console_output import get_console, has_rich_support, print_info


def _money(value) -> str:
    return f"${float(value):,.2f}"


def _price(value) -> str:
    return f"{float(value):,.4f}"


def _timestamp(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S")


class TableFormatter:
    """Renders trading data as console tables."""

    def __init__(self, console=None):
        self.console = console or get_console()

    def create_market_table(self, quotes: List[Dict[str, Any]]) -> None:
        """Display live market prices.

        Args:
            quotes: Dicts with keys symbol, name, price
        """
        if has_rich_support():
            table = Table(title="📈 Market", show_header=True, header_style="bold magenta")
            table.add_column("Symbol", style="cyan", no_wrap=True)
            table.add_column("Name", style="white")
            table.add_column("Price", justify="right", style="yellow")
            for quote in quotes:
                table.add_row(quote['symbol'], quote['name'], _price(quote['price']))
            self.console.print(table)
        else:
            print_info("Market:", "📈")
            for quote in quotes:
                print(f"  {Fore.CYAN}{quote['symbol']:<6}{Style.RESET_ALL} "
                      f"{quote['name']:<20} {_price(quote['price']):>12}")

    def create_holdings_table(self, user_id: str, holdings: List[Dict[str, Any]]) -> None:
        """Display an account's holdings.

        Args:
            user_id: Account owner
            holdings: Dicts with keys symbol, quantity, avg_price, current_price
                and market_value (the last two None when the symbol is not listed)
        """
        if not holdings:
            print_info(f"{user_id} has no holdings")
            return

        if has_rich_support():
            table = Table(title=f"💼 Holdings for {user_id}", show_header=True, header_style="bold magenta")
            table.add_column("Symbol", style="cyan", no_wrap=True)
            table.add_column("Qty", justify="right", style="bright_white")
            table.add_column("Avg Price", justify="right", style="white")
            table.add_column("Market Price", justify="right", style="yellow")
            table.add_column("Value", justify="right", style="bright_yellow")
            for row in holdings:
                current = row.get('current_price')
                value = row.get('market_value')
                table.add_row(
                    row['symbol'],
                    str(row['quantity']),
                    _price(row['avg_price']),
                    _price(current) if current is not None else "N/A",
                    _money(value) if value is not None else "N/A",
                )
            self.console.print(table)
        else:
            print_info(f"Holdings for {user_id}:", "💼")
            for row in holdings:
                current = row.get('current_price')
                value = row.get('market_value')
                print(f"  {row['symbol']:<6} {row['quantity']:>8} @ {_price(row['avg_price'])}"
                      f" | mkt {_price(current) if current is not None else 'N/A'}"
                      f" | value {_money(value) if value is not None else 'N/A'}")

    def create_price_history_table(self, symbol: str, points: List[PricePoint],
                                   title: Optional[str] = None) -> None:
        """Display price history points, oldest first."""
        if has_rich_support():
            table = Table(title=title or f"📊 Price history for {symbol}", show_header=True,
                          header_style="bold blue")
            table.add_column("Time", style="dim", no_wrap=True)
            table.add_column("Price", justify="right", style="yellow")
            for point in points:
                table.add_row(_timestamp(point.timestamp), _price(point.price))
            self.console.print(table)
        else:
            print_info(title or f"Price history for {symbol}:", "📊")
            for point in points:
                print(f"  {_timestamp(point.timestamp)}  {_price(point.price):>12}")

    def create_valuation_table(self, user_id: str, snapshots: List[ValuationSnapshot]) -> None:
        """Display an account's valuation snapshots."""
        if has_rich_support():
            table = Table(title=f"💰 Valuations for {user_id}", show_header=True, header_style="bold blue")
            table.add_column("Time", style="dim", no_wrap=True)
            table.add_column("Total Value", justify="right", style="green")
            for snapshot in snapshots:
                table.add_row(_timestamp(snapshot.timestamp), _money(snapshot.total_value))
            self.console.print(table)
        else:
            print_info(f"Valuations for {user_id}:", "💰")
            for snapshot in snapshots:
                print(f"  {_timestamp(snapshot.timestamp)}  {_money(snapshot.total_value):>14}")

    def create_summary_table(self, user_id: str, summary_data: Dict[str, Any]) -> None:
        """Display cash, holdings value and total value for an account."""
        cash = summary_data.get('cash', 0)
        holdings_value = summary_data.get('holdings_value', 0)
        total_value = summary_data.get('total_value', 0)

        if has_rich_support():
            table = Table(title=f"💰 Account {user_id}", show_header=True, header_style="bold magenta")
            table.add_column("Metric", style="cyan", no_wrap=True)
            table.add_column("Amount", justify="right", style="green")
            table.add_row("Cash", _money(cash), style="on grey11")
            table.add_row("Holdings Value", _money(holdings_value))
            table.add_row("Total Value", _money(total_value), style="on grey11")
            self.console.print(table)
        else:
            print_info(f"Account {user_id}:", "💰")
            print(f"  Cash: {_money(cash)}")
            print(f"  Holdings Value: {_money(holdings_value)}")
            print(f"  Total Value: {_money(total_value)}")
