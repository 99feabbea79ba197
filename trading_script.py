"""Simulated trading platform console.

This is the main orchestrator for the trading platform. It loads
configuration, wires the market, the repository and the exchange together,
starts the background price-tick and snapshot jobs and runs the command
loop until the user exits.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from config.constants import LOG_FILE, VERSION
from config.settings import Settings
from data.repositories.base_repository import BaseRepository, RepositoryError
from data.repositories.repository_factory import RepositoryFactory
from display.console_output import (
    print_error, print_header, print_info, print_success, print_warning, set_colorama_only
)
from market_data.market import Market
from portfolio.exchange import Exchange
from portfolio.snapshot_scheduler import SnapshotScheduler
from portfolio.trading_interface import TradingInterface

logger = logging.getLogger(__name__)

PROMPT = "> "


class TradingSystemError(Exception):
    """Base exception for trading system errors."""
    pass


class InitializationError(TradingSystemError):
    """Exception raised when the system cannot be started."""
    pass


@dataclass
class TradingSystem:
    """Running components of the platform."""
    settings: Settings
    repository: BaseRepository
    market: Market
    exchange: Exchange
    snapshots: SnapshotScheduler
    interface: TradingInterface


def setup_logging(settings: Settings) -> None:
    """Setup logging configuration.

    Args:
        settings: System settings containing logging configuration
    """
    log_config = settings.get_logging_config()

    logging.basicConfig(
        level=getattr(logging, str(log_config.get('level', 'INFO')).upper(), logging.INFO),
        format=log_config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
        handlers=[
            logging.FileHandler(log_config.get('file', LOG_FILE)),
            logging.StreamHandler(sys.stdout)
        ],
        force=True
    )

    logger.info(f"Logging configured - Level: {log_config.get('level', 'INFO')}")


def parse_command_line_arguments(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed command-line arguments
    """
    parser = argparse.ArgumentParser(
        description="Trading Platform - Simulated market and portfolio console",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python trading_script.py                          # Use default data directory
  python trading_script.py --data-dir trading_data/dev
  python trading_script.py --config config.json    # Use custom configuration
  python trading_script.py --tick-interval 1       # Faster price moves
  python trading_script.py --no-persist            # Keep everything in memory
        """
    )

    parser.add_argument(
        '--data-dir',
        type=str,
        default=None,
        help='Data directory path (overrides config setting)'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to configuration file'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    parser.add_argument(
        '--tick-interval',
        type=float,
        default=None,
        help='Seconds between price ticks'
    )

    parser.add_argument(
        '--snapshot-interval',
        type=float,
        default=None,
        help='Seconds between portfolio snapshots'
    )

    parser.add_argument(
        '--starting-cash',
        type=str,
        default=None,
        help='Cash given to each new account'
    )

    parser.add_argument(
        '--no-persist',
        action='store_true',
        help='Use the in-memory repository (nothing is written to disk)'
    )

    parser.add_argument(
        '--plain',
        action='store_true',
        help='Use simple colored text instead of Rich tables'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'Trading Platform {VERSION}'
    )

    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace) -> Settings:
    """Build settings from config file, environment and command-line overrides."""
    settings = Settings(args.config)

    if args.data_dir:
        settings.set('repository.csv.data_directory', args.data_dir)
    if args.no_persist:
        settings.set('repository.type', 'memory')
    if args.tick_interval is not None:
        settings.set('market.tick_interval_seconds', args.tick_interval)
    if args.snapshot_interval is not None:
        settings.set('snapshots.interval_seconds', args.snapshot_interval)
    if args.starting_cash is not None:
        settings.set('accounts.starting_cash', args.starting_cash)
    if args.debug:
        settings.set('logging.level', 'DEBUG')

    return settings


def initialize_repository(settings: Settings) -> BaseRepository:
    """Initialize repository based on configuration.

    Raises:
        InitializationError: If repository initialization fails
    """
    repo_config = settings.get_repository_config()
    repository_type = repo_config.pop('type')
    try:
        repository = RepositoryFactory.create_repository(repository_type, **repo_config)
    except (ValueError, OSError) as e:
        error_msg = f"Failed to initialize {repository_type} repository: {e}"
        logger.error(error_msg)
        raise InitializationError(error_msg) from e

    logger.info(f"Repository initialized: {type(repository).__name__}")
    return repository


def initialize_system(settings: Settings) -> TradingSystem:
    """Create every component and restore saved holdings.

    Raises:
        InitializationError: If system initialization fails
    """
    repository = initialize_repository(settings)

    try:
        market = Market.from_configs(settings.get_instrument_configs())
    except (KeyError, ValueError) as e:
        raise InitializationError(f"Invalid instrument configuration: {e}") from e

    exchange = Exchange(market, repository, settings.get_starting_cash())
    try:
        restored = exchange.load_holdings()
    except RepositoryError as e:
        raise InitializationError(f"Failed to load saved holdings: {e}") from e
    if restored:
        print_info(f"Restored {restored} holdings for {len(exchange.list_accounts())} accounts")

    snapshots = SnapshotScheduler(
        exchange, market,
        autosave_holdings=bool(settings.get('snapshots.autosave_holdings', False))
    )
    interface = TradingInterface(exchange, market, repository)

    return TradingSystem(settings, repository, market, exchange, snapshots, interface)


def start_background_jobs(system: TradingSystem) -> None:
    """Start price ticking and portfolio snapshots.

    Raises:
        InitializationError: If an interval is not a positive number
    """
    try:
        if system.settings.get('market.auto_tick', True):
            system.market.start_auto_tick(system.settings.get_tick_interval())
        system.snapshots.start(system.settings.get_snapshot_interval())
    except ValueError as e:
        raise InitializationError(f"Invalid scheduling configuration: {e}") from e


def shutdown_system(system: TradingSystem) -> None:
    """Stop background jobs and write the final holdings dump."""
    system.market.stop()
    system.snapshots.stop()
    try:
        system.exchange.save_holdings()
        print_success("Holdings saved")
    except RepositoryError as e:
        logger.error(f"Final holdings save failed: {e}")
        print_error(f"Failed to save holdings: {e}")
    logger.info("System shutdown completed")


def run_command_loop(interface: TradingInterface) -> None:
    """Read commands until exit, EOF or Ctrl-C."""
    print_info("Type 'help' for a list of commands.")
    while True:
        try:
            line = input(PROMPT)
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print_warning("\nInterrupted")
            break
        if not interface.handle_command(line):
            break


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the trading platform."""
    load_dotenv(Path.cwd() / '.env')
    args = parse_command_line_arguments(argv)

    system = None
    try:
        settings = load_settings(args)
        setup_logging(settings)
        if args.plain:
            set_colorama_only()
        print_header("Trading Platform", "📈")
        if settings.is_development_mode():
            print_warning("Development mode: debug logging enabled")
        system = initialize_system(settings)
        start_background_jobs(system)
        run_command_loop(system.interface)

    except InitializationError as e:
        print_error(f"System initialization failed: {e}")
        sys.exit(1)

    except TradingSystemError as e:
        print_error(f"Trading system error: {e}")
        sys.exit(1)

    finally:
        if system is not None:
            shutdown_system(system)


if __name__ == "__main__":
    main()
