"""
Integration tests for the console entry point.

Logging setup is not exercised here since it writes a log file into the
working directory.
"""

import os
import tempfile
import unittest
from decimal import Decimal
from unittest.mock import MagicMock, patch
import sys
from pathlib import Path

# Add the parent directory to the path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from data.repositories.base_repository import PersistenceWriteError
from data.repositories.csv_repository import CSVRepository
from data.repositories.memory_repository import InMemoryRepository
import trading_script
from trading_script import (
    InitializationError,
    initialize_system,
    load_settings,
    parse_command_line_arguments,
    run_command_loop,
    shutdown_system,
    start_background_jobs,
)

ENV_KEYS = ('TRADING_REPOSITORY_TYPE', 'TRADING_DATA_DIR', 'TRADING_TICK_INTERVAL',
            'TRADING_SNAPSHOT_INTERVAL', 'TRADING_STARTING_CASH', 'TRADING_BOT_DEV')


class TradingScriptTestCase(unittest.TestCase):

    def setUp(self):
        clean = {k: v for k, v in os.environ.items() if k not in ENV_KEYS}
        env_patcher = patch.dict(os.environ, clean, clear=True)
        env_patcher.start()
        self.addCleanup(env_patcher.stop)

        # Silence console helpers used by the entry point
        for name in ('print_info', 'print_success', 'print_error', 'print_warning'):
            patcher = patch(f'trading_script.{name}')
            patcher.start()
            self.addCleanup(patcher.stop)

        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)

    def settings_for(self, *argv):
        return load_settings(parse_command_line_arguments(list(argv)))


class TestArguments(TradingScriptTestCase):
    """Test command-line parsing and settings overrides."""

    def test_defaults(self):
        args = parse_command_line_arguments([])
        self.assertIsNone(args.data_dir)
        self.assertIsNone(args.tick_interval)
        self.assertFalse(args.no_persist)
        self.assertFalse(args.debug)
        self.assertFalse(args.plain)

    def test_overrides_applied(self):
        settings = self.settings_for('--data-dir', self.temp_dir.name, '--tick-interval', '0.5',
                                     '--snapshot-interval', '5', '--starting-cash', '2000', '--debug')
        self.assertEqual(settings.get('repository.csv.data_directory'), self.temp_dir.name)
        self.assertEqual(settings.get_tick_interval(), 0.5)
        self.assertEqual(settings.get_snapshot_interval(), 5.0)
        self.assertEqual(settings.get_starting_cash(), Decimal('2000'))
        self.assertEqual(settings.get('logging.level'), 'DEBUG')

    def test_no_persist_selects_memory(self):
        settings = self.settings_for('--no-persist')
        self.assertEqual(settings.get('repository.type'), 'memory')

    def test_version_exits(self):
        with patch('sys.stdout'):
            with self.assertRaises(SystemExit):
                parse_command_line_arguments(['--version'])


class TestSystemLifecycle(TradingScriptTestCase):
    """Test wiring, background jobs and shutdown."""

    def test_initialize_in_memory(self):
        system = initialize_system(self.settings_for('--no-persist'))
        self.assertIsInstance(system.repository, InMemoryRepository)
        self.assertEqual(len(system.market), 5)
        self.assertIsNotNone(system.market.lookup("AAPL"))
        self.assertEqual(system.exchange.list_accounts(), [])

    def test_unknown_repository_type(self):
        settings = self.settings_for()
        settings.set('repository.type', 'postgres')
        with self.assertRaises(InitializationError):
            initialize_system(settings)

    def test_bad_instrument_config(self):
        settings = self.settings_for('--no-persist')
        settings.set('market.instruments', [{'symbol': 'BAD', 'price': '-1'}])
        with self.assertRaises(InitializationError):
            initialize_system(settings)

    def test_bad_interval(self):
        system = initialize_system(self.settings_for('--no-persist', '--tick-interval', '0'))
        try:
            with self.assertRaises(InitializationError):
                start_background_jobs(system)
        finally:
            shutdown_system(system)

    def test_jobs_start_and_stop(self):
        system = initialize_system(self.settings_for('--no-persist', '--tick-interval', '10',
                                                     '--snapshot-interval', '10'))
        start_background_jobs(system)
        self.assertTrue(system.market.is_ticking)
        self.assertTrue(system.snapshots.running)
        shutdown_system(system)
        self.assertFalse(system.market.is_ticking)
        self.assertFalse(system.snapshots.running)

    def test_holdings_survive_restart(self):
        settings = self.settings_for('--data-dir', self.temp_dir.name)
        system = initialize_system(settings)
        self.assertIsInstance(system.repository, CSVRepository)
        system.interface.handle_command("login alice")
        with patch('portfolio.trading_interface.print_success'):
            system.interface.handle_command("buy alice AAPL 10")
        shutdown_system(system)

        restarted = initialize_system(self.settings_for('--data-dir', self.temp_dir.name))
        holding = restarted.exchange.get_account("alice").ledger.get_holding("AAPL")
        self.assertEqual(holding.quantity, 10)
        self.assertEqual(holding.avg_price, Decimal('170.00'))
        self.assertEqual(len(restarted.exchange.transaction_history("alice")), 1)

    def test_corrupt_holdings_dump_does_not_stop_startup(self):
        (Path(self.temp_dir.name) / "portfolios.csv").write_text(
            "bob,AAPL,5,NaN\nbob,TSLA,1,sNaN\nbob,MSFT,5,300\n", encoding='utf-8'
        )
        system = initialize_system(self.settings_for('--data-dir', self.temp_dir.name))
        bob = system.exchange.get_account("bob")
        self.assertEqual(list(bob.ledger.holdings_snapshot()), ["MSFT"])

    def test_shutdown_save_failure_reported(self):
        system = initialize_system(self.settings_for('--no-persist'))
        with patch.object(system.repository, 'dump_holdings', side_effect=PersistenceWriteError("gone")):
            shutdown_system(system)
        trading_script.print_error.assert_called_once()


class TestCommandLoop(TradingScriptTestCase):
    """Test the read-eval loop."""

    def test_stops_on_exit(self):
        interface = MagicMock()
        interface.handle_command.side_effect = [True, False]
        with patch('builtins.input', side_effect=["market", "exit", "never read"]):
            run_command_loop(interface)
        self.assertEqual(interface.handle_command.call_count, 2)

    def test_stops_on_eof(self):
        interface = MagicMock()
        interface.handle_command.return_value = True
        with patch('builtins.input', side_effect=["help", EOFError]), patch('builtins.print'):
            run_command_loop(interface)
        interface.handle_command.assert_called_once_with("help")

    def test_stops_on_keyboard_interrupt(self):
        interface = MagicMock()
        with patch('builtins.input', side_effect=KeyboardInterrupt):
            run_command_loop(interface)
        interface.handle_command.assert_not_called()
        trading_script.print_warning.assert_called_once()


if __name__ == '__main__':
    unittest.main()
