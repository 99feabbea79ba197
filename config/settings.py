"""Configuration management system."""

from __future__ import annotations

import copy
import os
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Any, List, Optional
import logging

from .constants import (
    DEFAULT_DATA_DIR,
    DEFAULT_INSTRUMENTS,
    DEFAULT_LOG_FORMAT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_REPOSITORY_TYPE,
    DEFAULT_SNAPSHOT_INTERVAL_SECONDS,
    DEFAULT_STARTING_CASH,
    DEFAULT_TICK_INTERVAL_SECONDS,
    LOG_FILE,
)

logger = logging.getLogger(__name__)


class Settings:
    """Configuration management class for the trading platform.

    This class handles loading and managing configuration settings:
    built-in defaults, an optional JSON configuration file and
    environment variable overrides, applied in that order.
    """

    def __init__(self, config_file: Optional[str] = None):
        """Initialize settings.

        Args:
            config_file: Optional path to configuration file
        """
        self._config: Dict[str, Any] = {}
        self._config_file = config_file
        self._load_default_config()

        if config_file:
            self.load_from_file(config_file)

        # Load from environment variables
        self._load_from_environment()

    def _load_default_config(self) -> None:
        """Load default configuration values."""
        self._config = {
            'repository': {
                'type': DEFAULT_REPOSITORY_TYPE,
                'csv': {
                    'data_directory': DEFAULT_DATA_DIR
                }
            },
            'market': {
                'tick_interval_seconds': DEFAULT_TICK_INTERVAL_SECONDS,
                'auto_tick': True,
                'instruments': copy.deepcopy(DEFAULT_INSTRUMENTS)
            },
            'accounts': {
                'starting_cash': str(DEFAULT_STARTING_CASH)
            },
            'snapshots': {
                'interval_seconds': DEFAULT_SNAPSHOT_INTERVAL_SECONDS,
                'autosave_holdings': False
            },
            'logging': {
                'level': DEFAULT_LOG_LEVEL,
                'file': LOG_FILE,
                'format': DEFAULT_LOG_FORMAT
            }
        }

    def _load_from_environment(self) -> None:
        """Load configuration from environment variables."""
        if os.getenv('TRADING_REPOSITORY_TYPE'):
            self._config['repository']['type'] = os.getenv('TRADING_REPOSITORY_TYPE')

        if os.getenv('TRADING_DATA_DIR'):
            self._config['repository']['csv']['data_directory'] = os.getenv('TRADING_DATA_DIR')

        if os.getenv('TRADING_TICK_INTERVAL'):
            self._config['market']['tick_interval_seconds'] = float(os.getenv('TRADING_TICK_INTERVAL'))

        if os.getenv('TRADING_SNAPSHOT_INTERVAL'):
            self._config['snapshots']['interval_seconds'] = float(os.getenv('TRADING_SNAPSHOT_INTERVAL'))

        if os.getenv('TRADING_STARTING_CASH'):
            self._config['accounts']['starting_cash'] = os.getenv('TRADING_STARTING_CASH')

        # Development mode
        if os.getenv('TRADING_BOT_DEV', 'false').lower() == 'true':
            self._config['logging']['level'] = 'DEBUG'

    def load_from_file(self, config_file: str) -> None:
        """Load configuration from JSON file.

        Args:
            config_file: Path to configuration file
        """
        config_path = Path(config_file)

        if not config_path.exists():
            logger.warning(f"Configuration file not found: {config_file}")
            return

        try:
            with open(config_path, 'r') as f:
                file_config = json.load(f)

            # Merge with existing configuration
            self._merge_config(self._config, file_config)
            logger.info(f"Loaded configuration from: {config_file}")

        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load configuration file {config_file}: {e}")

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        """Recursively merge configuration dictionaries.

        Args:
            base: Base configuration dictionary
            override: Override configuration dictionary
        """
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Args:
            key: Configuration key (supports dot notation, e.g., 'repository.type')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value by key.

        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
        """
        keys = key.split('.')
        config = self._config

        # Navigate to the parent dictionary
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def get_repository_config(self) -> Dict[str, Any]:
        """Get repository configuration.

        Returns:
            Repository configuration dictionary
        """
        repo_type = self.get('repository.type', DEFAULT_REPOSITORY_TYPE)
        repo_config = self.get(f'repository.{repo_type}', {})

        return {
            'type': repo_type,
            **repo_config
        }

    def get_tick_interval(self) -> float:
        return float(self.get('market.tick_interval_seconds', DEFAULT_TICK_INTERVAL_SECONDS))

    def get_snapshot_interval(self) -> float:
        return float(self.get('snapshots.interval_seconds', DEFAULT_SNAPSHOT_INTERVAL_SECONDS))

    def get_starting_cash(self) -> Decimal:
        """Get the cash balance every new account starts with.

        Returns:
            Starting cash as Decimal (falls back to the default on bad input)
        """
        raw = self.get('accounts.starting_cash', DEFAULT_STARTING_CASH)
        try:
            value = Decimal(str(raw))
        except (InvalidOperation, ValueError):
            logger.warning(f"Invalid starting cash '{raw}', using {DEFAULT_STARTING_CASH}")
            return DEFAULT_STARTING_CASH
        if not value.is_finite() or value < 0:
            logger.warning(f"Unusable starting cash '{raw}', using {DEFAULT_STARTING_CASH}")
            return DEFAULT_STARTING_CASH
        return value

    def get_instrument_configs(self) -> List[Dict[str, Any]]:
        return list(self.get('market.instruments', DEFAULT_INSTRUMENTS))

    def is_development_mode(self) -> bool:
        """Check if development mode is enabled.

        Returns:
            True if development mode is enabled
        """
        return os.getenv('TRADING_BOT_DEV', 'false').lower() == 'true'

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration.

        Returns:
            Logging configuration dictionary
        """
        return self.get('logging', {})

