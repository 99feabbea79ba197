"""Configuration management for the trading system."""

from .settings import Settings
from .constants import *

__all__ = [
    'Settings',
    # Constants will be imported via *
]
