"""Data models for the trading platform.

This module contains the core data structures shared by the engine and the
persistence layer.
"""

from .portfolio import Holding, ValuationSnapshot
from .trade import TransactionRecord
from .market_data import PricePoint

__all__ = ['Holding', 'ValuationSnapshot', 'TransactionRecord', 'PricePoint']
