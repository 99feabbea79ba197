"""
Market data module for the simulated market.

This module provides:
- PriceSeries: One instrument's live price and bounded history
- Market: Instrument registry and periodic price ticking
"""

from .price_series import PriceSeries
from .market import Market, PRICE_TICK_JOB_ID

__all__ = [
    'PriceSeries',
    'Market',
    'PRICE_TICK_JOB_ID'
]
