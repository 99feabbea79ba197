"""
Market of simulated instruments.

The Market owns every registered PriceSeries and drives the periodic price
tick on a RecurringJob.
"""

import logging
import threading
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

from market_data.price_series import PriceSeries
from scheduler.scheduler_core import RecurringJob

logger = logging.getLogger(__name__)

PRICE_TICK_JOB_ID = 'price_tick'


class Market:
    """Registry of instruments plus the auto-tick job."""

    def __init__(self, instruments: Optional[Iterable[PriceSeries]] = None):
        self._instruments: Dict[str, PriceSeries] = OrderedDict()
        self._lock = threading.Lock()
        self._tick_job = RecurringJob(PRICE_TICK_JOB_ID, self.tick_all, name='Price tick')
        for instrument in instruments or ():
            self.register(instrument)

    @classmethod
    def from_configs(cls, instrument_configs: Iterable[Dict[str, str]]) -> 'Market':
        """Build a market from ``{'symbol', 'name', 'price'}`` dicts."""
        return cls(
            PriceSeries(config['symbol'], config.get('name', config['symbol']), config['price'])
            for config in instrument_configs
        )

    def register(self, instrument: PriceSeries) -> None:
        """Add an instrument.

        Raises:
            ValueError: If the symbol is already registered
        """
        with self._lock:
            if instrument.symbol in self._instruments:
                raise ValueError(f"Instrument {instrument.symbol} already registered")
            self._instruments[instrument.symbol] = instrument
        logger.debug(f"Registered {instrument.symbol} ({instrument.name}) at {instrument.current_price()}")

    def lookup(self, symbol: str) -> Optional[PriceSeries]:
        """Find an instrument by symbol (case-insensitive)."""
        if not symbol:
            return None
        with self._lock:
            return self._instruments.get(symbol.strip().upper())

    def list_all(self) -> List[PriceSeries]:
        """All instruments in registration order."""
        with self._lock:
            return list(self._instruments.values())

    def tick_all(self) -> int:
        """Run one tick cycle over every instrument.

        Returns:
            Number of instruments ticked
        """
        instruments = self.list_all()
        for instrument in instruments:
            instrument.tick()
        return len(instruments)

    def start_auto_tick(self, interval_seconds: float) -> bool:
        """Tick all instruments every ``interval_seconds``.

        A cycle still running when the next one is due causes that next
        cycle to be skipped.
        """
        return self._tick_job.start(interval_seconds)

    def stop(self) -> None:
        """Stop auto-ticking. Idempotent; no-op if never started."""
        self._tick_job.stop()

    @property
    def is_ticking(self) -> bool:
        return self._tick_job.running

    def __len__(self) -> int:
        with self._lock:
            return len(self._instruments)

    def __contains__(self, symbol: str) -> bool:
        return self.lookup(symbol) is not None
