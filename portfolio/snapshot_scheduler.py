"""
Periodic portfolio valuation.

Every cycle values each account (holdings at the current market price plus
cash) and appends the result to the account's valuation history.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict

from config.constants import DEFAULT_SNAPSHOT_INTERVAL_SECONDS
from data.repositories.base_repository import RepositoryError
from market_data.market import Market
from portfolio.exchange import Exchange
from scheduler.scheduler_core import RecurringJob

logger = logging.getLogger(__name__)

SNAPSHOT_JOB_ID = 'portfolio_snapshot'


class SnapshotScheduler:
    """Runs take_all_snapshots() on a RecurringJob."""

    def __init__(self, exchange: Exchange, market: Market, autosave_holdings: bool = False):
        """Initialize the scheduler.

        Args:
            exchange: Exchange whose accounts are valued
            market: Market providing current prices
            autosave_holdings: Also write the holdings dump after every cycle
        """
        self.exchange = exchange
        self.market = market
        self.autosave_holdings = autosave_holdings
        self._job = RecurringJob(SNAPSHOT_JOB_ID, self.take_all_snapshots, name='Portfolio snapshot')

    def take_all_snapshots(self) -> Dict[str, Decimal]:
        """Value every account once and record the snapshot.

        Returns:
            Mapping of user id to recorded total value
        """
        taken_at = datetime.now()
        totals: Dict[str, Decimal] = {}

        for account in self.exchange.list_accounts():
            total = self.exchange.total_value(account)
            account.ledger.record_valuation(total, timestamp=taken_at)
            totals[account.user_id] = total

        logger.debug(f"Recorded {len(totals)} portfolio snapshots")

        if self.autosave_holdings:
            try:
                self.exchange.save_holdings()
            except RepositoryError as e:
                logger.error(f"Holdings autosave failed: {e}")

        return totals

    def start(self, interval_seconds: float = DEFAULT_SNAPSHOT_INTERVAL_SECONDS) -> bool:
        return self._job.start(interval_seconds)

    def stop(self) -> None:
        """Stop snapshotting. Idempotent; the in-flight cycle finishes."""
        self._job.stop()

    @property
    def running(self) -> bool:
        return self._job.running
