"""
Scheduler Core - APScheduler Configuration and Management
==========================================================

Provides the recurring background jobs used by the market (price ticks) and
by the portfolio snapshotter. Each RecurringJob owns its own
BackgroundScheduler so the two schedules can be started and stopped
independently.
"""

import logging
import threading
import time
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Optional

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from config.constants import MAX_JOB_LOG_ENTRIES

logger = logging.getLogger(__name__)

# Job execution log (in-memory, last N executions per job)
_job_logs: Dict[str, Deque[Dict[str, Any]]] = {}
_job_logs_lock = threading.Lock()


def log_job_execution(job_id: str, success: bool, message: str, duration_ms: int = 0) -> None:
    """Log a job execution result."""
    log_entry = {
        'timestamp': datetime.now(timezone.utc),
        'success': success,
        'message': message,
        'duration_ms': duration_ms
    }

    with _job_logs_lock:
        if job_id not in _job_logs:
            _job_logs[job_id] = deque(maxlen=MAX_JOB_LOG_ENTRIES)
        _job_logs[job_id].appendleft(log_entry)


def get_job_logs(job_id: str, limit: int = 10) -> List[Dict[str, Any]]:
    """Get recent execution logs for a job, newest first.

    Args:
        job_id: The job id
        limit: Maximum number of logs to return

    Returns:
        List of log entries with keys: timestamp, success, message, duration_ms
    """
    with _job_logs_lock:
        logs = list(_job_logs.get(job_id, ()))
    return logs[:limit]


def clear_job_logs(job_id: Optional[str] = None) -> None:
    with _job_logs_lock:
        if job_id is None:
            _job_logs.clear()
        else:
            _job_logs.pop(job_id, None)


def create_scheduler() -> BackgroundScheduler:
    """Create a background scheduler with non-overlapping job defaults."""
    jobstores = {
        'default': MemoryJobStore()
    }
    executors = {
        'default': ThreadPoolExecutor(max_workers=1)
    }
    job_defaults = {
        'coalesce': True,  # Combine multiple missed executions into one
        'max_instances': 1,  # A cycle still running when the next is due causes a skip
        'misfire_grace_time': None
    }

    return BackgroundScheduler(
        jobstores=jobstores,
        executors=executors,
        job_defaults=job_defaults
    )


class RecurringJob:
    """A cancellable periodic task.

    ``func`` runs every ``interval_seconds`` on a dedicated background
    scheduler. Exceptions raised by ``func`` are logged and recorded in the
    job's execution log; the schedule keeps running.
    """

    def __init__(self, job_id: str, func: Callable[[], Any], name: Optional[str] = None):
        self.job_id = job_id
        self.name = name or job_id
        self._func = func
        self._scheduler: Optional[BackgroundScheduler] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        with self._lock:
            return self._scheduler is not None and self._scheduler.running

    def run_once(self) -> bool:
        """Execute one cycle in the calling thread.

        Returns:
            True if the cycle completed without raising
        """
        start_time = time.time()
        try:
            result = self._func()
        except Exception as e:
            duration_ms = int((time.time() - start_time) * 1000)
            message = f"Error: {e}"
            log_job_execution(self.job_id, success=False, message=message, duration_ms=duration_ms)
            logger.error(f"{self.name} cycle failed: {e}", exc_info=True)
            return False

        duration_ms = int((time.time() - start_time) * 1000)
        message = str(result) if result is not None else "ok"
        log_job_execution(self.job_id, success=True, message=message, duration_ms=duration_ms)
        logger.debug(f"{self.name} cycle completed in {duration_ms}ms")
        return True

    def start(self, interval_seconds: float) -> bool:
        """Start the schedule.

        Returns:
            True if started, False if already running

        Raises:
            ValueError: If interval_seconds is not positive
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")

        with self._lock:
            if self._scheduler is not None and self._scheduler.running:
                logger.info(f"{self.name} already running")
                return False

            scheduler = create_scheduler()
            scheduler.add_job(
                self.run_once,
                trigger=IntervalTrigger(seconds=interval_seconds),
                id=self.job_id,
                name=self.name,
                replace_existing=True,
                max_instances=1,
                coalesce=True
            )
            scheduler.start()
            self._scheduler = scheduler

        logger.info(f"{self.name} started (every {interval_seconds}s)")
        return True

    def stop(self) -> None:
        """Stop the schedule, letting an in-flight cycle finish.

        Safe to call repeatedly or before start().
        """
        with self._lock:
            scheduler = self._scheduler
            self._scheduler = None

        if scheduler is not None and scheduler.running:
            scheduler.shutdown(wait=True)
            logger.info(f"{self.name} stopped")

    def __repr__(self) -> str:
        return f"RecurringJob(job_id={self.job_id!r}, running={self.running})"
