"""
Background Task Scheduler
=========================

Uses APScheduler to run the platform's periodic jobs (price ticks and
portfolio snapshots).

Usage:
    from scheduler import RecurringJob

    job = RecurringJob('price_tick', market.tick_all)
    job.start(3)
    ...
    job.stop()
"""

from scheduler.scheduler_core import (
    RecurringJob,
    create_scheduler,
    log_job_execution,
    get_job_logs,
    clear_job_logs
)

__all__ = [
    'RecurringJob',
    'create_scheduler',
    'log_job_execution',
    'get_job_logs',
    'clear_job_logs'
]
