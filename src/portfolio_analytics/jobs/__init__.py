"""Background job scheduling."""

from portfolio_analytics.jobs.scheduler import Scheduler, next_run_after, pnl_job_for

__all__ = [
    "Scheduler",
    "next_run_after",
    "pnl_job_for",
]
