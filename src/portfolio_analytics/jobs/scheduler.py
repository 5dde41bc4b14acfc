"""Time-of-day scheduler for the background jobs."""

import asyncio
import logging
from datetime import datetime, time, timedelta
from typing import Awaitable, Callable, Optional

from portfolio_analytics.config.settings import get_settings
from portfolio_analytics.core.timezone import local_tz, now_local, to_local
from portfolio_analytics.domain.views import BatchRecomputeResult
from portfolio_analytics.services.event_sync import CorporateEventSync
from portfolio_analytics.services.pnl_calculator import PnlCalculator
from portfolio_analytics.services.risk_service import RiskService
from portfolio_analytics.services.sync_orchestrator import CancellationToken, CycleResult

logger = logging.getLogger(__name__)

SUNDAY = 6


def next_run_after(now: datetime, hour: int, minute: int = 0) -> datetime:
    """Next wall-clock ``hour:minute`` in the scheduler timezone strictly after ``now``."""
    tz = local_tz()
    now = to_local(now)
    candidate_day = now.date()
    while True:
        candidate = tz.localize(datetime.combine(candidate_day, time(hour, minute)))
        if candidate > now:
            return candidate
        candidate_day += timedelta(days=1)


def pnl_job_for(moment: datetime) -> str:
    """Which PnL job a run at ``moment`` performs: weekly on Sunday, daily otherwise."""
    return "weekly" if to_local(moment).weekday() == SUNDAY else "daily"


class Scheduler:
    """
    Drives the PnL, corporate-event and risk warm-up jobs.

    PnL runs at ``pnl_run_hour`` (weekly on Sunday, daily otherwise),
    events at ``events_run_hour`` plus once shortly after startup, and the
    risk warm-up every ``risk_refresh_hours``. All times are wall-clock in
    the scheduler timezone.
    """

    def __init__(
        self,
        pnl_calculator: PnlCalculator,
        event_sync: CorporateEventSync,
        risk_service: RiskService,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = now_local,
    ):
        self._pnl = pnl_calculator
        self._events = event_sync
        self._risk = risk_service
        self._sleep = sleep
        self._clock = clock
        self._cancel_token = CancellationToken()

    @property
    def cancel_token(self) -> CancellationToken:
        return self._cancel_token

    def stop(self) -> None:
        """Ask every loop to stop at its next boundary."""
        self._cancel_token.cancel()

    async def run_pnl_job(self) -> BatchRecomputeResult:
        if pnl_job_for(self._clock()) == "weekly":
            logger.info("Running weekly PnL update")
            return await self._pnl.weekly(self._cancel_token)
        logger.info("Running daily PnL update")
        return await self._pnl.daily(self._cancel_token)

    async def run_events_job(self, startup: bool = False) -> CycleResult:
        settings = get_settings()
        batch_size = settings.sync_startup_batch_size if startup else settings.sync_batch_size
        logger.info("Triggering %s event sync (%d tickers per batch)", "startup" if startup else "daily", batch_size)
        return await self._events.run_full_cycle(
            batch_size,
            settings.sync_interval_seconds,
            self._cancel_token,
        )

    async def run_risk_job(self) -> CycleResult:
        logger.info("Running risk metrics warm-up")
        return await self._risk.warm_up(cancel_token=self._cancel_token)

    async def run_forever(self) -> None:
        """Run all job loops until ``stop`` is called."""
        settings = get_settings()
        logger.info(
            "Scheduler started (%s): PnL at %02d:00, events at %02d:00, risk every %dh",
            settings.scheduler_timezone,
            settings.pnl_run_hour,
            settings.events_run_hour,
            settings.risk_refresh_hours,
        )
        await asyncio.gather(
            self._daily_loop("pnl", settings.pnl_run_hour, self.run_pnl_job),
            self._daily_loop("events", settings.events_run_hour, self.run_events_job),
            self._startup_events(settings.sync_startup_delay_seconds),
            self._interval_loop("risk", settings.risk_refresh_hours * 3600, self.run_risk_job),
        )
        logger.info("Scheduler stopped")

    async def _daily_loop(self, name: str, hour: int, job: Callable[[], Awaitable[object]]) -> None:
        while not self._cancel_token.cancelled:
            now = self._clock()
            run_at = next_run_after(now, hour)
            await self._sleep_until(run_at)
            if self._cancel_token.cancelled:
                break
            await self._run_safely(name, job)

    async def _interval_loop(self, name: str, seconds: float, job: Callable[[], Awaitable[object]]) -> None:
        while not self._cancel_token.cancelled:
            await self._run_safely(name, job)
            await self._sleep_for(seconds)

    async def _startup_events(self, delay_seconds: float) -> None:
        await self._sleep_for(delay_seconds)
        if not self._cancel_token.cancelled:
            await self._run_safely("startup events", lambda: self.run_events_job(startup=True))

    async def _sleep_until(self, run_at: datetime) -> None:
        await self._sleep_for((run_at - self._clock()).total_seconds())

    async def _sleep_for(self, seconds: float, tick: float = 60.0) -> None:
        # Sleep in short ticks so stop() takes effect without waiting a whole day
        remaining = seconds
        while remaining > 0 and not self._cancel_token.cancelled:
            step = min(tick, remaining)
            await self._sleep(step)
            remaining -= step

    async def _run_safely(self, name: str, job: Callable[[], Awaitable[object]]) -> Optional[object]:
        try:
            return await job()
        except Exception as e:
            logger.error("Scheduled %s job failed: %s", name, e)
            return None
