"""
Unit tests for the job scheduler.

Tests cover:
- Next wall-clock run time, including DST transitions
- Weekly vs daily PnL job selection
- Startup event sync pacing
- Loop shutdown through stop()
"""

import asyncio
from datetime import timedelta

import pytest
import pytz

from portfolio_analytics.domain.views import BatchRecomputeResult
from portfolio_analytics.jobs.scheduler import Scheduler, next_run_after, pnl_job_for
from portfolio_analytics.services import CycleResult

from tests.conftest import madrid_datetime


class FakePnlCalculator:
    def __init__(self):
        self.calls: list[str] = []

    async def daily(self, cancel_token=None) -> BatchRecomputeResult:
        self.calls.append("daily")
        return BatchRecomputeResult()

    async def weekly(self, cancel_token=None) -> BatchRecomputeResult:
        self.calls.append("weekly")
        return BatchRecomputeResult()


class FakeEventSync:
    def __init__(self):
        self.calls: list[tuple[int, float]] = []

    async def run_full_cycle(self, batch_size=None, interval_seconds=None, cancel_token=None) -> CycleResult:
        self.calls.append((batch_size, interval_seconds))
        return CycleResult(completed=True)


class FakeRiskService:
    def __init__(self, fail: bool = False):
        self.calls = 0
        self.fail = fail

    async def warm_up(self, batch_size=None, interval_seconds=None, cancel_token=None) -> CycleResult:
        self.calls += 1
        if self.fail:
            raise RuntimeError("provider down")
        return CycleResult(completed=True)


# =============================================================================
# SCHEDULE ARITHMETIC
# =============================================================================


class TestNextRunAfter:
    """Tests for wall-clock scheduling."""

    def test_later_today(self):
        """
        GIVEN 03:00 local time
        WHEN I ask for the next 04:00
        THEN it is today at 04:00
        """
        now = madrid_datetime(2024, 3, 10, 3, 0)

        assert next_run_after(now, 4) == madrid_datetime(2024, 3, 10, 4, 0)

    def test_exact_time_rolls_to_tomorrow(self):
        now = madrid_datetime(2024, 3, 10, 4, 0)

        assert next_run_after(now, 4) == madrid_datetime(2024, 3, 11, 4, 0)

    def test_wall_clock_kept_across_dst_change(self):
        """
        GIVEN the day before the spring DST change, after the run hour
        WHEN I ask for the next 04:00
        THEN it is 04:00 local on the change day, 22 hours of real time away
        """
        now = madrid_datetime(2024, 3, 30, 5, 0)

        run_at = next_run_after(now, 4)

        assert run_at.hour == 4
        assert run_at.date().isoformat() == "2024-03-31"
        assert run_at - now == timedelta(hours=22)

    def test_utc_input_is_converted(self):
        now = madrid_datetime(2024, 6, 1, 0, 30).astimezone(pytz.utc)

        assert next_run_after(now, 1) == madrid_datetime(2024, 6, 1, 1, 0)


class TestPnlJobSelection:
    """Tests for daily vs weekly PnL."""

    def test_sunday_runs_weekly(self):
        assert pnl_job_for(madrid_datetime(2024, 3, 10, 4, 0)) == "weekly"

    @pytest.mark.parametrize("day", [4, 5, 6, 7, 8, 9])
    def test_other_days_run_daily(self, day):
        assert pnl_job_for(madrid_datetime(2024, 3, day, 4, 0)) == "daily"


# =============================================================================
# JOBS
# =============================================================================


class TestScheduledJobs:
    """Tests for the individual job triggers."""

    async def test_pnl_job_on_sunday_is_weekly(self):
        pnl = FakePnlCalculator()
        scheduler = Scheduler(
            pnl, FakeEventSync(), FakeRiskService(),
            clock=lambda: madrid_datetime(2024, 3, 10, 4, 0),
        )

        await scheduler.run_pnl_job()

        assert pnl.calls == ["weekly"]

    async def test_startup_event_sync_uses_startup_batch_size(self, test_settings):
        """
        GIVEN the default pacing settings
        WHEN the startup event sync runs
        THEN it uses the startup batch size; the daily run uses the normal one
        """
        events = FakeEventSync()
        scheduler = Scheduler(FakePnlCalculator(), events, FakeRiskService())

        await scheduler.run_events_job(startup=True)
        await scheduler.run_events_job()

        assert events.calls == [
            (test_settings.sync_startup_batch_size, test_settings.sync_interval_seconds),
            (test_settings.sync_batch_size, test_settings.sync_interval_seconds),
        ]


# =============================================================================
# LOOPS
# =============================================================================


class TestRunForever:
    """Tests for the scheduler loops."""

    async def test_loops_run_jobs_until_stopped(self):
        """
        GIVEN a clock one minute before the Sunday PnL run
        WHEN the scheduler runs until stopped
        THEN weekly PnL, startup events and the risk warm-up all ran
        AND a failing risk job does not stop the scheduler
        """
        pnl = FakePnlCalculator()
        events = FakeEventSync()
        risk = FakeRiskService(fail=True)
        sleeps = 0
        scheduler = None

        async def _sleep(seconds: float) -> None:
            nonlocal sleeps
            sleeps += 1
            if sleeps >= 50:
                scheduler.stop()
            await asyncio.sleep(0)

        scheduler = Scheduler(
            pnl, events, risk,
            sleep=_sleep,
            clock=lambda: madrid_datetime(2024, 3, 10, 3, 59),
        )

        await asyncio.wait_for(scheduler.run_forever(), timeout=5)

        assert "weekly" in pnl.calls
        assert len(events.calls) == 1
        assert risk.calls >= 1
        assert scheduler.cancel_token.cancelled is True

    async def test_stop_before_start_exits_immediately(self):
        pnl = FakePnlCalculator()
        events = FakeEventSync()
        scheduler = Scheduler(pnl, events, FakeRiskService())
        scheduler.stop()

        await asyncio.wait_for(scheduler.run_forever(), timeout=5)

        assert pnl.calls == []
        assert events.calls == []
