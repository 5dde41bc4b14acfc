"""Timezone utilities for the scheduler / trade-date calendar."""

from datetime import date, datetime

import pytz

from portfolio_analytics.config.settings import get_settings


def local_tz() -> pytz.BaseTzInfo:
    """Return the configured scheduler timezone."""
    return pytz.timezone(get_settings().scheduler_timezone)


def now_local() -> datetime:
    """Return current time in the scheduler timezone."""
    return datetime.now(local_tz())


def today_local() -> date:
    """Return today's calendar date in the scheduler timezone."""
    return now_local().date()


def to_local(dt: datetime) -> datetime:
    """Convert a datetime to the scheduler timezone."""
    tz = local_tz()
    if dt.tzinfo is None:
        # Assume naive datetime is already local
        return tz.localize(dt)
    return dt.astimezone(tz)


def trade_date(dt: datetime) -> date:
    """Return the local calendar date a timestamp falls on."""
    return to_local(dt).date()
