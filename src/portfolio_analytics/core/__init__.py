"""Core utilities and shared functionality."""

from portfolio_analytics.core.timezone import (
    now_local,
    today_local,
    to_local,
    trade_date,
)
from portfolio_analytics.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    LedgerIntegrityError,
    UpstreamDataError,
    InsufficientHistoryError,
)

__all__ = [
    "now_local",
    "today_local",
    "to_local",
    "trade_date",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "LedgerIntegrityError",
    "UpstreamDataError",
    "InsufficientHistoryError",
]
