"""View models for reference data returned by providers."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Quote:
    """Latest price of a ticker."""

    ticker: str
    price: float
    currency: str
    as_of: Optional[datetime] = None


@dataclass
class Fundamentals:
    """
    Aggregate fundamentals as exposed by the data vendor.

    These are headline aggregates, not filed balance-sheet line items;
    the solvency model derives its inputs from them by approximation.
    """

    market_cap: float = 0.0
    enterprise_value: float = 0.0
    total_debt: float = 0.0
    total_cash: float = 0.0
    book_value: float = 0.0
    ebitda: float = 0.0
    total_revenue: float = 0.0
    trailing_pe: float = 0.0
    free_cashflow: float = 0.0
    revenue_growth: Optional[float] = None


@dataclass
class AnalystConsensus:
    """Sell-side recommendation summary."""

    recommendation: Optional[str] = None
    target_price: Optional[float] = None
    number_of_analysts: Optional[int] = None


@dataclass
class CalendarEvent:
    """Raw corporate calendar entry from the provider."""

    ticker: str
    event_type: str
    title: str
    date: str
    is_confirmed: bool = False
    description: Optional[str] = None
    eps: Optional[float] = None
    dividend: Optional[float] = None
