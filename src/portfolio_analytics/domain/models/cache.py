"""Cache models for derived portfolio state."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


@dataclass
class PnlCacheEntry:
    """
    Unrealized PnL of a portfolio on one trading day, in reporting currency.

    IMPORTANT: Never edit directly; always recompute from ledger and prices.
    Unique per (portfolio_id, date).
    """

    portfolio_id: str
    date: date
    pnl: Decimal = field(default_factory=lambda: Decimal("0"))
    calculated_at: Optional[datetime] = field(default=None)


@dataclass
class PricePoint:
    """Observed close (or FX rate) for a ticker on a date."""

    ticker: str
    date: date
    close: Decimal
