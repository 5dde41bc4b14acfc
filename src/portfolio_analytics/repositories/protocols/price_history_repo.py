"""Price history repository protocol."""

from datetime import date
from decimal import Decimal
from typing import Protocol, Optional, Iterable

from portfolio_analytics.domain.models import PricePoint


class PriceHistoryRepository(Protocol):
    """Interface for stored daily closes and FX rates."""

    def get_series(
        self,
        ticker: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> dict[date, Decimal]:
        """Closes for a ticker keyed by date, ascending."""
        ...

    def earliest_date(self, ticker: str) -> Optional[date]:
        """First stored date for a ticker, if any."""
        ...

    def latest_date(self, ticker: str) -> Optional[date]:
        """Last stored date for a ticker, if any."""
        ...

    def upsert_many(self, points: Iterable[PricePoint]) -> int:
        """Insert or overwrite closes; returns number of rows written."""
        ...
