"""PnL cache repository protocol."""

from datetime import date
from typing import Protocol, Optional

from portfolio_analytics.domain.models import PnlCacheEntry


class PnlCacheRepository(Protocol):
    """Interface for the per-day PnL cache."""

    def upsert(self, entry: PnlCacheEntry) -> PnlCacheEntry:
        """Insert or update the entry for (portfolio_id, date)."""
        ...

    def get_series(
        self,
        portfolio_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[PnlCacheEntry]:
        """Cached entries for a portfolio, ascending by date."""
        ...

    def delete_except(
        self,
        portfolio_id: str,
        date_from: date,
        date_to: date,
        keep: set[date],
    ) -> int:
        """Delete entries in [date_from, date_to] whose date is not in ``keep``."""
        ...
