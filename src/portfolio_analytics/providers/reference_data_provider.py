"""Reference data provider protocol."""

from typing import Optional, Protocol

from portfolio_analytics.domain.models import PricePoint
from portfolio_analytics.domain.views import (
    Quote,
    Fundamentals,
    AnalystConsensus,
    CalendarEvent,
)


class ReferenceDataProvider(Protocol):
    """
    Protocol for the market data client.

    Every call may hit the network and may fail; callers catch failures
    at the call site and degrade the affected ticker rather than the batch.
    """

    async def get_historical_closes(self, ticker: str, years_back: int = 1) -> list[PricePoint]:
        """
        Fetch daily closes for a ticker.

        Returns points ordered by ascending date.
        """
        ...

    async def get_fx_series(self, pair: str, years_back: int = 1) -> list[PricePoint]:
        """
        Fetch daily FX rates for a pair like "USD/EUR".

        Returns points ordered by ascending date, ``ticker`` set to the pair.
        """
        ...

    async def get_quote(self, ticker: str) -> Optional[Quote]:
        """Fetch the latest price and currency of a ticker."""
        ...

    async def get_fundamentals(self, ticker: str) -> Optional[Fundamentals]:
        """Fetch approximate balance-sheet and income aggregates."""
        ...

    async def get_analyst_consensus(self, ticker: str) -> Optional[AnalystConsensus]:
        """Fetch recommendation and mean target price."""
        ...

    async def get_calendar_events(self, ticker: str) -> list[CalendarEvent]:
        """Fetch upcoming and recent corporate calendar entries."""
        ...
