"""Market data service for stored close and FX series."""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

from portfolio_analytics.config.settings import get_settings
from portfolio_analytics.core.exceptions import UpstreamDataError
from portfolio_analytics.core.timezone import today_local
from portfolio_analytics.providers.reference_data_provider import ReferenceDataProvider
from portfolio_analytics.repositories.protocols import PriceHistoryRepository

logger = logging.getLogger(__name__)


def fx_pair(currency: str, reporting_currency: str) -> str:
    """Ticker under which the FX series of ``currency`` is stored."""
    return f"{currency.upper()}/{reporting_currency.upper()}"


class MarketDataService:
    """
    Service for historical closes and FX rates.

    Wraps the provider with a persistent price-history store: series are
    refreshed through the provider only when the stored history does not
    cover the requested range, and read back keyed by date.
    """

    def __init__(
        self,
        provider: ReferenceDataProvider,
        price_repo: PriceHistoryRepository,
        reporting_currency: Optional[str] = None,
        history_years: Optional[int] = None,
        max_staleness_days: int = 3,
    ):
        settings = get_settings()
        self._provider = provider
        self._price_repo = price_repo
        self._reporting_currency = (reporting_currency or settings.reporting_currency).upper()
        self._history_years = history_years or settings.price_history_years
        self._max_staleness = timedelta(days=max_staleness_days)

    @property
    def reporting_currency(self) -> str:
        return self._reporting_currency

    @property
    def provider(self) -> ReferenceDataProvider:
        return self._provider

    async def ensure_history(self, ticker: str, start_date: date, end_date: Optional[date] = None) -> int:
        """
        Refresh a ticker's closes when the store does not cover the range.

        Returns the number of rows written (0 when no refresh was needed).
        Raises UpstreamDataError if the provider call fails.
        """
        ticker = ticker.upper()
        if self._is_covered(ticker, start_date, end_date):
            return 0

        years_back = self._years_back(start_date)
        try:
            points = await self._provider.get_historical_closes(ticker, years_back)
        except Exception as e:
            raise UpstreamDataError("get_historical_closes", ticker, str(e)) from e

        written = self._price_repo.upsert_many(points)
        logger.debug("Stored %d closes for %s", written, ticker)
        return written

    async def ensure_fx_history(self, currency: str, start_date: date) -> int:
        """
        Refresh a currency's FX series when none is stored for the range.

        Returns the number of rows written. The reporting currency itself
        never needs a series.
        """
        currency = currency.upper()
        if currency == self._reporting_currency:
            return 0

        pair = fx_pair(currency, self._reporting_currency)
        if self._price_repo.get_series(pair, start_date, None):
            return 0

        years_back = self._years_back(start_date)
        try:
            points = await self._provider.get_fx_series(pair, years_back)
        except Exception as e:
            raise UpstreamDataError("get_fx_series", pair, str(e)) from e

        written = self._price_repo.upsert_many(points)
        logger.debug("Stored %d FX rates for %s", written, pair)
        return written

    async def load_closes(self, ticker: str, start_date: date, end_date: date) -> dict[date, Decimal]:
        """
        Closes for a ticker in [start_date, end_date] keyed by date.

        A failed refresh falls back to whatever is already stored; only when
        nothing is stored does the failure propagate as UpstreamDataError.
        """
        ticker = ticker.upper()
        try:
            await self.ensure_history(ticker, start_date, end_date)
        except UpstreamDataError as e:
            series = self._price_repo.get_series(ticker, start_date, end_date)
            if not series:
                raise
            logger.warning("Using stored closes for %s after refresh failure: %s", ticker, e.message)
            return series
        return self._price_repo.get_series(ticker, start_date, end_date)

    async def load_fx(self, currency: str, start_date: date, end_date: date) -> dict[date, Decimal]:
        """
        FX rates to the reporting currency in [start_date, end_date] keyed by date.

        Returns an empty mapping for the reporting currency itself.
        """
        currency = currency.upper()
        if currency == self._reporting_currency:
            return {}
        await self.ensure_fx_history(currency, start_date)
        return self._price_repo.get_series(
            fx_pair(currency, self._reporting_currency), start_date, end_date
        )

    async def price_history(self, ticker: str, years_back: Optional[int] = None) -> list[float]:
        """
        Ascending closes covering the last ``years_back`` years as floats.

        Used by the risk statistics, which work on plain float sequences.
        """
        years = years_back or self._history_years
        end = today_local()
        start = end - relativedelta(years=years)
        series = await self.load_closes(ticker, start, end)
        return [float(close) for _, close in sorted(series.items())]

    def _is_covered(self, ticker: str, start_date: date, end_date: Optional[date]) -> bool:
        earliest = self._price_repo.earliest_date(ticker)
        if earliest is None or earliest > start_date + self._max_staleness:
            return False
        latest = self._price_repo.latest_date(ticker)
        horizon = min(end_date or today_local(), today_local())
        return latest is not None and latest >= horizon - self._max_staleness

    def _years_back(self, start_date: date) -> int:
        span_days = (today_local() - start_date).days
        needed = span_days // 365 + (1 if span_days % 365 else 0)
        return max(self._history_years, needed)
