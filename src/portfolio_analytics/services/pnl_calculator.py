"""Historical PnL reconstruction into the PnL cache."""

import asyncio
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Optional

from dateutil.relativedelta import relativedelta

from portfolio_analytics.config.settings import get_settings
from portfolio_analytics.core.exceptions import (
    LedgerIntegrityError,
    UpstreamDataError,
    ValidationError,
)
from portfolio_analytics.core.timezone import now_local, today_local
from portfolio_analytics.domain.models import PnlCacheEntry
from portfolio_analytics.domain.views import BatchRecomputeResult, PnlPoint, RecomputeResult
from portfolio_analytics.repositories.protocols import (
    PnlCacheRepository,
    PortfolioRepository,
    TransactionRepository,
)
from portfolio_analytics.services.market_data_service import MarketDataService
from portfolio_analytics.services.position_reconstructor import LedgerReplay
from portfolio_analytics.services.sync_orchestrator import CancellationToken

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")

WindowFn = Callable[[str], Optional[tuple[date, date]]]


class PnlCalculator:
    """
    Reconstructs a daily unrealized-PnL series per portfolio.

    For every trading day in a range the ledger is replayed up to that day,
    open positions are marked at that day's close and FX rate, and the
    result is upserted into the PnL cache. Reruns overwrite, never append,
    and rows in the range that the current ledger no longer supports are
    removed.
    """

    def __init__(
        self,
        transaction_repo: TransactionRepository,
        portfolio_repo: PortfolioRepository,
        pnl_cache_repo: PnlCacheRepository,
        market_data: MarketDataService,
        reporting_currency: Optional[str] = None,
    ):
        self._transaction_repo = transaction_repo
        self._portfolio_repo = portfolio_repo
        self._pnl_cache_repo = pnl_cache_repo
        self._market = market_data
        self._reporting_currency = (
            reporting_currency or get_settings().reporting_currency
        ).upper()
        self._locks: dict[str, asyncio.Lock] = {}
        self._batch_running = False

    @property
    def is_running(self) -> bool:
        """True while a daily/weekly/full-history batch is active."""
        return self._batch_running

    async def recompute_range(
        self,
        portfolio_id: str,
        start_date: date,
        end_date: date,
    ) -> RecomputeResult:
        """
        Recompute and upsert the PnL of every trading day in [start_date, end_date].

        Per-ticker and per-currency data failures only degrade the affected
        contributions. LedgerIntegrityError and repository errors propagate.
        """
        if start_date > end_date:
            raise ValidationError(f"start_date {start_date} is after end_date {end_date}")

        async with self._lock_for(portfolio_id):
            return await self._recompute(portfolio_id, start_date, end_date)

    async def _recompute(self, portfolio_id: str, start_date: date, end_date: date) -> RecomputeResult:
        result = RecomputeResult(portfolio_id=portfolio_id, start_date=start_date, end_date=end_date)

        tickers = self._transaction_repo.list_tickers(portfolio_id)
        if not tickers:
            logger.info("Portfolio %s has no positions, clearing range", portfolio_id)
            result.days_removed = self._pnl_cache_repo.delete_except(
                portfolio_id, start_date, end_date, set()
            )
            return result

        closes: dict[str, dict[date, Decimal]] = {}
        for ticker in tickers:
            try:
                closes[ticker] = await self._market.load_closes(ticker, start_date, end_date)
            except UpstreamDataError as e:
                logger.warning("Portfolio %s: no closes for %s: %s", portfolio_id, ticker, e.message)
                closes[ticker] = {}
                result.failed_tickers.append(ticker)

        trading_days = sorted(
            {d for series in closes.values() for d in series if start_date <= d <= end_date}
        )
        if not trading_days:
            logger.info("Portfolio %s has no trading days in range, skipping", portfolio_id)
            return result

        rates: dict[str, dict[date, Decimal]] = {}
        for currency in self._transaction_repo.list_currencies(portfolio_id):
            if currency == self._reporting_currency:
                continue
            try:
                rates[currency] = await self._market.load_fx(currency, start_date, end_date)
            except UpstreamDataError as e:
                logger.warning("Portfolio %s: no FX rates for %s: %s", portfolio_id, currency, e.message)
                rates[currency] = {}
                result.failed_currencies.append(currency)

        replay = LedgerReplay(
            self._transaction_repo.list_by_portfolio(portfolio_id),
            self._reporting_currency,
        )

        written: set[date] = set()
        for day in trading_days:
            positions = replay.advance_to(day)
            if not positions:
                continue

            value = Decimal("0")
            cost = Decimal("0")
            for ticker, position in positions.items():
                price = closes.get(ticker, {}).get(day)
                if price is None or price <= 0:
                    result.price_gaps += 1
                    continue

                rate = self._rate_on(position.currency, day, rates)
                if rate is None:
                    result.fx_gaps += 1
                    continue

                value += position.quantity * price * rate
                cost += position.cost_basis * rate

            # A day whose every contribution is a gap is still stored as 0.00
            self._pnl_cache_repo.upsert(
                PnlCacheEntry(
                    portfolio_id=portfolio_id,
                    date=day,
                    pnl=(value - cost).quantize(_CENTS),
                    calculated_at=now_local(),
                )
            )
            result.days_written += 1
            written.add(day)

        result.days_removed = self._pnl_cache_repo.delete_except(
            portfolio_id, start_date, end_date, written
        )

        logger.info(
            "Portfolio %s: %d days written, %d removed (%s to %s), %d price gaps, %d FX gaps",
            portfolio_id, result.days_written, result.days_removed, start_date, end_date,
            result.price_gaps, result.fx_gaps,
        )
        return result

    def _rate_on(
        self,
        currency: str,
        day: date,
        rates: dict[str, dict[date, Decimal]],
    ) -> Optional[Decimal]:
        """Exact-date rate to the reporting currency; only the reporting currency defaults to 1."""
        currency = (currency or self._reporting_currency).upper()
        if currency == self._reporting_currency:
            return Decimal("1")
        return rates.get(currency, {}).get(day)

    async def daily(self, cancel_token: Optional[CancellationToken] = None) -> BatchRecomputeResult:
        """Recompute the last few days for every portfolio."""
        end = today_local()
        start = end - timedelta(days=get_settings().daily_lookback_days)
        return await self._run_batch("daily", lambda _: (start, end), cancel_token)

    async def weekly(self, cancel_token: Optional[CancellationToken] = None) -> BatchRecomputeResult:
        """Recompute the last months for every portfolio."""
        end = today_local()
        start = end - relativedelta(months=get_settings().weekly_lookback_months)
        return await self._run_batch("weekly", lambda _: (start, end), cancel_token)

    async def full_history(self, cancel_token: Optional[CancellationToken] = None) -> BatchRecomputeResult:
        """Recompute every portfolio from its first transaction date."""
        return await self.recompute_all(cancel_token=cancel_token, label="full_history")

    async def recompute_all(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        cancel_token: Optional[CancellationToken] = None,
        label: str = "on-demand",
    ) -> BatchRecomputeResult:
        """Recompute every portfolio over a range; open start means first transaction date."""
        end = end_date or today_local()

        def window(portfolio_id: str) -> Optional[tuple[date, date]]:
            start = start_date or self.first_transaction_date(portfolio_id)
            return (start, end) if start and start <= end else None

        return await self._run_batch(label, window, cancel_token)

    def first_transaction_date(self, portfolio_id: str) -> Optional[date]:
        transactions = self._transaction_repo.list_by_portfolio(portfolio_id)
        if not transactions:
            return None
        return min(t.trade_date for t in transactions)

    async def _run_batch(
        self,
        label: str,
        window: WindowFn,
        cancel_token: Optional[CancellationToken],
    ) -> BatchRecomputeResult:
        if self._batch_running:
            logger.warning("PnL %s run requested while another run is active, skipping", label)
            return BatchRecomputeResult(rejected=True)

        self._batch_running = True
        batch = BatchRecomputeResult()
        try:
            portfolio_ids = self._portfolio_repo.list_ids()
            logger.info("Running %s PnL update for %d portfolios", label, len(portfolio_ids))

            for portfolio_id in portfolio_ids:
                if cancel_token is not None and cancel_token.cancelled:
                    batch.cancelled = True
                    logger.info("PnL %s run cancelled", label)
                    break

                span = window(portfolio_id)
                if span is None:
                    continue
                try:
                    batch.results.append(await self.recompute_range(portfolio_id, *span))
                except LedgerIntegrityError as e:
                    logger.error("Portfolio %s ledger is inconsistent: %s", portfolio_id, e.message)
                    batch.failed_portfolios[portfolio_id] = e.message
                except Exception as e:
                    logger.error("Portfolio %s PnL recompute failed: %s", portfolio_id, e)
                    batch.failed_portfolios[portfolio_id] = str(e)

            logger.info(
                "PnL %s run finished: %d portfolios, %d days written, %d failed",
                label, len(batch.results), batch.days_written, len(batch.failed_portfolios),
            )
            return batch
        finally:
            self._batch_running = False

    def get_cached_pnl_series(
        self,
        portfolio_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[PnlPoint]:
        """Cached daily PnL of a portfolio, ascending by date."""
        entries = self._pnl_cache_repo.get_series(portfolio_id, date_from, date_to)
        return [PnlPoint(date=e.date, pnl=e.pnl) for e in entries]

    def _lock_for(self, portfolio_id: str) -> asyncio.Lock:
        lock = self._locks.get(portfolio_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[portfolio_id] = lock
        return lock
