"""Risk metrics service with an in-memory TTL cache."""

import asyncio
import logging
import time
from typing import Callable, Optional

from portfolio_analytics.config.settings import get_settings
from portfolio_analytics.domain.views import RiskMetrics
from portfolio_analytics.services.market_data_service import MarketDataService
from portfolio_analytics.services.risk_analytics import risk_metrics
from portfolio_analytics.services.sync_orchestrator import (
    CancellationToken,
    CycleResult,
    SyncOrchestrator,
    UniverseSource,
)

logger = logging.getLogger(__name__)


async def _no_tickers() -> list[str]:
    return []


class RiskService:
    """
    Computes risk snapshots for tickers and caches them for a TTL.

    History, benchmark and fundamentals come through the market data
    service; every upstream failure degrades to a missing input, and any
    unexpected error yields the neutral snapshot.
    """

    def __init__(
        self,
        market_data: MarketDataService,
        universe: Optional[UniverseSource] = None,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        settings = get_settings()
        self._market = market_data
        self._ttl = settings.risk_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._benchmark = settings.benchmark_ticker
        self._cache: dict[str, tuple[float, RiskMetrics]] = {}
        self._orchestrator = SyncOrchestrator(
            name="RiskWarmUp",
            worker=self.refresh,
            universe=universe or _no_tickers,
        )

    @property
    def orchestrator(self) -> SyncOrchestrator:
        return self._orchestrator

    async def get_risk_metrics(self, ticker: str) -> RiskMetrics:
        """Cached snapshot if still fresh, otherwise a recomputed one."""
        ticker = ticker.upper()
        cached = self._cache.get(ticker)
        if cached and self._clock() - cached[0] < self._ttl:
            return cached[1]

        try:
            metrics = await self.compute(ticker)
        except Exception as e:
            logger.error("Error calculating risk metrics for %s: %s", ticker, e)
            return RiskMetrics.neutral()

        self._cache[ticker] = (self._clock(), metrics)
        return metrics

    async def refresh(self, ticker: str) -> RiskMetrics:
        """
        Recompute and cache a snapshot, bypassing the TTL.

        Unlike get_risk_metrics this lets errors propagate, so a warm-up
        cycle can count and retry the failing ticker.
        """
        ticker = ticker.upper()
        metrics = await self.compute(ticker)
        self._cache[ticker] = (self._clock(), metrics)
        return metrics

    async def compute(self, ticker: str) -> RiskMetrics:
        """Fetch inputs concurrently and compute a fresh snapshot."""
        settings = get_settings()
        prices = await self._market.price_history(ticker)
        if len(prices) < settings.min_history_points:
            logger.info("%s has only %d closes, returning neutral risk", ticker, len(prices))
            return RiskMetrics.neutral()

        provider = self._market.provider
        benchmark, fundamentals, quote, consensus = await asyncio.gather(
            self._market.price_history(self._benchmark),
            provider.get_fundamentals(ticker),
            provider.get_quote(ticker),
            provider.get_analyst_consensus(ticker),
            return_exceptions=True,
        )
        inputs = {
            "benchmark": benchmark,
            "fundamentals": fundamentals,
            "quote": quote,
            "consensus": consensus,
        }
        for name, value in inputs.items():
            if isinstance(value, Exception):
                logger.warning("Could not fetch %s for %s: %s", name, ticker, value)
                inputs[name] = None

        quote = inputs["quote"]
        return risk_metrics(
            prices,
            benchmark=inputs["benchmark"],
            fundamentals=inputs["fundamentals"],
            consensus=inputs["consensus"],
            current_price=quote.price if quote else None,
            risk_free_rate=settings.risk_free_rate,
            trading_days=settings.trading_days_per_year,
            min_history=settings.min_history_points,
        )

    def invalidate(self, ticker: Optional[str] = None) -> None:
        """Drop one cached snapshot, or all of them."""
        if ticker is None:
            self._cache.clear()
        else:
            self._cache.pop(ticker.upper(), None)

    async def warm_up(
        self,
        batch_size: Optional[int] = None,
        interval_seconds: Optional[float] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> CycleResult:
        """Recompute snapshots for the whole universe through the orchestrator."""
        settings = get_settings()
        return await self._orchestrator.run_full_cycle(
            batch_size or settings.sync_batch_size,
            settings.sync_interval_seconds if interval_seconds is None else interval_seconds,
            cancel_token,
        )
