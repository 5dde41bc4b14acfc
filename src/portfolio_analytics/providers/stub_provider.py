"""Stub reference data provider for offline/testing use."""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional
import random

from dateutil.relativedelta import relativedelta

from portfolio_analytics.core.timezone import now_local, today_local
from portfolio_analytics.domain.models import PricePoint
from portfolio_analytics.domain.views import (
    Quote,
    Fundamentals,
    AnalystConsensus,
    CalendarEvent,
)


# Deterministic anchor prices for common tickers
_STUB_PRICES: dict[str, tuple[float, str]] = {
    "AAPL": (185.50, "USD"),
    "GOOGL": (142.75, "USD"),
    "MSFT": (378.25, "USD"),
    "AMZN": (178.50, "USD"),
    "TSLA": (248.75, "USD"),
    "NVDA": (485.25, "USD"),
    "META": (505.50, "USD"),
    "^GSPC": (4850.00, "USD"),
    "SAN.MC": (3.85, "EUR"),
    "ITX.MC": (39.60, "EUR"),
    "BBVA.MC": (8.70, "EUR"),
}

_STUB_FX: dict[str, float] = {
    "USD/EUR": 0.92,
    "GBP/EUR": 1.16,
    "CHF/EUR": 1.05,
}


class StubReferenceDataProvider:
    """
    Stub provider with deterministic fake data for offline operation.

    Each ticker gets its own random walk over business days, seeded from
    the ticker name so repeated calls return identical series.
    """

    def __init__(self, seed: int = 42, as_of: Optional[date] = None):
        """Initialize with optional random seed and end date for reproducibility."""
        self._seed = seed
        self._as_of = as_of

    async def get_historical_closes(self, ticker: str, years_back: int = 1) -> list[PricePoint]:
        """Return a business-day random walk ending today."""
        ticker = ticker.upper()
        anchor, _ = _STUB_PRICES.get(ticker, (self._anchor_for(ticker), "USD"))
        return self._walk(ticker, anchor, years_back, daily_sigma=0.015)

    async def get_fx_series(self, pair: str, years_back: int = 1) -> list[PricePoint]:
        """Return a low-volatility business-day walk for the pair."""
        pair = pair.upper()
        anchor = _STUB_FX.get(pair, 1.0)
        return self._walk(pair, anchor, years_back, daily_sigma=0.003)

    async def get_quote(self, ticker: str) -> Optional[Quote]:
        """Return the last close of the stub series as the current price."""
        ticker = ticker.upper()
        closes = await self.get_historical_closes(ticker, 1)
        if not closes:
            return None
        _, currency = _STUB_PRICES.get(ticker, (0.0, "USD"))
        return Quote(
            ticker=ticker,
            price=float(closes[-1].close),
            currency=currency,
            as_of=now_local(),
        )

    async def get_fundamentals(self, ticker: str) -> Optional[Fundamentals]:
        """Return plausible large-cap aggregates."""
        rng = self._rng_for(ticker.upper() + ":fundamentals")
        market_cap = rng.uniform(5e9, 3e12)
        total_debt = market_cap * rng.uniform(0.0, 0.3)
        total_cash = market_cap * rng.uniform(0.01, 0.2)
        return Fundamentals(
            market_cap=market_cap,
            enterprise_value=market_cap + total_debt - total_cash,
            total_debt=total_debt,
            total_cash=total_cash,
            book_value=market_cap * rng.uniform(0.05, 0.4),
            ebitda=market_cap * rng.uniform(0.02, 0.1),
            total_revenue=market_cap * rng.uniform(0.1, 0.6),
            trailing_pe=rng.uniform(8.0, 60.0),
            free_cashflow=market_cap * rng.uniform(-0.01, 0.05),
            revenue_growth=rng.uniform(-0.05, 0.3),
        )

    async def get_analyst_consensus(self, ticker: str) -> Optional[AnalystConsensus]:
        """Return a consensus with a target near the current price."""
        quote = await self.get_quote(ticker)
        if quote is None:
            return None
        rng = self._rng_for(ticker.upper() + ":consensus")
        return AnalystConsensus(
            recommendation=rng.choice(["strong_buy", "buy", "hold", "sell"]),
            target_price=round(quote.price * rng.uniform(0.85, 1.3), 2),
            number_of_analysts=rng.randint(5, 45),
        )

    async def get_calendar_events(self, ticker: str) -> list[CalendarEvent]:
        """Return one confirmed earnings release and one ex-dividend date."""
        ticker = ticker.upper()
        rng = self._rng_for(ticker + ":calendar")
        today = self._end_date()
        earnings_date = today + timedelta(days=rng.randint(5, 80))
        ex_date = today + timedelta(days=rng.randint(5, 80))
        return [
            CalendarEvent(
                ticker=ticker,
                event_type="EARNINGS_RELEASE",
                title=f"{ticker} Earnings Release",
                date=earnings_date.isoformat(),
                is_confirmed=True,
                eps=round(rng.uniform(0.2, 5.0), 2),
            ),
            CalendarEvent(
                ticker=ticker,
                event_type="DIVIDEND",
                title=f"{ticker} Ex-Dividend Date",
                date=ex_date.isoformat(),
                is_confirmed=True,
                dividend=round(rng.uniform(0.05, 1.5), 2),
            ),
        ]

    def _end_date(self) -> date:
        return self._as_of or today_local()

    def _rng_for(self, key: str) -> random.Random:
        # str hashes are salted per process; derive a stable seed instead
        return random.Random(self._seed * 1_000_003 + sum(ord(c) * (i + 1) for i, c in enumerate(key)))

    def _anchor_for(self, ticker: str) -> float:
        return 20 + self._rng_for(ticker + ":anchor").random() * 280

    def _walk(
        self,
        ticker: str,
        anchor: float,
        years_back: int,
        daily_sigma: float,
    ) -> list[PricePoint]:
        end = self._end_date()
        start = end - relativedelta(years=years_back)
        rng = self._rng_for(ticker)

        points: list[PricePoint] = []
        price = anchor
        current = start
        while current <= end:
            if current.weekday() < 5:
                price = max(price * (1 + rng.gauss(0, daily_sigma)), 0.01)
                points.append(
                    PricePoint(
                        ticker=ticker,
                        date=current,
                        close=Decimal(str(round(price, 6))),
                    )
                )
            current += timedelta(days=1)
        return points
