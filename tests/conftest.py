"""
Pytest configuration and fixtures for the portfolio analytics tests.

This module provides:
- In-memory SQLite database fixtures
- Factory helpers for portfolios, transactions and price series
- Deterministic and failing reference data providers
- Time helpers for the scheduler timezone
- Service and repository fixtures
"""

import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Callable, Iterable, Optional

import pytest
import pytz
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session

from portfolio_analytics.config.settings import Settings, set_settings, reset_settings
from portfolio_analytics.repositories.sqlalchemy.database import Base
# Import ORM models to register them with Base before creating tables
from portfolio_analytics.repositories.sqlalchemy import orm_models  # noqa: F401
from portfolio_analytics.repositories.sqlalchemy import (
    SqlAlchemyPortfolioRepository,
    SqlAlchemyTransactionRepository,
    SqlAlchemyPriceHistoryRepository,
    SqlAlchemyPnlCacheRepository,
    SqlAlchemyEventRepository,
)
from portfolio_analytics.domain.models import (
    Portfolio,
    PricePoint,
    Transaction,
    TransactionType,
)
from portfolio_analytics.domain.views import (
    AnalystConsensus,
    CalendarEvent,
    Fundamentals,
    Quote,
)
from portfolio_analytics.services import (
    MarketDataService,
    PnlCalculator,
    PositionReconstructor,
)


MADRID_TZ = pytz.timezone("Europe/Madrid")


# =============================================================================
# SETTINGS
# =============================================================================


@pytest.fixture(autouse=True)
def test_settings(tmp_path) -> Settings:
    """Isolated settings: no .env file, temp data dir, no pacing delays."""
    settings = Settings(
        _env_file=None,
        data_dir=tmp_path,
        sync_interval_seconds=0.0,
        sync_startup_delay_seconds=0.0,
    )
    set_settings(settings)
    yield settings
    reset_settings()


# =============================================================================
# TIMEZONE HELPERS
# =============================================================================


def madrid_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in the scheduler timezone (Europe/Madrid)."""
    return MADRID_TZ.localize(datetime(year, month, day, hour, minute, second))


def business_days(start: date, end: date) -> list[date]:
    """Weekdays in [start, end]."""
    days = []
    current = start
    while current <= end:
        if current.weekday() < 5:
            days.append(current)
        current += timedelta(days=1)
    return days


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Session:
    """Create test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================


@pytest.fixture
def portfolio_repo(test_session) -> SqlAlchemyPortfolioRepository:
    """Provide test PortfolioRepository."""
    return SqlAlchemyPortfolioRepository(test_session)


@pytest.fixture
def transaction_repo(test_session) -> SqlAlchemyTransactionRepository:
    """Provide test TransactionRepository."""
    return SqlAlchemyTransactionRepository(test_session)


@pytest.fixture
def price_repo(test_session) -> SqlAlchemyPriceHistoryRepository:
    """Provide test PriceHistoryRepository."""
    return SqlAlchemyPriceHistoryRepository(test_session)


@pytest.fixture
def pnl_cache_repo(test_session) -> SqlAlchemyPnlCacheRepository:
    """Provide test PnlCacheRepository."""
    return SqlAlchemyPnlCacheRepository(test_session)


@pytest.fixture
def event_repo(test_session) -> SqlAlchemyEventRepository:
    """Provide test EventRepository."""
    return SqlAlchemyEventRepository(test_session)


# =============================================================================
# REFERENCE DATA FIXTURES
# =============================================================================


class DeterministicReferenceProvider:
    """
    Deterministic reference data provider for testing.

    Serves exactly the series it was given and records every call.
    Tickers listed in ``failing`` raise ConnectionError on every call.
    """

    def __init__(
        self,
        closes: Optional[dict[str, dict[date, Decimal]]] = None,
        fx: Optional[dict[str, dict[date, Decimal]]] = None,
        quotes: Optional[dict[str, Quote]] = None,
        fundamentals: Optional[dict[str, Fundamentals]] = None,
        consensus: Optional[dict[str, AnalystConsensus]] = None,
        calendar: Optional[dict[str, list[CalendarEvent]]] = None,
        failing: Iterable[str] = (),
    ):
        self.closes = closes or {}
        self.fx = fx or {}
        self.quotes = quotes or {}
        self.fundamentals = fundamentals or {}
        self.consensus = consensus or {}
        self.calendar = calendar or {}
        self.failing = set(failing)
        self.calls: list[tuple[str, str]] = []

    def _check(self, method: str, key: str) -> None:
        self.calls.append((method, key))
        if key in self.failing:
            raise ConnectionError(f"Network unavailable for {key}")

    async def get_historical_closes(self, ticker: str, years_back: int = 1) -> list[PricePoint]:
        self._check("get_historical_closes", ticker)
        series = self.closes.get(ticker, {})
        return [PricePoint(ticker=ticker, date=d, close=c) for d, c in sorted(series.items())]

    async def get_fx_series(self, pair: str, years_back: int = 1) -> list[PricePoint]:
        self._check("get_fx_series", pair)
        series = self.fx.get(pair, {})
        return [PricePoint(ticker=pair, date=d, close=c) for d, c in sorted(series.items())]

    async def get_quote(self, ticker: str) -> Optional[Quote]:
        self._check("get_quote", ticker)
        return self.quotes.get(ticker)

    async def get_fundamentals(self, ticker: str) -> Optional[Fundamentals]:
        self._check("get_fundamentals", ticker)
        return self.fundamentals.get(ticker)

    async def get_analyst_consensus(self, ticker: str) -> Optional[AnalystConsensus]:
        self._check("get_analyst_consensus", ticker)
        return self.consensus.get(ticker)

    async def get_calendar_events(self, ticker: str) -> list[CalendarEvent]:
        self._check("get_calendar_events", ticker)
        return self.calendar.get(ticker, [])

    def call_count(self, method: str, key: Optional[str] = None) -> int:
        return sum(1 for m, k in self.calls if m == method and (key is None or k == key))


class FailingReferenceProvider:
    """Reference data provider that always raises an exception."""

    async def get_historical_closes(self, ticker: str, years_back: int = 1) -> list[PricePoint]:
        raise ConnectionError("Network unavailable")

    async def get_fx_series(self, pair: str, years_back: int = 1) -> list[PricePoint]:
        raise ConnectionError("Network unavailable")

    async def get_quote(self, ticker: str) -> Optional[Quote]:
        raise ConnectionError("Network unavailable")

    async def get_fundamentals(self, ticker: str) -> Optional[Fundamentals]:
        raise ConnectionError("Network unavailable")

    async def get_analyst_consensus(self, ticker: str) -> Optional[AnalystConsensus]:
        raise ConnectionError("Network unavailable")

    async def get_calendar_events(self, ticker: str) -> list[CalendarEvent]:
        raise ConnectionError("Network unavailable")


@pytest.fixture
def deterministic_provider() -> DeterministicReferenceProvider:
    """Provide an empty deterministic provider; tests fill in the series."""
    return DeterministicReferenceProvider()


@pytest.fixture
def failing_provider() -> FailingReferenceProvider:
    """Provide a reference data provider that always fails."""
    return FailingReferenceProvider()


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def reconstructor(transaction_repo) -> PositionReconstructor:
    """Provide test PositionReconstructor."""
    return PositionReconstructor(transaction_repo)


@pytest.fixture
def market_data_service(deterministic_provider, price_repo) -> MarketDataService:
    """Provide test MarketDataService over the deterministic provider."""
    return MarketDataService(
        provider=deterministic_provider,
        price_repo=price_repo,
    )


@pytest.fixture
def pnl_calculator(
    transaction_repo,
    portfolio_repo,
    pnl_cache_repo,
    market_data_service,
) -> PnlCalculator:
    """Provide test PnlCalculator."""
    return PnlCalculator(
        transaction_repo=transaction_repo,
        portfolio_repo=portfolio_repo,
        pnl_cache_repo=pnl_cache_repo,
        market_data=market_data_service,
    )


# =============================================================================
# FACTORY FIXTURES
# =============================================================================


@pytest.fixture
def portfolio_factory(portfolio_repo) -> Callable[..., Portfolio]:
    """Factory for creating test portfolios."""

    def _create_portfolio(name: Optional[str] = None) -> Portfolio:
        if name is None:
            name = f"Test Portfolio {uuid.uuid4().hex[:8]}"
        return portfolio_repo.create(
            Portfolio(portfolio_id=str(uuid.uuid4()), name=name)
        )

    return _create_portfolio


@pytest.fixture
def transaction_factory(transaction_repo) -> Callable[..., Transaction]:
    """Factory for persisting test transactions."""

    def _create_transaction(
        portfolio_id: str,
        txn_type: TransactionType,
        ticker: Optional[str] = None,
        quantity: Decimal = Decimal("0"),
        price: Decimal = Decimal("0"),
        currency: Optional[str] = "USD",
        fees: Decimal = Decimal("0"),
        txn_time: Optional[datetime] = None,
    ) -> Transaction:
        return transaction_repo.create(
            Transaction(
                portfolio_id=portfolio_id,
                txn_time=txn_time or madrid_datetime(2024, 1, 2),
                txn_type=txn_type,
                ticker=ticker,
                quantity=quantity,
                price=price,
                currency=currency,
                fees=fees,
            )
        )

    return _create_transaction


@pytest.fixture
def sample_portfolio(portfolio_factory) -> Portfolio:
    """Create a sample portfolio."""
    return portfolio_factory(name="Long Term")


# =============================================================================
# HELPER FUNCTIONS (exported for use in tests)
# =============================================================================


def assert_decimal_equal(
    actual: Decimal,
    expected: Decimal,
    tolerance: Decimal = Decimal("0.01"),
) -> None:
    """Assert two Decimals are equal within tolerance."""
    diff = abs(actual - expected)
    assert diff <= tolerance, f"Expected {expected}, got {actual} (diff={diff})"


def make_transaction(
    txn_type: TransactionType,
    ticker: Optional[str],
    quantity: str,
    price: str,
    txn_time: datetime,
    portfolio_id: str = "p1",
    currency: Optional[str] = "USD",
    fees: str = "0",
    txn_id: Optional[int] = None,
) -> Transaction:
    """Helper to build an in-memory transaction."""
    return Transaction(
        portfolio_id=portfolio_id,
        txn_time=txn_time,
        txn_type=txn_type,
        ticker=ticker,
        quantity=Decimal(quantity),
        price=Decimal(price),
        currency=currency,
        fees=Decimal(fees),
        txn_id=txn_id,
    )


def constant_series(days: Iterable[date], value: str) -> dict[date, Decimal]:
    """Helper to build a flat close/rate series."""
    return {d: Decimal(value) for d in days}


def store_series(price_repo, ticker: str, series: dict[date, Decimal]) -> None:
    """Helper to persist a close/rate series directly."""
    price_repo.upsert_many(
        PricePoint(ticker=ticker, date=d, close=c) for d, c in series.items()
    )
