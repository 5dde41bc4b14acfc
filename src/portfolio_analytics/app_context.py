"""Application context for in-process service management.

Wires repositories, the reference data provider and services for one
process. Used by the scheduler entrypoint and by request handlers.
"""

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session

from portfolio_analytics.config.settings import Settings, set_settings, get_settings
from portfolio_analytics.core.timezone import today_local
from portfolio_analytics.repositories.sqlalchemy.database import (
    init_db,
    reset_database,
    get_session,
)
from portfolio_analytics.repositories.sqlalchemy import (
    SqlAlchemyPortfolioRepository,
    SqlAlchemyTransactionRepository,
    SqlAlchemyPriceHistoryRepository,
    SqlAlchemyPnlCacheRepository,
    SqlAlchemyEventRepository,
)
from portfolio_analytics.providers import ReferenceDataProvider, StubReferenceDataProvider
from portfolio_analytics.services import (
    AnalyticsService,
    CorporateEventSync,
    MarketDataService,
    PnlCalculator,
    PositionReconstructor,
    RiskService,
)
from portfolio_analytics.jobs import Scheduler

logger = logging.getLogger(__name__)


class AnalyticsContext:
    """
    Application context providing in-process access to all services.

    Services are created lazily and share one database session.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        provider: Optional[ReferenceDataProvider] = None,
    ):
        """
        Initialize application context.

        Args:
            data_dir: Optional data directory. If not provided, uses default.
            provider: Reference data client. Defaults to the offline stub.
        """
        self._data_dir = data_dir
        self._provider = provider
        self._session: Optional[Session] = None
        self._initialized = False
        self._reset_services()

    def _reset_services(self) -> None:
        self._reconstructor: Optional[PositionReconstructor] = None
        self._market_data: Optional[MarketDataService] = None
        self._pnl_calculator: Optional[PnlCalculator] = None
        self._risk_service: Optional[RiskService] = None
        self._event_sync: Optional[CorporateEventSync] = None
        self._analytics: Optional[AnalyticsService] = None
        self._scheduler: Optional[Scheduler] = None

    def initialize(self, data_dir: Optional[Path] = None) -> None:
        """
        Initialize or reinitialize the context with a data directory.

        Args:
            data_dir: Data directory path. Uses default if not provided.
        """
        if data_dir:
            self._data_dir = data_dir

        if self._data_dir:
            set_settings(Settings(data_dir=self._data_dir))

        reset_database()
        init_db()
        logger.info("Database ready at %s", get_settings().get_database_url())

        self.close()
        self._reset_services()
        self._initialized = True

    @property
    def is_initialized(self) -> bool:
        """Check if context is initialized."""
        return self._initialized

    @property
    def session(self) -> Session:
        """Get or create database session."""
        if self._session is None:
            self._session = get_session()
        return self._session

    @property
    def provider(self) -> ReferenceDataProvider:
        if self._provider is None:
            self._provider = StubReferenceDataProvider()
        return self._provider

    # Repository accessors
    @property
    def portfolio_repo(self) -> SqlAlchemyPortfolioRepository:
        return SqlAlchemyPortfolioRepository(self.session)

    @property
    def transaction_repo(self) -> SqlAlchemyTransactionRepository:
        return SqlAlchemyTransactionRepository(self.session)

    def _price_repo(self) -> SqlAlchemyPriceHistoryRepository:
        return SqlAlchemyPriceHistoryRepository(self.session)

    def _pnl_cache_repo(self) -> SqlAlchemyPnlCacheRepository:
        return SqlAlchemyPnlCacheRepository(self.session)

    def _event_repo(self) -> SqlAlchemyEventRepository:
        return SqlAlchemyEventRepository(self.session)

    # Service accessors
    @property
    def reconstructor(self) -> PositionReconstructor:
        if self._reconstructor is None:
            self._reconstructor = PositionReconstructor(self.transaction_repo)
        return self._reconstructor

    @property
    def market_data(self) -> MarketDataService:
        if self._market_data is None:
            self._market_data = MarketDataService(
                provider=self.provider,
                price_repo=self._price_repo(),
            )
        return self._market_data

    @property
    def pnl(self) -> PnlCalculator:
        if self._pnl_calculator is None:
            self._pnl_calculator = PnlCalculator(
                transaction_repo=self.transaction_repo,
                portfolio_repo=self.portfolio_repo,
                pnl_cache_repo=self._pnl_cache_repo(),
                market_data=self.market_data,
            )
        return self._pnl_calculator

    @property
    def risk(self) -> RiskService:
        if self._risk_service is None:
            self._risk_service = RiskService(
                market_data=self.market_data,
                universe=self.open_tickers,
            )
        return self._risk_service

    @property
    def event_sync(self) -> CorporateEventSync:
        if self._event_sync is None:
            self._event_sync = CorporateEventSync(
                provider=self.provider,
                event_repo=self._event_repo(),
                portfolio_repo=self.portfolio_repo,
                reconstructor=self.reconstructor,
            )
        return self._event_sync

    @property
    def analytics(self) -> AnalyticsService:
        if self._analytics is None:
            self._analytics = AnalyticsService(
                portfolio_repo=self.portfolio_repo,
                pnl_calculator=self.pnl,
                risk_service=self.risk,
            )
        return self._analytics

    @property
    def scheduler(self) -> Scheduler:
        if self._scheduler is None:
            self._scheduler = Scheduler(
                pnl_calculator=self.pnl,
                event_sync=self.event_sync,
                risk_service=self.risk,
            )
        return self._scheduler

    async def open_tickers(self) -> list[str]:
        """Tickers open today in any portfolio."""
        today = today_local()
        held: set[str] = set()
        for portfolio_id in self.portfolio_repo.list_ids():
            held |= self.reconstructor.open_tickers(portfolio_id, today)
        return sorted(held)

    def close(self) -> None:
        """Clean up resources."""
        if self._session:
            self._session.close()
            self._session = None


# Global application context (singleton per process)
_app_context: Optional[AnalyticsContext] = None


def get_app_context() -> AnalyticsContext:
    """Get or create the global application context."""
    global _app_context
    if _app_context is None:
        _app_context = AnalyticsContext()
    return _app_context


def set_app_context(context: AnalyticsContext) -> None:
    """Set the global application context."""
    global _app_context
    _app_context = context
