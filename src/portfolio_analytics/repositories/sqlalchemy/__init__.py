"""SQLAlchemy repository implementations."""

from portfolio_analytics.repositories.sqlalchemy.database import (
    get_engine,
    get_session_factory,
    get_session,
    init_db,
    reset_database,
    Base,
)
from portfolio_analytics.repositories.sqlalchemy.portfolio_repo import SqlAlchemyPortfolioRepository
from portfolio_analytics.repositories.sqlalchemy.transaction_repo import SqlAlchemyTransactionRepository
from portfolio_analytics.repositories.sqlalchemy.price_history_repo import SqlAlchemyPriceHistoryRepository
from portfolio_analytics.repositories.sqlalchemy.pnl_cache_repo import SqlAlchemyPnlCacheRepository
from portfolio_analytics.repositories.sqlalchemy.event_repo import SqlAlchemyEventRepository

__all__ = [
    "get_engine",
    "get_session_factory",
    "get_session",
    "init_db",
    "reset_database",
    "Base",
    "SqlAlchemyPortfolioRepository",
    "SqlAlchemyTransactionRepository",
    "SqlAlchemyPriceHistoryRepository",
    "SqlAlchemyPnlCacheRepository",
    "SqlAlchemyEventRepository",
]
