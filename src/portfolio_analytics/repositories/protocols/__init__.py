"""Repository protocol definitions (interfaces)."""

from portfolio_analytics.repositories.protocols.portfolio_repo import PortfolioRepository
from portfolio_analytics.repositories.protocols.transaction_repo import TransactionRepository
from portfolio_analytics.repositories.protocols.price_history_repo import PriceHistoryRepository
from portfolio_analytics.repositories.protocols.pnl_cache_repo import PnlCacheRepository
from portfolio_analytics.repositories.protocols.event_repo import EventRepository

__all__ = [
    "PortfolioRepository",
    "TransactionRepository",
    "PriceHistoryRepository",
    "PnlCacheRepository",
    "EventRepository",
]
