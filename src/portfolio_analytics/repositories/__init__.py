"""Repository layer - data access abstractions and implementations."""

from portfolio_analytics.repositories.protocols import (
    PortfolioRepository,
    TransactionRepository,
    PriceHistoryRepository,
    PnlCacheRepository,
    EventRepository,
)

__all__ = [
    "PortfolioRepository",
    "TransactionRepository",
    "PriceHistoryRepository",
    "PnlCacheRepository",
    "EventRepository",
]
