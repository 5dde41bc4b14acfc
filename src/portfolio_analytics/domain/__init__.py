"""Domain layer - pure business models with no external dependencies."""

from portfolio_analytics.domain.models import (
    Portfolio,
    Transaction,
    Position,
    PnlCacheEntry,
    PricePoint,
    FinancialEvent,
    TransactionType,
    PnlPeriod,
    SolvencyZone,
    SimulationKind,
    EventType,
)

__all__ = [
    "Portfolio",
    "Transaction",
    "Position",
    "PnlCacheEntry",
    "PricePoint",
    "FinancialEvent",
    "TransactionType",
    "PnlPeriod",
    "SolvencyZone",
    "SimulationKind",
    "EventType",
]
