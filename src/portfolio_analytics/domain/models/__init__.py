"""Domain models package."""

from portfolio_analytics.domain.models.enums import (
    TransactionType,
    PnlPeriod,
    SolvencyZone,
    SimulationKind,
    EventType,
)
from portfolio_analytics.domain.models.portfolio import Portfolio
from portfolio_analytics.domain.models.transaction import Transaction
from portfolio_analytics.domain.models.position import Position
from portfolio_analytics.domain.models.cache import PnlCacheEntry, PricePoint
from portfolio_analytics.domain.models.event import FinancialEvent

__all__ = [
    "TransactionType",
    "PnlPeriod",
    "SolvencyZone",
    "SimulationKind",
    "EventType",
    "Portfolio",
    "Transaction",
    "Position",
    "PnlCacheEntry",
    "PricePoint",
    "FinancialEvent",
]
