"""Business logic services."""

from portfolio_analytics.services.position_reconstructor import (
    PositionReconstructor,
    LedgerReplay,
    positions_as_of,
)
from portfolio_analytics.services.market_data_service import MarketDataService, fx_pair
from portfolio_analytics.services.pnl_calculator import PnlCalculator
from portfolio_analytics.services.sync_orchestrator import (
    SyncOrchestrator,
    CancellationToken,
    CycleResult,
    SyncStatus,
)
from portfolio_analytics.services.risk_service import RiskService
from portfolio_analytics.services.event_sync import CorporateEventSync
from portfolio_analytics.services.analytics_service import AnalyticsService

__all__ = [
    "PositionReconstructor",
    "LedgerReplay",
    "positions_as_of",
    "MarketDataService",
    "fx_pair",
    "PnlCalculator",
    "SyncOrchestrator",
    "CancellationToken",
    "CycleResult",
    "SyncStatus",
    "RiskService",
    "CorporateEventSync",
    "AnalyticsService",
]
