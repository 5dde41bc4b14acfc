"""View models for service outputs."""

from portfolio_analytics.domain.views.market import (
    Quote,
    Fundamentals,
    AnalystConsensus,
    CalendarEvent,
)
from portfolio_analytics.domain.views.analytics import (
    SolvencyRisk,
    DrawdownResult,
    RiskMetrics,
    SimulationResult,
    PnlPoint,
    RecomputeResult,
    BatchRecomputeResult,
)

__all__ = [
    "Quote",
    "Fundamentals",
    "AnalystConsensus",
    "CalendarEvent",
    "SolvencyRisk",
    "DrawdownResult",
    "RiskMetrics",
    "SimulationResult",
    "PnlPoint",
    "RecomputeResult",
    "BatchRecomputeResult",
]
