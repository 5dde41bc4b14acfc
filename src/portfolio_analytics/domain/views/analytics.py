"""View models for analytics outputs."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from portfolio_analytics.domain.models.enums import SolvencyZone


@dataclass
class SolvencyRisk:
    """Altman-Z derived solvency verdict."""

    z_score: float
    zone: SolvencyZone
    label: str


@dataclass
class DrawdownResult:
    """Largest peak-to-trough decline of a price series."""

    value: float = 0.0
    peak_index: int = 0
    trough_index: int = 0


@dataclass
class RiskMetrics:
    """Risk snapshot of a single instrument."""

    volatility: float = 0.0
    sharpe: float = 0.0
    sortino: float = 0.0
    max_drawdown: float = 0.0
    beta: float = 1.0
    var95: float = 0.0
    score: int = 5
    solvency: Optional[SolvencyRisk] = None

    @classmethod
    def neutral(cls) -> "RiskMetrics":
        """Snapshot returned when history is too short to say anything."""
        return cls()


@dataclass
class SimulationResult:
    """Outcome of a what-if trade on one position."""

    new_average_price: Decimal
    new_quantity: Decimal
    new_total_value: Decimal
    new_weight: Decimal
    projected_pnl: Decimal
    projected_pnl_percent: Decimal


@dataclass
class PnlPoint:
    """One point of the cached PnL series."""

    date: date
    pnl: Decimal


@dataclass
class RecomputeResult:
    """Outcome of recomputing one portfolio over a date range."""

    portfolio_id: str
    start_date: date
    end_date: date
    days_written: int = 0
    price_gaps: int = 0
    fx_gaps: int = 0
    days_removed: int = 0
    failed_tickers: list[str] = field(default_factory=list)
    failed_currencies: list[str] = field(default_factory=list)


@dataclass
class BatchRecomputeResult:
    """Outcome of a scheduled recompute across portfolios."""

    results: list[RecomputeResult] = field(default_factory=list)
    failed_portfolios: dict[str, str] = field(default_factory=dict)
    rejected: bool = False
    cancelled: bool = False

    @property
    def days_written(self) -> int:
        return sum(r.days_written for r in self.results)
