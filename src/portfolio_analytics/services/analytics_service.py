"""Analytics service: the entry points used by request handlers."""

import logging
from datetime import date
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError

from portfolio_analytics.core.exceptions import NotFoundError, ValidationError
from portfolio_analytics.core.timezone import today_local
from portfolio_analytics.domain.models import PnlPeriod, SimulationKind
from portfolio_analytics.domain.views import (
    BatchRecomputeResult,
    PnlPoint,
    RecomputeResult,
    RiskMetrics,
    SimulationResult,
)
from portfolio_analytics.repositories.protocols import PortfolioRepository
from portfolio_analytics.schemas import (
    BuySimulationRequest,
    PriceChangeSimulationRequest,
    RecalculateRequest,
    SellSimulationRequest,
)
from portfolio_analytics.services.pnl_calculator import PnlCalculator
from portfolio_analytics.services.risk_service import RiskService
from portfolio_analytics.services import simulation

logger = logging.getLogger(__name__)

_SIMULATION_REQUESTS: dict[SimulationKind, type[BaseModel]] = {
    SimulationKind.BUY: BuySimulationRequest,
    SimulationKind.SELL: SellSimulationRequest,
    SimulationKind.PRICE_CHANGE: PriceChangeSimulationRequest,
}


class AnalyticsService:
    """
    Facade over PnL history, risk metrics and trade simulations.

    Read paths never recompute; ``recalculate`` is the only write path.
    """

    def __init__(
        self,
        portfolio_repo: PortfolioRepository,
        pnl_calculator: PnlCalculator,
        risk_service: RiskService,
    ):
        self._portfolio_repo = portfolio_repo
        self._pnl = pnl_calculator
        self._risk = risk_service

    def get_cached_pnl_series(
        self,
        portfolio_id: str,
        date_from: Optional[date] = None,
        period: Optional[PnlPeriod] = None,
    ) -> list[PnlPoint]:
        """
        Cached daily PnL of a portfolio, ascending by date.

        ``period`` (1M/3M/6M/1Y back from today) takes precedence over
        ``date_from``; with neither, the whole cached series is returned.
        """
        self._require_portfolio(portfolio_id)
        if period is not None:
            date_from = PnlPeriod(period).start_date(today_local())
        return self._pnl.get_cached_pnl_series(portfolio_id, date_from)

    async def recalculate(
        self,
        portfolio_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Union[RecomputeResult, BatchRecomputeResult]:
        """
        Recompute the PnL cache for one portfolio or all of them.

        An open start means the portfolio's first transaction date; an open
        end means today. Recomputing a single portfolio surfaces
        LedgerIntegrityError to the caller.
        """
        request = self._validate(RecalculateRequest, {
            "portfolio_id": portfolio_id,
            "start_date": start_date,
            "end_date": end_date,
        })

        if request.portfolio_id is None:
            return await self._pnl.recompute_all(request.start_date, request.end_date)

        self._require_portfolio(request.portfolio_id)
        end = request.end_date or today_local()
        start = request.start_date or self._pnl.first_transaction_date(request.portfolio_id)
        if start is None or start > end:
            logger.info("Portfolio %s has nothing to recalculate", request.portfolio_id)
            return RecomputeResult(
                portfolio_id=request.portfolio_id,
                start_date=start or end,
                end_date=end,
            )
        return await self._pnl.recompute_range(request.portfolio_id, start, end)

    async def get_risk_metrics(self, ticker: str) -> RiskMetrics:
        """Risk snapshot of a ticker (neutral when history is insufficient)."""
        if not ticker or not ticker.strip():
            raise ValidationError("Ticker is required")
        return await self._risk.get_risk_metrics(ticker.strip())

    def simulate(
        self,
        kind: Union[SimulationKind, str],
        params: Union[Mapping[str, Any], BaseModel],
    ) -> SimulationResult:
        """Run a what-if trade of the given kind over validated parameters."""
        try:
            kind = SimulationKind(kind)
        except ValueError:
            raise ValidationError(f"Unknown simulation kind: {kind}")

        request_type = _SIMULATION_REQUESTS[kind]
        data = params.model_dump() if isinstance(params, BaseModel) else dict(params)
        request = self._validate(request_type, data)

        if kind == SimulationKind.BUY:
            return simulation.simulate_buy(
                request.current_quantity,
                request.current_avg_price,
                request.additional_quantity,
                request.buy_price,
                request.portfolio_total_value,
            )
        if kind == SimulationKind.SELL:
            return simulation.simulate_sell(
                request.current_quantity,
                request.current_avg_price,
                request.sell_quantity,
                request.current_price,
                request.portfolio_total_value,
            )
        return simulation.simulate_price_change(
            request.current_quantity,
            request.current_avg_price,
            request.current_price,
            request.percent_change,
            request.portfolio_total_value,
        )

    def _require_portfolio(self, portfolio_id: str) -> None:
        if not self._portfolio_repo.get_by_id(portfolio_id):
            raise NotFoundError("Portfolio", portfolio_id)

    @staticmethod
    def _validate(model: type[BaseModel], data: Mapping[str, Any]) -> Any:
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(str(e)) from e
