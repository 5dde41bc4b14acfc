"""Request schemas."""

from portfolio_analytics.schemas.simulation import (
    BuySimulationRequest,
    SellSimulationRequest,
    PriceChangeSimulationRequest,
    RecalculateRequest,
)

__all__ = [
    "BuySimulationRequest",
    "SellSimulationRequest",
    "PriceChangeSimulationRequest",
    "RecalculateRequest",
]
