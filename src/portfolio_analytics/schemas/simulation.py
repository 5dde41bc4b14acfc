"""Pydantic schemas for simulation and recalculation requests."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class _PositionSnapshot(BaseModel):
    """Current state of the position being simulated."""

    current_quantity: Decimal = Field(..., ge=0, description="Units currently held")
    current_avg_price: Decimal = Field(..., ge=0, description="Average cost per unit")
    portfolio_total_value: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Total portfolio value used for the weight",
    )


class BuySimulationRequest(_PositionSnapshot):
    """Request schema for simulating an additional purchase."""

    additional_quantity: Decimal = Field(..., gt=0, description="Units to buy")
    buy_price: Decimal = Field(..., gt=0, description="Price per unit of the purchase")


class SellSimulationRequest(_PositionSnapshot):
    """Request schema for simulating a sale."""

    sell_quantity: Decimal = Field(..., gt=0, description="Units to sell")
    current_price: Decimal = Field(..., gt=0, description="Price per unit of the sale")


class PriceChangeSimulationRequest(_PositionSnapshot):
    """Request schema for simulating a price move."""

    current_price: Decimal = Field(..., gt=0, description="Current price per unit")
    percent_change: Decimal = Field(
        ...,
        ge=-100,
        description="Price move in percent (e.g. -10 for a 10% drop)",
    )


class RecalculateRequest(BaseModel):
    """Request schema for an on-demand PnL recalculation."""

    portfolio_id: Optional[str] = Field(
        default=None,
        description="Portfolio to recompute; all portfolios when omitted",
    )
    start_date: Optional[date] = Field(
        default=None,
        description="First day; defaults to the first transaction date",
    )
    end_date: Optional[date] = Field(default=None, description="Last day; defaults to today")

    @field_validator("portfolio_id")
    @classmethod
    def strip_portfolio_id(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() or None if v else None

    @model_validator(mode="after")
    def check_range(self) -> "RecalculateRequest":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self
