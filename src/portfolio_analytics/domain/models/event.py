"""Corporate calendar event model."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from portfolio_analytics.domain.models.enums import EventType


@dataclass
class FinancialEvent:
    """
    Confirmed corporate event for a ticker.

    System-synced rows have ``user_id`` None and are unique per
    (ticker, event_type, event_date).
    """

    ticker: str
    event_type: EventType
    event_date: date
    title: str
    description: Optional[str] = None
    status: str = "confirmed"
    estimated_eps: Optional[Decimal] = None
    dividend_amount: Optional[Decimal] = None
    user_id: Optional[str] = None
    is_custom: bool = False
    event_id: Optional[int] = None
    updated_at: Optional[datetime] = field(default=None)

    def __post_init__(self) -> None:
        if isinstance(self.event_type, str):
            self.event_type = EventType(self.event_type)
