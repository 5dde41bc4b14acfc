"""Portfolio domain model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class Portfolio:
    """Named container of ledger transactions."""

    portfolio_id: str
    name: str
    created_at: Optional[datetime] = field(default=None)
