"""Transaction domain model."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from portfolio_analytics.core.timezone import to_local, trade_date
from portfolio_analytics.domain.models.enums import TransactionType


@dataclass
class Transaction:
    """
    Ledger transaction entry (source of truth).

    Supports BUY and SELL of an instrument plus cash movements
    (DEPOSIT, WITHDRAWAL, DIVIDEND, FEE) which do not affect holdings.
    ``txn_id`` is the insertion-ordered row id and breaks timestamp ties.
    """

    portfolio_id: str
    txn_time: datetime
    txn_type: TransactionType
    ticker: Optional[str] = None
    quantity: Decimal = field(default_factory=lambda: Decimal("0"))
    price: Decimal = field(default_factory=lambda: Decimal("0"))
    currency: Optional[str] = None
    fx_rate: Decimal = field(default_factory=lambda: Decimal("1"))
    fees: Decimal = field(default_factory=lambda: Decimal("0"))
    txn_id: Optional[int] = None

    def __post_init__(self) -> None:
        if isinstance(self.txn_type, str):
            self.txn_type = TransactionType(self.txn_type)
        if self.ticker:
            self.ticker = self.ticker.upper()
        if self.currency:
            self.currency = self.currency.upper()

    @property
    def is_trade(self) -> bool:
        """Return True if this is a BUY or SELL transaction."""
        return self.txn_type in (TransactionType.BUY, TransactionType.SELL)

    @property
    def trade_date(self) -> date:
        """Calendar date the transaction counts towards."""
        return trade_date(self.txn_time)

    @property
    def sort_key(self) -> tuple[datetime, int]:
        """Chronological order; insertion order breaks timestamp ties."""
        return (to_local(self.txn_time), self.txn_id or 0)
