"""Enumerations for domain models."""

from datetime import date
from enum import Enum

from dateutil.relativedelta import relativedelta


class TransactionType(str, Enum):
    """Types of ledger transactions."""

    BUY = "BUY"
    SELL = "SELL"
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    DIVIDEND = "DIVIDEND"
    FEE = "FEE"


class PnlPeriod(str, Enum):
    """Look-back windows offered for the cached PnL series."""

    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"

    @property
    def months(self) -> int:
        return _PERIOD_MONTHS[self]

    def start_date(self, today: date) -> date:
        """First calendar date covered by this period ending on ``today``."""
        return today - relativedelta(months=self.months)


_PERIOD_MONTHS: dict[PnlPeriod, int] = {
    PnlPeriod.ONE_MONTH: 1,
    PnlPeriod.THREE_MONTHS: 3,
    PnlPeriod.SIX_MONTHS: 6,
    PnlPeriod.ONE_YEAR: 12,
}


class SolvencyZone(str, Enum):
    """Altman-Z classification."""

    SAFE = "SAFE"
    GREY = "GREY"
    DISTRESS = "DISTRESS"


class SimulationKind(str, Enum):
    """Supported what-if trade simulations."""

    BUY = "BUY"
    SELL = "SELL"
    PRICE_CHANGE = "PRICE_CHANGE"


class EventType(str, Enum):
    """Corporate calendar event types kept in the events table."""

    EARNINGS = "earnings"
    EX_DIVIDEND = "ex_dividend"
