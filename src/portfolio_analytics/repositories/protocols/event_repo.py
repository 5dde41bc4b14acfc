"""Financial event repository protocol."""

from datetime import date
from typing import Protocol, Optional

from portfolio_analytics.domain.models import FinancialEvent, EventType


class EventRepository(Protocol):
    """Interface for corporate calendar events."""

    def find_system_event(
        self,
        ticker: str,
        event_type: EventType,
        event_date: date,
    ) -> Optional[FinancialEvent]:
        """Find the system-synced event (user_id NULL) for a ticker/type/date."""
        ...

    def upsert_system_event(self, event: FinancialEvent) -> FinancialEvent:
        """Insert a system-synced event or update the existing one."""
        ...

    def list_by_ticker(self, ticker: str) -> list[FinancialEvent]:
        """List events for a ticker ordered by date."""
        ...
