"""Portfolio repository protocol."""

from typing import Protocol, Optional

from portfolio_analytics.domain.models import Portfolio


class PortfolioRepository(Protocol):
    """Interface for portfolio data access."""

    def create(self, portfolio: Portfolio) -> Portfolio:
        """Persist a new portfolio."""
        ...

    def get_by_id(self, portfolio_id: str) -> Optional[Portfolio]:
        """Retrieve portfolio by ID."""
        ...

    def list_ids(self) -> list[str]:
        """List the IDs of all portfolios."""
        ...
