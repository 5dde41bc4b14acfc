"""Transaction repository protocol."""

from typing import Protocol

from portfolio_analytics.domain.models import Transaction


class TransactionRepository(Protocol):
    """Interface for transaction (ledger) data access."""

    def create(self, transaction: Transaction) -> Transaction:
        """Persist a new transaction."""
        ...

    def list_by_portfolio(self, portfolio_id: str) -> list[Transaction]:
        """List all transactions of a portfolio, ordered by time then insertion."""
        ...

    def list_tickers(self, portfolio_id: str) -> list[str]:
        """Distinct upper-cased tickers ever traded in the portfolio."""
        ...

    def list_currencies(self, portfolio_id: str) -> list[str]:
        """Distinct upper-cased trade currencies used in the portfolio."""
        ...
