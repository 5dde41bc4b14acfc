"""Position reconstruction by replaying the transaction ledger."""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from portfolio_analytics.config.settings import get_settings
from portfolio_analytics.core.exceptions import LedgerIntegrityError
from portfolio_analytics.domain.models import Position, Transaction, TransactionType
from portfolio_analytics.repositories.protocols import TransactionRepository


def apply_transaction(
    positions: dict[str, Position],
    txn: Transaction,
    default_currency: str,
) -> None:
    """
    Fold one transaction into a running position map (in place).

    BUY recomputes the weighted-average cost including fees; SELL only
    reduces quantity. A ticker whose quantity reaches exactly zero is
    removed. Cash movements do not affect holdings.
    """
    if not txn.is_trade or not txn.ticker:
        return

    quantity = txn.quantity or Decimal("0")
    if quantity == 0:
        return

    existing = positions.get(txn.ticker)

    if txn.txn_type == TransactionType.BUY:
        held = existing.quantity if existing else Decimal("0")
        avg = existing.avg_cost if existing else Decimal("0")
        new_quantity = held + quantity
        new_avg = (held * avg + quantity * txn.price + (txn.fees or Decimal("0"))) / new_quantity
        positions[txn.ticker] = Position(
            ticker=txn.ticker,
            quantity=new_quantity,
            avg_cost=new_avg,
            currency=txn.currency or (existing.currency if existing else default_currency),
        )
        return

    # SELL
    available = existing.quantity if existing else Decimal("0")
    if quantity > available:
        raise LedgerIntegrityError(
            ticker=txn.ticker,
            requested=str(quantity),
            available=str(available),
            txn_id=txn.txn_id,
        )

    remaining = available - quantity
    if remaining == 0:
        del positions[txn.ticker]
    else:
        existing.quantity = remaining


def positions_as_of(
    transactions: Iterable[Transaction],
    as_of: date,
    default_currency: str = "EUR",
) -> dict[str, Position]:
    """
    Pure fold of the ledger up to and including ``as_of``.

    Transactions are ordered chronologically here; callers may pass them
    in any order.
    """
    positions: dict[str, Position] = {}
    for txn in sorted(transactions, key=lambda t: t.sort_key):
        if txn.trade_date > as_of:
            break
        apply_transaction(positions, txn, default_currency)
    return positions


class LedgerReplay:
    """
    Incremental ledger replay over ascending dates.

    Each ``advance_to`` call applies only the transactions between the
    previous date and the new one, so a multi-year backfill costs
    O(transactions + days) instead of one full fold per day. Dates must
    not go backwards.
    """

    def __init__(self, transactions: Iterable[Transaction], default_currency: str = "EUR"):
        self._transactions = sorted(transactions, key=lambda t: t.sort_key)
        self._default_currency = default_currency
        self._positions: dict[str, Position] = {}
        self._cursor = 0
        self._as_of: Optional[date] = None

    @property
    def as_of(self) -> Optional[date]:
        return self._as_of

    def advance_to(self, as_of: date) -> dict[str, Position]:
        """Apply pending transactions dated on or before ``as_of`` and return a snapshot."""
        if self._as_of is not None and as_of < self._as_of:
            raise ValueError(f"Cannot rewind ledger replay from {self._as_of} to {as_of}")

        while self._cursor < len(self._transactions):
            txn = self._transactions[self._cursor]
            if txn.trade_date > as_of:
                break
            apply_transaction(self._positions, txn, self._default_currency)
            self._cursor += 1

        self._as_of = as_of
        return {ticker: replace(p) for ticker, p in self._positions.items()}


class PositionReconstructor:
    """
    Derives point-in-time holdings from the ledger.

    No network access; the ledger is read once per call and folded in memory.
    """

    def __init__(
        self,
        transaction_repo: TransactionRepository,
        reporting_currency: Optional[str] = None,
    ):
        self._transaction_repo = transaction_repo
        self._reporting_currency = reporting_currency or get_settings().reporting_currency

    def positions_as_of(self, portfolio_id: str, as_of: date) -> dict[str, Position]:
        """Open positions of a portfolio at the end of ``as_of``."""
        transactions = self._transaction_repo.list_by_portfolio(portfolio_id)
        return positions_as_of(transactions, as_of, self._reporting_currency)

    def open_tickers(self, portfolio_id: str, as_of: date) -> set[str]:
        """Tickers with a non-zero holding at the end of ``as_of``."""
        return set(self.positions_as_of(portfolio_id, as_of))
