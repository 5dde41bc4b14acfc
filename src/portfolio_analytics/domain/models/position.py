"""Point-in-time position reconstructed from the ledger."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass
class Position:
    """
    Open holding of one ticker as of a date.

    Never persisted; always re-derived from transactions so any historical
    date can be reproduced. ``avg_cost`` is per unit, in ``currency``.
    """

    ticker: str
    quantity: Decimal
    avg_cost: Decimal
    currency: str

    @property
    def cost_basis(self) -> Decimal:
        return self.quantity * self.avg_cost
