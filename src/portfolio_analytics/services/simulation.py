"""What-if trade simulations on a single position."""

from decimal import Decimal, ROUND_HALF_UP

from portfolio_analytics.core.exceptions import ValidationError
from portfolio_analytics.domain.views import SimulationResult

_CENTS = Decimal("0.01")
_AVG_PRICE_PLACES = Decimal("0.0001")
_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def _money(value: Decimal) -> Decimal:
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def _avg_price(value: Decimal) -> Decimal:
    return value.quantize(_AVG_PRICE_PLACES, rounding=ROUND_HALF_UP)


def _weight(value: Decimal, portfolio_total_value: Decimal) -> Decimal:
    if portfolio_total_value <= 0:
        return _ZERO.quantize(_CENTS)
    return _money(value / portfolio_total_value * _HUNDRED)


def _percent_of(amount: Decimal, base: Decimal) -> Decimal:
    if base <= 0:
        return _ZERO.quantize(_CENTS)
    return _money(amount / base * _HUNDRED)


def simulate_buy(
    current_quantity: Decimal,
    current_avg_price: Decimal,
    additional_quantity: Decimal,
    buy_price: Decimal,
    portfolio_total_value: Decimal,
) -> SimulationResult:
    """
    Buy more of a position at ``buy_price``.

    The position is valued at the buy price, so projected PnL is the gap
    between that price and the new average cost.
    """
    new_quantity = current_quantity + additional_quantity
    if new_quantity <= 0:
        raise ValidationError("Buy simulation would leave a non-positive quantity")

    new_avg = (current_quantity * current_avg_price + additional_quantity * buy_price) / new_quantity
    new_total_value = new_quantity * buy_price
    cost_basis = new_quantity * new_avg
    projected_pnl = new_total_value - cost_basis

    return SimulationResult(
        new_average_price=_avg_price(new_avg),
        new_quantity=new_quantity,
        new_total_value=_money(new_total_value),
        new_weight=_weight(new_total_value, portfolio_total_value),
        projected_pnl=_money(projected_pnl),
        projected_pnl_percent=_percent_of(projected_pnl, cost_basis),
    )


def simulate_sell(
    current_quantity: Decimal,
    current_avg_price: Decimal,
    sell_quantity: Decimal,
    current_price: Decimal,
    portfolio_total_value: Decimal,
) -> SimulationResult:
    """
    Sell part or all of a position at ``current_price``.

    Average cost is unchanged; projected PnL is the realized gain of the sale.
    """
    if sell_quantity > current_quantity:
        raise ValidationError(
            f"Cannot sell {sell_quantity}: only {current_quantity} held"
        )

    new_quantity = current_quantity - sell_quantity
    new_total_value = new_quantity * current_price
    realized_pnl = sell_quantity * (current_price - current_avg_price)

    return SimulationResult(
        new_average_price=_avg_price(current_avg_price),
        new_quantity=new_quantity,
        new_total_value=_money(new_total_value),
        new_weight=_weight(new_total_value, portfolio_total_value),
        projected_pnl=_money(realized_pnl),
        projected_pnl_percent=_percent_of(realized_pnl, sell_quantity * current_avg_price),
    )


def simulate_price_change(
    current_quantity: Decimal,
    current_avg_price: Decimal,
    current_price: Decimal,
    percent_change: Decimal,
    portfolio_total_value: Decimal,
) -> SimulationResult:
    """Revalue a position after a ``percent_change`` move of its price."""
    new_price = current_price * (1 + percent_change / _HUNDRED)
    new_total_value = current_quantity * new_price
    cost_basis = current_quantity * current_avg_price
    projected_pnl = new_total_value - cost_basis

    return SimulationResult(
        new_average_price=_avg_price(current_avg_price),
        new_quantity=current_quantity,
        new_total_value=_money(new_total_value),
        new_weight=_weight(new_total_value, portfolio_total_value),
        projected_pnl=_money(projected_pnl),
        projected_pnl_percent=_percent_of(projected_pnl, cost_basis),
    )
