"""
Risk statistics and composite risk score for a single instrument.

All functions are pure and work on plain float sequences. Percent-valued
outputs (volatility, drawdown, VaR) are expressed as percentages, ratios
as plain numbers.
"""

from typing import Optional, Sequence

import numpy as np

from portfolio_analytics.core.exceptions import InsufficientHistoryError
from portfolio_analytics.domain.models import SolvencyZone
from portfolio_analytics.domain.views import (
    AnalystConsensus,
    DrawdownResult,
    Fundamentals,
    RiskMetrics,
    SolvencyRisk,
)

TRADING_DAYS_PER_YEAR = 252
RISK_FREE_RATE = 0.05
MIN_HISTORY_POINTS = 30
VAR95_Z = 1.645
SORTINO_NO_DOWNSIDE = 3.0
NO_DEBT_Z_SCORE = 10.0


def calculate_returns(prices: Sequence[float]) -> list[float]:
    """Simple daily returns, skipping transitions from a zero price."""
    returns: list[float] = []
    for previous, current in zip(prices, prices[1:]):
        if previous != 0:
            returns.append((current - previous) / previous)
    return returns


def calculate_volatility(
    returns: Sequence[float],
    trading_days: int = TRADING_DAYS_PER_YEAR,
) -> float:
    """Annualized sample standard deviation of returns, in percent."""
    if len(returns) < 2:
        return 0.0
    daily_std = float(np.std(np.asarray(returns, dtype=float), ddof=1))
    return daily_std * np.sqrt(trading_days) * 100


def calculate_sharpe(
    returns: Sequence[float],
    risk_free_rate: float = RISK_FREE_RATE,
    trading_days: int = TRADING_DAYS_PER_YEAR,
) -> float:
    """(annualized mean return - risk free rate) / annualized volatility."""
    if len(returns) < 2:
        return 0.0
    annualized_return = float(np.mean(returns)) * trading_days
    volatility = calculate_volatility(returns, trading_days) / 100
    if volatility == 0:
        return 0.0
    return (annualized_return - risk_free_rate) / volatility


def calculate_sortino(
    returns: Sequence[float],
    risk_free_rate: float = RISK_FREE_RATE,
    trading_days: int = TRADING_DAYS_PER_YEAR,
) -> float:
    """
    Sharpe-like ratio penalizing only downside moves.

    A series with no negative return scores the fixed value 3.
    """
    if len(returns) < 2:
        return 0.0
    values = np.asarray(returns, dtype=float)
    annualized_return = float(values.mean()) * trading_days

    negatives = values[values < 0]
    if negatives.size == 0:
        return SORTINO_NO_DOWNSIDE

    downside_deviation = float(np.sqrt(np.mean(negatives ** 2))) * np.sqrt(trading_days)
    if downside_deviation == 0:
        return 0.0
    return (annualized_return - risk_free_rate) / downside_deviation


def calculate_max_drawdown(prices: Sequence[float]) -> DrawdownResult:
    """Largest peak-to-trough decline in percent, with the indices producing it."""
    if len(prices) < 2:
        return DrawdownResult()

    max_drawdown = 0.0
    peak = prices[0]
    peak_index = 0
    max_peak_index = 0
    max_trough_index = 0

    for i in range(1, len(prices)):
        if prices[i] > peak:
            peak = prices[i]
            peak_index = i
        if peak <= 0:
            continue
        drawdown = (peak - prices[i]) / peak
        if drawdown > max_drawdown:
            max_drawdown = drawdown
            max_peak_index = peak_index
            max_trough_index = i

    return DrawdownResult(
        value=max_drawdown * 100,
        peak_index=max_peak_index,
        trough_index=max_trough_index,
    )


def calculate_beta(returns: Sequence[float], benchmark_returns: Sequence[float]) -> float:
    """
    Covariance with the benchmark over benchmark variance.

    Series must already be aligned to equal length; otherwise, or when
    too short or the benchmark is flat, the market beta 1.0 is returned.
    """
    if len(returns) != len(benchmark_returns) or len(returns) < 2:
        return 1.0

    ticker = np.asarray(returns, dtype=float)
    benchmark = np.asarray(benchmark_returns, dtype=float)
    benchmark_dev = benchmark - benchmark.mean()
    benchmark_variance = float(np.sum(benchmark_dev ** 2))
    if np.isclose(benchmark_variance, 0.0, atol=1e-15):
        return 1.0

    covariance = float(np.sum((ticker - ticker.mean()) * benchmark_dev))
    return covariance / benchmark_variance


def calculate_var95(returns: Sequence[float]) -> float:
    """Parametric one-day 95% Value-at-Risk, in percent (usually negative)."""
    if len(returns) < 2:
        return 0.0
    values = np.asarray(returns, dtype=float)
    std = float(np.std(values, ddof=1))
    return (float(values.mean()) - VAR95_Z * std) * 100


def calculate_altman_z(fundamentals: Optional[Fundamentals]) -> Optional[SolvencyRisk]:
    """
    Altman Z-score from vendor aggregates.

    The inputs are approximations, not filed balance-sheet items:
    total assets = EV - debt + cash, working capital = cash - 20% of debt,
    retained earnings = half of book value, EBIT = 85% of EBITDA,
    total liabilities = total debt. Returns None when total assets
    cannot be estimated; a company without debt is SAFE with Z = 10.
    """
    if fundamentals is None:
        return None

    f = fundamentals
    total_assets = (
        f.enterprise_value - f.total_debt + f.total_cash if f.enterprise_value else 0.0
    )
    if total_assets <= 0:
        return None

    total_liabilities = f.total_debt
    if total_liabilities <= 0:
        return SolvencyRisk(
            z_score=NO_DEBT_Z_SCORE,
            zone=SolvencyZone.SAFE,
            label="Very Safe (No Debt)",
        )

    working_capital = f.total_cash - f.total_debt * 0.2
    retained_earnings = f.book_value * 0.5
    ebit = f.ebitda * 0.85 if f.ebitda else 0.0

    a = working_capital / total_assets
    b = retained_earnings / total_assets
    c = ebit / total_assets
    d = f.market_cap / total_liabilities
    e = f.total_revenue / total_assets
    z_score = 1.2 * a + 1.4 * b + 3.3 * c + 0.6 * d + 1.0 * e

    if z_score >= 3.0:
        zone, label = SolvencyZone.SAFE, "Safe Zone"
    elif z_score >= 1.8:
        zone, label = SolvencyZone.GREY, "Grey Zone (Caution)"
    else:
        zone, label = SolvencyZone.DISTRESS, "Distress Zone"

    return SolvencyRisk(z_score=round(z_score, 2), zone=zone, label=label)


def calculate_target_upside(target_price: Optional[float], current_price: Optional[float]) -> Optional[float]:
    """Analyst target upside in percent, rounded to 1 dp; None if not computable."""
    if not target_price or not current_price or current_price <= 0:
        return None
    return round((target_price - current_price) / current_price * 100, 1)


def calculate_risk_score(
    metrics: RiskMetrics,
    fundamentals: Optional[Fundamentals] = None,
    consensus: Optional[str] = None,
    target_upside: Optional[float] = None,
) -> int:
    """
    Composite 1-10 risk score (higher is riskier).

    Starts at 5; adds price-risk bands, subtracts quality bonuses when
    fundamentals are available and sentiment bonuses, then clamps.
    Band order and thresholds are fixed so historical scores stay comparable.
    """
    score = 5

    if metrics.volatility > 40:
        score += 2
    elif metrics.volatility > 25:
        score += 1
    elif metrics.volatility < 15:
        score -= 1

    if metrics.max_drawdown > 30:
        score += 2
    elif metrics.max_drawdown > 20:
        score += 1
    elif metrics.max_drawdown < 10:
        score -= 1

    if metrics.beta > 1.5:
        score += 1
    elif metrics.beta < 0.5:
        score -= 1

    if metrics.sharpe < 0:
        score += 1
    elif metrics.sharpe > 1.5:
        score -= 1

    if fundamentals is not None:
        market_cap = fundamentals.market_cap or 0.0
        if market_cap >= 200e9:
            score -= 2
        elif market_cap >= 10e9:
            score -= 1

        if 0 < fundamentals.trailing_pe < 200:
            score -= 1

        net_debt = (fundamentals.total_debt or 0.0) - (fundamentals.total_cash or 0.0)
        if net_debt < 0:
            score -= 1

        if fundamentals.free_cashflow > 0:
            score -= 1

        if fundamentals.revenue_growth is not None and fundamentals.revenue_growth > 0.15:
            score -= 1

    if consensus:
        lowered = consensus.lower()
        if "buy" in lowered or "strong" in lowered:
            score -= 1

    if target_upside is not None and target_upside > 10:
        score -= 1

    return max(1, min(10, score))


def _require_history(prices: Sequence[float], minimum: int) -> None:
    if len(prices) < minimum:
        raise InsufficientHistoryError(required=minimum, available=len(prices))


def risk_metrics(
    prices: Sequence[float],
    benchmark: Optional[Sequence[float]] = None,
    fundamentals: Optional[Fundamentals] = None,
    consensus: Optional[AnalystConsensus] = None,
    current_price: Optional[float] = None,
    risk_free_rate: float = RISK_FREE_RATE,
    trading_days: int = TRADING_DAYS_PER_YEAR,
    min_history: int = MIN_HISTORY_POINTS,
) -> RiskMetrics:
    """
    Full risk snapshot of an instrument from its ascending closes.

    Fewer than ``min_history`` closes yields the neutral snapshot. A
    benchmark shorter than ``min_history`` is ignored (beta 1.0). Metrics
    are rounded to 2 dp before they feed the score.
    """
    try:
        _require_history(prices, min_history)
    except InsufficientHistoryError:
        return RiskMetrics.neutral()

    returns = calculate_returns(prices)

    beta = 1.0
    if benchmark is not None and len(benchmark) >= min_history:
        benchmark_returns = calculate_returns(benchmark)
        window = min(len(returns), len(benchmark_returns))
        if window > 0:
            beta = calculate_beta(returns[-window:], benchmark_returns[-window:])

    metrics = RiskMetrics(
        volatility=round(calculate_volatility(returns, trading_days), 2),
        sharpe=round(calculate_sharpe(returns, risk_free_rate, trading_days), 2),
        sortino=round(calculate_sortino(returns, risk_free_rate, trading_days), 2),
        max_drawdown=round(calculate_max_drawdown(prices).value, 2),
        beta=round(beta, 2),
        var95=round(calculate_var95(returns), 2),
    )

    if current_price is None and prices:
        current_price = prices[-1]
    upside = calculate_target_upside(
        consensus.target_price if consensus else None,
        current_price,
    )
    metrics.score = calculate_risk_score(
        metrics,
        fundamentals=fundamentals,
        consensus=consensus.recommendation if consensus else None,
        target_upside=upside,
    )
    metrics.solvency = calculate_altman_z(fundamentals)
    return metrics
