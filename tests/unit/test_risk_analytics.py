"""
Unit tests for risk statistics and scoring.

Tests cover:
- Returns, volatility, Sharpe and Sortino
- Max drawdown with peak/trough indices
- Beta alignment and degenerate benchmarks
- Parametric VaR
- Altman-Z solvency zones
- Composite score bands and clamping
- Neutral snapshot for short histories
"""

import math

import pytest

from portfolio_analytics.domain.models import SolvencyZone
from portfolio_analytics.domain.views import AnalystConsensus, Fundamentals, RiskMetrics
from portfolio_analytics.services.risk_analytics import (
    calculate_altman_z,
    calculate_beta,
    calculate_max_drawdown,
    calculate_returns,
    calculate_risk_score,
    calculate_sharpe,
    calculate_sortino,
    calculate_target_upside,
    calculate_var95,
    calculate_volatility,
    risk_metrics,
)


def _rising(n: int, start: float = 100.0, step: float = 0.5) -> list[float]:
    return [start + i * step for i in range(n)]


def _zigzag(n: int, start: float = 100.0) -> list[float]:
    prices = [start]
    for i in range(1, n):
        prices.append(prices[-1] * (1.03 if i % 2 else 0.98))
    return prices


# =============================================================================
# RETURN STATISTICS
# =============================================================================


class TestReturnStatistics:
    """Tests for returns, volatility, Sharpe and Sortino."""

    def test_returns_skip_zero_price(self):
        """
        GIVEN a series containing a zero close
        WHEN I compute returns
        THEN the transition out of zero is skipped
        """
        returns = calculate_returns([100.0, 110.0, 0.0, 50.0])

        assert returns == pytest.approx([0.1, -1.0])

    @pytest.mark.parametrize("returns", [[], [0.01]])
    def test_volatility_of_short_series_is_zero(self, returns):
        """
        GIVEN fewer than two returns
        WHEN I compute volatility
        THEN it is 0
        """
        assert calculate_volatility(returns) == 0.0

    def test_volatility_is_annualized_sample_std(self):
        """
        GIVEN returns +1% and -1%
        WHEN I compute volatility
        THEN it is the sample std scaled by sqrt(252), in percent
        """
        expected = math.sqrt(0.0002) * math.sqrt(252) * 100

        assert calculate_volatility([0.01, -0.01]) == pytest.approx(expected)

    def test_sharpe_of_flat_series_is_zero(self):
        """
        GIVEN constant returns (zero volatility)
        WHEN I compute Sharpe
        THEN it is 0
        """
        assert calculate_sharpe([0.01, 0.01, 0.01]) == 0.0

    def test_sortino_without_downside_is_fixed_value(self):
        """
        GIVEN only positive returns
        WHEN I compute Sortino
        THEN it is 3
        """
        assert calculate_sortino([0.01, 0.02, 0.005]) == 3.0

    def test_sortino_penalizes_downside(self):
        """
        GIVEN a series with a loss that dominates
        WHEN I compute Sortino
        THEN it is negative
        """
        assert calculate_sortino([-0.05, 0.01, -0.04, 0.01]) < 0


# =============================================================================
# DRAWDOWN
# =============================================================================


class TestMaxDrawdown:
    """Tests for max drawdown."""

    def test_reference_drawdown(self):
        """
        GIVEN prices [100, 120, 90, 95, 130]
        WHEN I compute max drawdown
        THEN it is 25% from index 1 to index 2
        """
        result = calculate_max_drawdown([100, 120, 90, 95, 130])

        assert result.value == pytest.approx(25.0)
        assert result.peak_index == 1
        assert result.trough_index == 2

    def test_monotonic_rise_has_no_drawdown(self):
        """
        GIVEN strictly rising prices
        WHEN I compute max drawdown
        THEN it is 0
        """
        assert calculate_max_drawdown(_rising(10)).value == 0.0

    def test_later_deeper_trough_wins(self):
        """
        GIVEN a shallow dip and a later deeper one from a new high
        WHEN I compute max drawdown
        THEN the deeper one is reported with its indices
        """
        result = calculate_max_drawdown([100, 95, 150, 75, 80])

        assert result.value == pytest.approx(50.0)
        assert (result.peak_index, result.trough_index) == (2, 3)


# =============================================================================
# BETA AND VAR
# =============================================================================


class TestBetaAndVar:
    """Tests for beta and VaR."""

    def test_beta_against_itself_is_one(self):
        returns = [0.01, -0.02, 0.015, 0.003]
        assert calculate_beta(returns, returns) == pytest.approx(1.0)

    def test_beta_against_doubled_benchmark_is_half(self):
        """
        GIVEN a benchmark moving twice as much as the ticker
        WHEN I compute beta
        THEN it is 0.5
        """
        returns = [0.01, -0.02, 0.015, 0.003]
        benchmark = [2 * r for r in returns]

        assert calculate_beta(returns, benchmark) == pytest.approx(0.5)

    @pytest.mark.parametrize(
        "returns,benchmark",
        [
            ([0.01, 0.02, 0.03], [0.01, 0.02]),
            ([0.01], [0.01]),
            ([0.01, 0.02, 0.03], [0.01, 0.01, 0.01]),
        ],
    )
    def test_degenerate_beta_defaults_to_market(self, returns, benchmark):
        """
        GIVEN mismatched, too short or flat benchmark returns
        WHEN I compute beta
        THEN it is 1.0
        """
        assert calculate_beta(returns, benchmark) == 1.0

    def test_reference_var95(self):
        """
        GIVEN returns with mean 0.001 and sample std 0.02
        WHEN I compute VaR95
        THEN it is about -3.19%
        """
        spread = 0.02 / math.sqrt(2)
        returns = [0.001 + spread, 0.001 - spread]

        assert calculate_var95(returns) == pytest.approx(-3.19, abs=1e-6)

    def test_var95_of_single_return_is_zero(self):
        assert calculate_var95([0.05]) == 0.0


# =============================================================================
# SOLVENCY
# =============================================================================


class TestAltmanZ:
    """Tests for the Altman-Z solvency proxy."""

    def test_no_fundamentals(self):
        assert calculate_altman_z(None) is None

    def test_unestimable_assets_returns_none(self):
        """
        GIVEN fundamentals without enterprise value
        WHEN I compute Altman-Z
        THEN no verdict is returned
        """
        assert calculate_altman_z(Fundamentals(market_cap=1e9, total_debt=1e8)) is None

    def test_no_debt_is_very_safe(self):
        """
        GIVEN positive assets and no debt
        WHEN I compute Altman-Z
        THEN Z is 10 and the zone is SAFE
        """
        solvency = calculate_altman_z(Fundamentals(enterprise_value=100.0, total_cash=10.0))

        assert solvency.z_score == 10.0
        assert solvency.zone == SolvencyZone.SAFE
        assert solvency.label == "Very Safe (No Debt)"

    @pytest.mark.parametrize(
        "market_cap,expected_zone",
        [
            (90.0, SolvencyZone.SAFE),
            (30.0, SolvencyZone.GREY),
        ],
    )
    def test_zones_from_market_cap(self, market_cap, expected_zone):
        """
        GIVEN the same balance sheet with different market caps
        WHEN I compute Altman-Z
        THEN the zone follows the 3.0 / 1.8 thresholds
        """
        fundamentals = Fundamentals(
            market_cap=market_cap,
            enterprise_value=100.0,
            total_debt=20.0,
            total_cash=10.0,
            book_value=40.0,
            ebitda=20.0,
            total_revenue=50.0,
        )

        assert calculate_altman_z(fundamentals).zone == expected_zone

    def test_distress_zone(self):
        fundamentals = Fundamentals(
            market_cap=1.0,
            enterprise_value=100.0,
            total_debt=50.0,
            total_revenue=10.0,
        )

        solvency = calculate_altman_z(fundamentals)

        assert solvency.zone == SolvencyZone.DISTRESS
        assert solvency.label == "Distress Zone"


# =============================================================================
# SCORE
# =============================================================================


class TestRiskScore:
    """Tests for the composite score."""

    def test_calm_metrics_lower_the_score(self):
        """
        GIVEN zero volatility and drawdown, beta 1, Sharpe 0
        WHEN I score
        THEN it is 3 (two calm bands below the base of 5)
        """
        assert calculate_risk_score(RiskMetrics()) == 3

    def test_score_clamped_at_ten(self):
        metrics = RiskMetrics(volatility=50, max_drawdown=40, beta=2.0, sharpe=-1.0)
        assert calculate_risk_score(metrics) == 10

    def test_score_clamped_at_one(self):
        """
        GIVEN calm metrics, a strong balance sheet and bullish analysts
        WHEN I score
        THEN every bonus applies and the score is clamped to 1
        """
        fundamentals = Fundamentals(
            market_cap=300e9,
            trailing_pe=20.0,
            total_debt=10.0,
            total_cash=50.0,
            free_cashflow=1e9,
            revenue_growth=0.2,
        )

        score = calculate_risk_score(
            RiskMetrics(volatility=10, max_drawdown=5, beta=0.4, sharpe=2.0),
            fundamentals=fundamentals,
            consensus="strong_buy",
            target_upside=20.0,
        )

        assert score == 1

    def test_target_upside(self):
        assert calculate_target_upside(120.0, 100.0) == 20.0
        assert calculate_target_upside(None, 100.0) is None
        assert calculate_target_upside(120.0, 0.0) is None


# =============================================================================
# SNAPSHOT
# =============================================================================


class TestRiskMetricsSnapshot:
    """Tests for the full snapshot."""

    def test_short_history_is_neutral(self):
        """
        GIVEN 29 closes
        WHEN I compute the snapshot
        THEN the neutral snapshot is returned
        """
        assert risk_metrics(_rising(29)) == RiskMetrics.neutral()

    def test_short_benchmark_is_ignored(self):
        """
        GIVEN enough closes but a benchmark of 10 closes
        WHEN I compute the snapshot
        THEN beta is 1.0
        """
        metrics = risk_metrics(_zigzag(60), benchmark=_zigzag(10))

        assert metrics.beta == 1.0

    def test_benchmark_aligned_on_most_recent_window(self):
        """
        GIVEN a benchmark longer than the ticker history that ends with the same moves
        WHEN I compute the snapshot
        THEN beta is 1.0 from the aligned tail
        """
        prices = _zigzag(40)
        benchmark = _rising(20) + prices

        metrics = risk_metrics(prices, benchmark=benchmark)

        assert metrics.beta == pytest.approx(1.0)

    def test_snapshot_values_are_rounded_and_scored(self):
        """
        GIVEN a steadily rising series and bullish fundamentals
        WHEN I compute the snapshot
        THEN metrics are rounded to 2 dp, Sortino is 3 and score is in range
        """
        metrics = risk_metrics(
            _rising(60),
            fundamentals=Fundamentals(
                market_cap=50e9,
                enterprise_value=60e9,
                total_debt=5e9,
                total_cash=2e9,
                book_value=20e9,
                ebitda=8e9,
                total_revenue=30e9,
                trailing_pe=25.0,
                free_cashflow=3e9,
            ),
            consensus=AnalystConsensus(recommendation="buy", target_price=200.0),
        )

        assert metrics.sortino == 3.0
        assert metrics.max_drawdown == 0.0
        assert metrics.volatility == round(metrics.volatility, 2)
        assert 1 <= metrics.score <= 10
        assert metrics.solvency is not None
