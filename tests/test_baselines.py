"""Unit tests for baseline computation and adaptive bounds."""

import math

import pytest

from payroll_anomaly.baselines import (
    StatisticalBaselineCalculator,
    adaptive_margin,
    compute_bounds,
    validate_alert_conditions,
)
from payroll_anomaly.config import ZScoreConfig, zscore_preset
from payroll_anomaly.errors import InsufficientDataError
from payroll_anomaly.models import BaselineMetrics


def create_baseline(mean: float, std: float) -> BaselineMetrics:
    """Create baseline metrics with the given mean and deviation."""
    return BaselineMetrics(
        mean=mean,
        std=std,
        median=mean,
        min_value=mean - std,
        max_value=mean + std,
        sample_count=12,
    )


class TestStatisticalBaselineCalculator:
    """Tests for StatisticalBaselineCalculator."""

    @pytest.fixture
    def calculator(self) -> StatisticalBaselineCalculator:
        """Create a calculator instance."""
        return StatisticalBaselineCalculator()

    def test_compute_basic_metrics(self, calculator: StatisticalBaselineCalculator) -> None:
        """Test basic metric computation."""
        metrics = calculator.compute([10.0, 20.0, 30.0, 40.0, 50.0])

        assert metrics.mean == 30.0
        assert metrics.median == 30.0
        assert metrics.sample_count == 5
        assert metrics.min_value == 10.0
        assert metrics.max_value == 50.0

    def test_min_samples_never_below_two(self) -> None:
        """Test that a deviation always has at least two samples."""
        assert StatisticalBaselineCalculator(min_samples=1).min_samples == 2
        assert StatisticalBaselineCalculator(min_samples=12).min_samples == 12

    def test_compute_sample_std(self, calculator: StatisticalBaselineCalculator) -> None:
        """Test that the deviation uses n - 1."""
        metrics = calculator.compute([1.0, 2.0, 3.0, 4.0, 5.0])

        assert metrics.std == pytest.approx(math.sqrt(2.5))

    def test_zero_std_is_valid(self, calculator: StatisticalBaselineCalculator) -> None:
        """Test that a flat history is not an error."""
        metrics = calculator.compute([0.1] * 12)

        assert metrics.std == 0.0
        assert metrics.is_degenerate
        assert metrics.z_score(0.5) == 0.0

    def test_non_finite_values_dropped(self, calculator: StatisticalBaselineCalculator) -> None:
        """Test that NaN and infinities are ignored."""
        metrics = calculator.compute([1.0, float("nan"), 2.0, float("inf"), 3.0])

        assert metrics.sample_count == 3
        assert metrics.mean == 2.0

    def test_compute_requires_min_samples(
        self, calculator: StatisticalBaselineCalculator
    ) -> None:
        """Test that computation fails with insufficient samples."""
        with pytest.raises(InsufficientDataError, match="Insufficient data"):
            calculator.compute([1.0])

    def test_custom_min_samples(self) -> None:
        """Test a calculator that needs a full year of weeks."""
        calculator = StatisticalBaselineCalculator(min_samples=12)

        with pytest.raises(InsufficientDataError):
            calculator.compute([1.0] * 11)
        assert calculator.compute([1.0] * 12).sample_count == 12

    def test_compute_deterministic(self, calculator: StatisticalBaselineCalculator) -> None:
        """Test that computation is deterministic."""
        values = [0.11, 0.12, 0.1, 0.13, 0.09, 0.12, 0.11]

        assert calculator.compute(values) == calculator.compute(values)


class TestZScoreComputation:
    """Tests for BaselineMetrics.z_score."""

    def test_z_score_basic(self) -> None:
        """Test basic z-score computation."""
        assert create_baseline(100.0, 10.0).z_score(120.0) == 2.0

    def test_z_score_negative(self) -> None:
        """Test negative z-score."""
        assert create_baseline(100.0, 10.0).z_score(80.0) == -2.0

    def test_z_score_zero_std(self) -> None:
        """Test that zero deviation gives zero whatever the distance."""
        assert create_baseline(100.0, 0.0).z_score(100.0) == 0.0
        assert create_baseline(100.0, 0.0).z_score(110.0) == 0.0


class TestAdaptiveMargin:
    """Tests for the volatility-tiered margin."""

    @pytest.fixture
    def config(self) -> ZScoreConfig:
        """Default thresholds."""
        return ZScoreConfig.default()

    def test_stable_tier(self, config: ZScoreConfig) -> None:
        """Test the fixed margin for very stable series."""
        assert adaptive_margin(0.005, config) == pytest.approx(0.015)
        assert adaptive_margin(0.0, config) == pytest.approx(0.015)

    def test_medium_tier(self, config: ZScoreConfig) -> None:
        """Test the scaled margin for medium volatility."""
        assert adaptive_margin(0.03, config) == pytest.approx(0.039)

    def test_volatile_tier(self, config: ZScoreConfig) -> None:
        """Test that high volatility uses sigma directly."""
        assert adaptive_margin(0.10, config) == pytest.approx(0.10)

    def test_ceiling(self, config: ZScoreConfig) -> None:
        """Test the margin ceiling."""
        assert adaptive_margin(2.0, config) == pytest.approx(0.20)

    def test_floor(self) -> None:
        """Test the margin floor."""
        config = zscore_preset("default", stable_factor=0.5)

        assert adaptive_margin(0.001, config) == pytest.approx(0.01)

    def test_bounds_centred_on_mean(self, config: ZScoreConfig) -> None:
        """Test bound construction."""
        bounds = compute_bounds(0.5, 0.03, config)

        assert bounds.lower == pytest.approx(0.461)
        assert bounds.upper == pytest.approx(0.539)
        assert not bounds.excludes(0.53)
        assert bounds.excludes(0.55)
        assert bounds.excludes(0.45)


class TestAlertConditions:
    """Tests for the triple validation rule."""

    def test_all_gates_hold(self) -> None:
        """Test a clear outlier."""
        config = ZScoreConfig.default()
        bounds = compute_bounds(5.0, 2.0, config)
        gates = validate_alert_conditions(12.0, 3.5, bounds, config)

        assert gates.exceeds_bounds
        assert gates.significant_difference
        assert gates.significant_zscore
        assert gates.out_of_range

    def test_zscore_gate_fails(self) -> None:
        """Test a value outside the bounds with a small z-score."""
        config = ZScoreConfig.default()
        bounds = compute_bounds(0.10, 0.30, config)
        z = create_baseline(0.10, 0.30).z_score(0.35)
        gates = validate_alert_conditions(0.35, z, bounds, config)

        assert gates.exceeds_bounds
        assert gates.significant_difference
        assert not gates.significant_zscore
        assert not gates.out_of_range

    def test_difference_gate_fails(self) -> None:
        """Test a value outside the bounds by less than the minimum difference."""
        config = zscore_preset("default", min_difference=0.05)
        bounds = compute_bounds(0.10, 0.005, config)
        z = create_baseline(0.10, 0.005).z_score(0.13)
        gates = validate_alert_conditions(0.13, z, bounds, config)

        assert gates.exceeds_bounds
        assert not gates.significant_difference
        assert gates.significant_zscore
        assert not gates.out_of_range
