"""Unit tests for the Z-score detector."""

import pytest

from payroll_anomaly.config import ZScoreConfig, zscore_preset
from payroll_anomaly.config.settings import DetectorKind
from payroll_anomaly.detectors import ZScoreDetector
from payroll_anomaly.errors import InsufficientDataError
from payroll_anomaly.models import (
    CRITICAL,
    NORMAL,
    BaselineMetrics,
    GroupKey,
    Observation,
    SeriesPoint,
)


def weekly_points(values: list[float], year: int = 2025) -> list[SeriesPoint]:
    """Build a weekly series starting at week 1."""
    return [SeriesPoint(period=f"{year}{week:02d}", value=v) for week, v in enumerate(values, start=1)]


@pytest.fixture
def key() -> GroupKey:
    """Create a test group key."""
    return GroupKey(
        position="ANALYST",
        indicator="Overtime ratio",
        concept=2001,
        branch="NORTE",
        business_line=1,
    )


@pytest.fixture
def detector() -> ZScoreDetector:
    """Create a detector with default thresholds."""
    return ZScoreDetector(ZScoreConfig.default())


class TestZScoreDetector:
    """Tests for ZScoreDetector.detect."""

    def test_kind_and_version(self, detector: ZScoreDetector) -> None:
        """Test detector identity."""
        assert detector.kind is DetectorKind.ZSCORE
        assert detector.algorithm_version == "1.0.0"
        assert detector.config_name == "default"

    def test_flat_history_current_equal(self, detector: ZScoreDetector, key: GroupKey) -> None:
        """Test a flat history with the same current value."""
        history = weekly_points([0.10] * 12)
        current = Observation(key=key, period="202513", value=0.10)

        result = detector.detect(key, history, current)

        assert result.z_score == 0.0
        assert result.severity is NORMAL
        assert result.out_of_range is False
        assert result.current_value == 10.0
        assert result.historical_std == 0.0
        assert result.historical_count == 12

    def test_flat_history_far_current_is_normal(
        self, detector: ZScoreDetector, key: GroupKey
    ) -> None:
        """Test that zero deviation gives NORMAL whatever the distance."""
        history = weekly_points([10.0] * 12)
        current = Observation(key=key, period="202513", value=50.0)

        result = detector.detect(key, history, current)

        assert result.z_score == 0.0
        assert result.severity is NORMAL
        assert result.exceeds_bounds is True
        assert result.significant_zscore is False
        assert result.out_of_range is False

    def test_short_history_raises(self, detector: ZScoreDetector, key: GroupKey) -> None:
        """Test that histories below min_periods are rejected."""
        history = weekly_points([0.1] * 11)
        current = Observation(key=key, period="202512", value=0.5)

        with pytest.raises(InsufficientDataError):
            detector.detect(key, history, current)

    def test_non_finite_history_does_not_count(
        self, detector: ZScoreDetector, key: GroupKey
    ) -> None:
        """Test that NaN points do not satisfy the minimum."""
        history = weekly_points([0.1] * 11 + [float("nan")])
        current = Observation(key=key, period="202513", value=0.1)

        with pytest.raises(InsufficientDataError):
            detector.detect(key, history, current)

    def test_analysis_window(self, key: GroupKey) -> None:
        """Test that only the most recent points are used."""
        detector = ZScoreDetector(zscore_preset("default", analysis_window=20))
        history = weekly_points([10.0] * 8 + [0.10] * 20)
        current = Observation(key=key, period="202529", value=0.10)

        result = detector.detect(key, history, current)

        assert result.historical_count == 20
        assert result.historical_mean == 10.0

    def test_is_excluded(self, detector: ZScoreDetector) -> None:
        """Test that the headcount concept is excluded by default."""
        headcount = GroupKey("ANALYST", "Headcount", 1011, "NORTE", 1)
        overtime = GroupKey("ANALYST", "Overtime", 2001, "NORTE", 1)

        assert detector.is_excluded(headcount)
        assert not detector.is_excluded(overtime)


class TestZScoreEvaluate:
    """Tests for ZScoreDetector.evaluate with precomputed statistics."""

    def test_critical_outlier(self, detector: ZScoreDetector, key: GroupKey) -> None:
        """Test mean 5, sigma 2 and a current value of 12."""
        baseline = BaselineMetrics(
            mean=5.0, std=2.0, median=5.0, min_value=2.0, max_value=8.0, sample_count=12
        )

        result = detector.evaluate(key, "202513", baseline, 12.0)

        assert result.z_score == 3.5
        assert result.abs_z_score == 3.5
        assert result.severity is CRITICAL
        assert result.margin == 20.0
        assert result.lower_bound == 480.0
        assert result.upper_bound == 520.0
        assert result.out_of_range is True

    def test_high_severity_without_out_of_range(
        self, key: GroupKey
    ) -> None:
        """Test that a failed gate keeps a CRITICAL group in range."""
        detector = ZScoreDetector(zscore_preset("default", min_difference=0.05))
        baseline = BaselineMetrics(
            mean=0.10, std=0.005, median=0.10, min_value=0.09, max_value=0.11, sample_count=12
        )

        result = detector.evaluate(key, "202513", baseline, 0.13)

        assert result.severity is CRITICAL
        assert result.exceeds_bounds is True
        assert result.significant_difference is False
        assert result.out_of_range is False

    def test_negative_deviation(self, detector: ZScoreDetector, key: GroupKey) -> None:
        """Test a value far below the mean."""
        baseline = BaselineMetrics(
            mean=0.50, std=0.10, median=0.50, min_value=0.3, max_value=0.7, sample_count=20
        )

        result = detector.evaluate(key, "202513", baseline, 0.20)

        assert result.z_score == -3.0
        assert result.abs_z_score == 3.0
        assert result.out_of_range is True
        assert result.to_dict()["severity"] == "HIGH"

    def test_result_is_deterministic(self, detector: ZScoreDetector, key: GroupKey) -> None:
        """Test that identical inputs give identical results."""
        history = weekly_points([0.1, 0.12, 0.11, 0.13, 0.1, 0.09, 0.12, 0.11, 0.1, 0.12, 0.13, 0.11])
        current = Observation(key=key, period="202513", value=0.2)

        assert detector.detect(key, history, current) == detector.detect(key, history, current)
