"""Unit tests for the ARIMA detector and the detector registry."""

import numpy as np
import pytest

from payroll_anomaly.config import ArimaConfig, Settings, arima_preset, configure
from payroll_anomaly.config.settings import DetectorKind
from payroll_anomaly.detectors import (
    ArimaDetector,
    DetectorRegistry,
    ZScoreDetector,
    get_detector_registry,
)
from payroll_anomaly.errors import InsufficientDataError
from payroll_anomaly.models import GroupKey, Observation, SeriesPoint


def weekly_points(values) -> list[SeriesPoint]:
    """Build a weekly series over two years of week tokens."""
    return [
        SeriesPoint(period=f"{2024 + i // 52}{i % 52 + 1:02d}", value=float(v))
        for i, v in enumerate(values)
    ]


@pytest.fixture
def key() -> GroupKey:
    """Create a test group key."""
    return GroupKey("CASHIER", "Commission amount", 3050, "SUR", 2)


@pytest.fixture
def noisy_history() -> list[SeriesPoint]:
    """Forty weeks of noise around 100."""
    rng = np.random.default_rng(11)
    return weekly_points(100.0 + rng.normal(0.0, 3.0, size=40))


class TestArimaDetector:
    """Tests for ArimaDetector.detect."""

    @pytest.fixture
    def detector(self) -> ArimaDetector:
        """Create a detector with default bounds."""
        return ArimaDetector(ArimaConfig.default())

    def test_value_inside_interval(
        self, detector: ArimaDetector, key: GroupKey, noisy_history: list[SeriesPoint]
    ) -> None:
        """Test that a typical value is not flagged."""
        current = Observation(key=key, period="202501", value=100.0)

        result = detector.detect(key, noisy_history, current)

        assert result.out_of_range is False
        assert result.deviation_percentage == 0.0
        assert result.historical_count == 40
        assert result.robust_model is True

    def test_value_far_below(
        self, detector: ArimaDetector, key: GroupKey, noisy_history: list[SeriesPoint]
    ) -> None:
        """Test that a collapse is flagged below the interval."""
        current = Observation(key=key, period="202501", value=40.0)

        result = detector.detect(key, noisy_history, current)

        assert result.out_of_range is True
        assert result.direction.value == "BELOW"
        assert result.deviation_percentage < 0
        assert result.distance_se < 0

    def test_too_short(self, detector: ArimaDetector, key: GroupKey) -> None:
        """Test the minimum period gate."""
        current = Observation(key=key, period="202412", value=1.0)

        with pytest.raises(InsufficientDataError):
            detector.detect(key, weekly_points(range(11)), current)

    def test_too_many_invalid_values(
        self, detector: ArimaDetector, key: GroupKey, noisy_history: list[SeriesPoint]
    ) -> None:
        """Test the minimum share of finite values."""
        values = [p.value for p in noisy_history[:20]]
        values[::3] = [float("nan")] * len(values[::3])
        current = Observation(key=key, period="202501", value=100.0)

        with pytest.raises(InsufficientDataError, match="valid"):
            detector.detect(key, weekly_points(values), current)

    def test_analysis_window_limits_history(self, key: GroupKey, noisy_history: list[SeriesPoint]) -> None:
        """Test that only the most recent points are fitted."""
        detector = ArimaDetector(arima_preset("default", analysis_window=24))
        current = Observation(key=key, period="202501", value=100.0)

        result = detector.detect(key, noisy_history, current)

        assert result.historical_count == 24

    def test_excluded_concept(self, detector: ArimaDetector) -> None:
        """Test the headcount exclusion."""
        assert detector.is_excluded(GroupKey("CASHIER", "Headcount", 1011, "SUR", 2))
        assert not ArimaDetector(arima_preset("default", excluded_concept=None)).is_excluded(
            GroupKey("CASHIER", "Headcount", 1011, "SUR", 2)
        )


class TestDetectorRegistry:
    """Tests for DetectorRegistry."""

    def test_enabled_from_settings(self) -> None:
        """Test that settings decide the enabled detectors."""
        registry = DetectorRegistry(Settings(arima_enabled=False))

        assert registry.list_enabled_kinds() == [DetectorKind.ZSCORE]
        assert registry.get_detector("arima") is None
        assert isinstance(registry.get_detector(DetectorKind.ZSCORE), ZScoreDetector)

    def test_presets_applied(self) -> None:
        """Test that detectors get the configured presets."""
        registry = DetectorRegistry(Settings(zscore_preset="strict", arima_preset="conservative"))

        assert registry.get_detector(DetectorKind.ZSCORE).config_name == "strict"
        assert registry.get_detector(DetectorKind.ARIMA).config_name == "conservative"

    def test_register_mismatch(self) -> None:
        """Test that a detector must match its registration kind."""
        registry = DetectorRegistry(Settings())

        with pytest.raises(ValueError, match="does not match"):
            registry.register_detector(DetectorKind.ARIMA, ZScoreDetector())

    def test_register_custom(self) -> None:
        """Test replacing a detector."""
        registry = DetectorRegistry(Settings(zscore_enabled=False))
        custom = ZScoreDetector()

        registry.register_detector(DetectorKind.ZSCORE, custom)

        assert registry.get_detector(DetectorKind.ZSCORE) is custom

    def test_global_registry_uses_global_settings(self) -> None:
        """Test the lazily created global registry."""
        configure(Settings(zscore_enabled=False))

        registry = get_detector_registry()

        assert registry.list_enabled_kinds() == [DetectorKind.ARIMA]
        assert get_detector_registry() is registry
