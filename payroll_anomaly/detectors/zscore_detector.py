"""Adaptive Z-score detector implementation."""

import logging
from typing import Sequence

from payroll_anomaly.alerts.assembler import AlertAssembler
from payroll_anomaly.baselines.adaptive import compute_bounds, validate_alert_conditions
from payroll_anomaly.baselines.interface import BaselineCalculator
from payroll_anomaly.baselines.statistical import StatisticalBaselineCalculator
from payroll_anomaly.config.settings import DetectorKind, ZScoreConfig
from payroll_anomaly.detectors.interface import GroupDetector
from payroll_anomaly.models.baseline import BaselineMetrics
from payroll_anomaly.models.group import GroupKey, Observation, SeriesPoint
from payroll_anomaly.models.results import ZScoreResult

logger = logging.getLogger(__name__)


class ZScoreDetector(GroupDetector):
    """Flags values far from their historical mean.

    Algorithm:
    1. Keep the last ``analysis_window`` points and drop non-finite values
    2. Compute mean and sample standard deviation (at least ``min_periods``)
    3. Build adaptive bounds around the mean
    4. z = (current - mean) / sigma, or 0 when sigma is 0
    5. Severity from |z|; out of range only if all three gates hold

    Values are decimal fractions internally and percentages in the result.
    """

    _ALGORITHM_VERSION = "1.0.0"

    def __init__(
        self,
        config: ZScoreConfig | None = None,
        assembler: AlertAssembler | None = None,
        calculator: BaselineCalculator | None = None,
    ) -> None:
        """Initialize the Z-score detector.

        Args:
            config: Thresholds and data requirements
            assembler: Builds result records
            calculator: Historical statistics; defaults to a calculator
                requiring ``config.min_periods`` finite values
        """
        self._config = config or ZScoreConfig.default()
        self._assembler = assembler or AlertAssembler()
        self._calculator = calculator or StatisticalBaselineCalculator(
            min_samples=self._config.min_periods
        )

    @property
    def kind(self) -> DetectorKind:
        """Get the kind of detector."""
        return DetectorKind.ZSCORE

    @property
    def algorithm_version(self) -> str:
        """Get the algorithm version for this detector."""
        return self._ALGORITHM_VERSION

    @property
    def config_name(self) -> str:
        """Name of the preset the detector runs with."""
        return self._config.name

    @property
    def config(self) -> ZScoreConfig:
        """Active thresholds."""
        return self._config

    def is_excluded(self, key: GroupKey) -> bool:
        """Check whether the group's concept is excluded."""
        return key.concept in self._config.excluded_concepts

    def detect(
        self,
        key: GroupKey,
        history: Sequence[SeriesPoint],
        current: Observation,
    ) -> ZScoreResult:
        """Evaluate one group's current value against its history.

        Raises:
            InsufficientDataError: If fewer than ``min_periods`` finite
                values remain in the analysis window
        """
        values = self._window(history, self._config.analysis_window)
        baseline = self._calculator.compute(values)
        return self.evaluate(key, current.period, baseline, current.value)

    def evaluate(
        self,
        key: GroupKey,
        period: str,
        baseline: BaselineMetrics,
        current: float,
    ) -> ZScoreResult:
        """Classify a current value against precomputed historical statistics.

        Args:
            key: Group identity
            period: Period of the current value
            baseline: Historical mean and deviation
            current: Current value as a decimal fraction

        Returns:
            The Z-score result for the group
        """
        bounds = compute_bounds(baseline.mean, baseline.std, self._config)
        z_score = baseline.z_score(current)
        gates = validate_alert_conditions(current, z_score, bounds, self._config)

        logger.debug(
            "%s: z=%.3f bounds=[%.4f, %.4f] gates=(%s, %s, %s)",
            key.label,
            z_score,
            bounds.lower,
            bounds.upper,
            gates.exceeds_bounds,
            gates.significant_difference,
            gates.significant_zscore,
        )

        return self._assembler.build_zscore_result(
            key=key,
            period=period,
            current=current,
            baseline=baseline,
            bounds=bounds,
            z_score=z_score,
            gates=gates,
            thresholds=self._config,
        )
