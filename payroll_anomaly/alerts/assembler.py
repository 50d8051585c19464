"""Shape detector output into result records.

The two detectors use different out-of-range policies. ARIMA bounds are
already calibrated to a confidence level, so a single interval test
decides. Z-score bounds come from an adaptive margin and must also pass
the difference and z-score gates, evaluated before reaching here.
"""

import logging

from payroll_anomaly.alerts.numbers import (
    DEVIATION_LIMIT,
    clamp,
    safe_round,
    to_percentage,
)
from payroll_anomaly.baselines.adaptive import AdaptiveBounds, AlertGates
from payroll_anomaly.models.arima import ArimaForecast, ArimaModel
from payroll_anomaly.models.baseline import BaselineMetrics
from payroll_anomaly.models.group import GroupKey
from payroll_anomaly.models.results import ArimaResult, Direction, ZScoreResult
from payroll_anomaly.models.severity import (
    SeverityThresholds,
    classify_interval,
    classify_zscore,
)

logger = logging.getLogger(__name__)

NON_ROBUST_ADVISORY = "Insufficient history for a robust model"


def direction(observed: float, lower: float, upper: float) -> Direction:
    """Side of the interval the observation falls on."""
    if observed < lower:
        return Direction.BELOW
    if observed > upper:
        return Direction.ABOVE
    return Direction.WITHIN


def deviation_percentage(observed: float, lower: float, upper: float) -> float:
    """Signed distance past the violated bound, as a percentage of the width.

    0 inside the closed interval. Clamped to +/-1000 and rounded to one
    decimal. A zero-width interval yields the clamp limit on the violated
    side.
    """
    side = direction(observed, lower, upper)
    if side is Direction.WITHIN:
        return 0.0

    width = upper - lower
    if width <= 0:
        return DEVIATION_LIMIT if side is Direction.ABOVE else -DEVIATION_LIMIT

    bound = lower if side is Direction.BELOW else upper
    pct = (observed - bound) / width * 100.0
    return safe_round(clamp(pct, -DEVIATION_LIMIT, DEVIATION_LIMIT), 1, "deviation_percentage")


class AlertAssembler:
    """Builds result records from detector output and group identity.

    Holds only immutable policy (robustness cutoff and advisory text), so one
    instance can be shared by every worker of a run.
    """

    def __init__(
        self,
        robust_model_periods: int = 12,
        advisory: str = NON_ROBUST_ADVISORY,
    ) -> None:
        """Initialize the assembler.

        Args:
            robust_model_periods: Historical periods needed for a model to be
                considered robust
            advisory: Message attached to non-robust ARIMA results
        """
        if robust_model_periods < 1:
            raise ValueError("robust_model_periods must be >= 1")
        self._robust_model_periods = robust_model_periods
        self._advisory = advisory

    @property
    def robust_model_periods(self) -> int:
        """Historical periods needed for a robust model."""
        return self._robust_model_periods

    def build_zscore_result(
        self,
        key: GroupKey,
        period: str,
        current: float,
        baseline: BaselineMetrics,
        bounds: AdaptiveBounds,
        z_score: float,
        gates: AlertGates,
        thresholds: SeverityThresholds,
    ) -> ZScoreResult:
        """Classify and round a Z-score evaluation.

        Values arrive as decimal fractions and leave as percentages.
        """
        abs_z = abs(z_score)
        severity = classify_zscore(abs_z, thresholds)

        return ZScoreResult(
            key=key,
            period=period,
            current_value=to_percentage(current, field="current_value"),
            historical_mean=to_percentage(baseline.mean, field="historical_mean"),
            historical_std=to_percentage(baseline.std, field="historical_std"),
            margin=to_percentage(bounds.margin, field="margin"),
            lower_bound=to_percentage(bounds.lower, field="lower_bound"),
            upper_bound=to_percentage(bounds.upper, field="upper_bound"),
            z_score=safe_round(z_score, 2, "z_score"),
            abs_z_score=safe_round(abs_z, 2, "abs_z_score"),
            severity=severity,
            out_of_range=gates.out_of_range,
            exceeds_bounds=gates.exceeds_bounds,
            significant_difference=gates.significant_difference,
            significant_zscore=gates.significant_zscore,
            historical_count=baseline.sample_count,
        )

    def build_arima_result(
        self,
        key: GroupKey,
        period: str,
        observed: float,
        forecast: ArimaForecast,
        model: ArimaModel,
        historical_count: int,
    ) -> ArimaResult:
        """Compare an observation against its forecast interval."""
        out_of_range = observed < forecast.lower or observed > forecast.upper
        robust = historical_count >= self._robust_model_periods

        distance = 0.0
        if forecast.standard_error > 0:
            distance = (observed - forecast.point) / forecast.standard_error

        return ArimaResult(
            key=key,
            period=period,
            observed_value=safe_round(observed, 2, "observed_value"),
            forecast=safe_round(forecast.point, 2, "forecast"),
            lower_bound=safe_round(forecast.lower, 2, "lower_bound"),
            upper_bound=safe_round(forecast.upper, 2, "upper_bound"),
            standard_error=safe_round(forecast.standard_error, 4, "standard_error"),
            interval_width=safe_round(forecast.width, 2, "interval_width"),
            deviation_percentage=deviation_percentage(observed, forecast.lower, forecast.upper),
            distance_se=safe_round(distance, 2, "distance_se"),
            direction=direction(observed, forecast.lower, forecast.upper),
            out_of_range=out_of_range,
            historical_count=historical_count,
            robust_model=robust,
            advisory=None if robust else self._advisory,
            severity=classify_interval(out_of_range),
            model_notation=model.notation,
            aic=safe_round(model.aic, 2, "aic"),
        )
