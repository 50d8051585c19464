"""Baseline computation module."""

from payroll_anomaly.baselines.adaptive import (
    AdaptiveBounds,
    AlertGates,
    adaptive_margin,
    compute_bounds,
    validate_alert_conditions,
)
from payroll_anomaly.baselines.interface import BaselineCalculator
from payroll_anomaly.baselines.statistical import StatisticalBaselineCalculator

__all__ = [
    "AdaptiveBounds",
    "AlertGates",
    "BaselineCalculator",
    "StatisticalBaselineCalculator",
    "adaptive_margin",
    "compute_bounds",
    "validate_alert_conditions",
]
