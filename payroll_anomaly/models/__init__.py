"""Payroll anomaly models module."""

from payroll_anomaly.models.arima import ArimaForecast, ArimaModel
from payroll_anomaly.models.baseline import BaselineMetrics
from payroll_anomaly.models.group import (
    GroupKey,
    Observation,
    RunContext,
    SeriesPoint,
    is_chronological,
)
from payroll_anomaly.models.report import DetectionReport, DetectionResult, DetectionSummary
from payroll_anomaly.models.results import ArimaResult, Direction, ZScoreResult
from payroll_anomaly.models.severity import (
    ALERT,
    CRITICAL,
    HIGH,
    MODERATE,
    NORMAL,
    SeverityLevel,
    classify_interval,
    classify_zscore,
    severity_by_name,
)

__all__ = [
    # Groups and series
    "GroupKey",
    "Observation",
    "RunContext",
    "SeriesPoint",
    "is_chronological",
    # Statistics and models
    "ArimaForecast",
    "ArimaModel",
    "BaselineMetrics",
    # Severities
    "ALERT",
    "CRITICAL",
    "HIGH",
    "MODERATE",
    "NORMAL",
    "SeverityLevel",
    "classify_interval",
    "classify_zscore",
    "severity_by_name",
    # Results
    "ArimaResult",
    "DetectionReport",
    "DetectionResult",
    "DetectionSummary",
    "Direction",
    "ZScoreResult",
]
