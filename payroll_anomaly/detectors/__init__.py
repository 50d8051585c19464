"""Group detectors module."""

from payroll_anomaly.detectors.arima_detector import ArimaDetector
from payroll_anomaly.detectors.interface import GroupDetector
from payroll_anomaly.detectors.registry import (
    DetectorRegistry,
    get_detector_registry,
    reset_detector_registry,
)
from payroll_anomaly.detectors.zscore_detector import ZScoreDetector

__all__ = [
    "ArimaDetector",
    "DetectorRegistry",
    "GroupDetector",
    "ZScoreDetector",
    "get_detector_registry",
    "reset_detector_registry",
]
