"""Payroll anomaly configuration module."""

from payroll_anomaly.config.log_setup import configure_logging
from payroll_anomaly.config.settings import (
    EMPLOYEE_HEADCOUNT_CONCEPT,
    ArimaConfig,
    DetectorKind,
    SelectionCriterion,
    Settings,
    ZScoreConfig,
    arima_preset,
    configure,
    get_settings,
    reset_settings,
    zscore_preset,
)

__all__ = [
    "EMPLOYEE_HEADCOUNT_CONCEPT",
    "ArimaConfig",
    "DetectorKind",
    "SelectionCriterion",
    "Settings",
    "ZScoreConfig",
    "arima_preset",
    "configure",
    "configure_logging",
    "get_settings",
    "reset_settings",
    "zscore_preset",
]
