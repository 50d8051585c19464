"""ARIMA fitting and forecasting module."""

from payroll_anomaly.forecasting.differencing import (
    STATIONARITY_ACF_THRESHOLD,
    autocorrelation,
    difference,
    integrate_forecast,
    is_stationary,
    ljung_box,
    select_differencing_order,
)
from payroll_anomaly.forecasting.fitter import ArimaFitter, select_best
from payroll_anomaly.forecasting.forecaster import ArimaForecaster

__all__ = [
    "STATIONARITY_ACF_THRESHOLD",
    "ArimaFitter",
    "ArimaForecaster",
    "autocorrelation",
    "difference",
    "integrate_forecast",
    "is_stationary",
    "ljung_box",
    "select_best",
    "select_differencing_order",
]
