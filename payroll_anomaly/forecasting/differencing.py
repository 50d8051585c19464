"""Differencing, stationarity and residual diagnostics for short series."""

import logging
from typing import Sequence

import numpy as np
from scipy.stats import chi2

logger = logging.getLogger(__name__)

# A lag-1 autocorrelation at or above this marks the series as non-stationary
STATIONARITY_ACF_THRESHOLD = 0.9


def autocorrelation(values: Sequence[float], lag: int) -> float:
    """Sample autocorrelation at ``lag``.

    Returns 1.0 at lag 0, and 0.0 when the lag exceeds the series or the
    series has no variance.
    """
    x = np.asarray(values, dtype=float)
    n = x.size
    if lag == 0:
        return 1.0
    if lag >= n or lag < 0:
        return 0.0

    centered = x - x.mean()
    denominator = float(centered @ centered)
    if denominator == 0.0:
        return 0.0
    return float(centered[lag:] @ centered[:-lag]) / denominator


def difference(values: Sequence[float], order: int = 1) -> np.ndarray:
    """Apply ``order`` rounds of first differencing."""
    x = np.asarray(values, dtype=float)
    if order <= 0:
        return x.copy()
    return np.diff(x, n=order)


def is_stationary(values: Sequence[float], threshold: float = STATIONARITY_ACF_THRESHOLD) -> bool:
    """Heuristic stationarity check on the lag-1 autocorrelation."""
    return abs(autocorrelation(values, 1)) < threshold


def select_differencing_order(
    values: Sequence[float],
    max_d: int,
    threshold: float = STATIONARITY_ACF_THRESHOLD,
) -> int:
    """Difference until the series looks stationary or ``max_d`` is reached."""
    current = np.asarray(values, dtype=float)
    d = 0
    while d < max_d and current.size > 2 and not is_stationary(current, threshold):
        current = np.diff(current)
        d += 1
    logger.debug("Differencing order d=%d (lag-1 acf=%.3f)", d, autocorrelation(current, 1))
    return d


def integrate_forecast(values: Sequence[float], d: int, differenced_forecast: float) -> float:
    """Undo ``d`` rounds of differencing for a one-step-ahead forecast."""
    levels = [np.asarray(values, dtype=float)]
    for _ in range(d):
        levels.append(np.diff(levels[-1]))

    forecast = float(differenced_forecast)
    for level in reversed(levels[:-1]):
        forecast = float(level[-1]) + forecast
    return forecast


def ljung_box(residuals: Sequence[float], fitted_params: int = 0, lags: int | None = None) -> tuple[float, float]:
    """Ljung-Box portmanteau test for residual autocorrelation.

    Args:
        residuals: Model residuals
        fitted_params: ARMA coefficients estimated (p + q), removed from the
            degrees of freedom
        lags: Number of autocorrelations to pool; defaults to min(10, n // 5)

    Returns:
        (Q statistic, p-value). A p-value of 1.0 is returned when the
        series is too short to test.
    """
    e = np.asarray(residuals, dtype=float)
    n = e.size
    if lags is None:
        lags = min(10, n // 5)
    dof = lags - fitted_params
    if lags < 1 or dof < 1 or n <= lags:
        return 0.0, 1.0

    q_stat = n * (n + 2) * sum(autocorrelation(e, k) ** 2 / (n - k) for k in range(1, lags + 1))
    return float(q_stat), float(chi2.sf(q_stat, dof))
