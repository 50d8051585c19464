"""ARIMA order search and coefficient estimation.

Coefficients are estimated with the Hannan-Rissanen procedure, a
conditional least-squares method that needs no iterative optimizer:

1. when q > 0, a long AR(m) regression approximates the innovations;
2. the differenced series is regressed on an intercept, its own p lags
   and q lags of those innovations;
3. residuals are recomputed with the exact ARMA recursion, conditioning
   on the first p observations.

The log-likelihood is the Gaussian one evaluated at the residual MLE
variance, so AIC and BIC are comparable across (p, q) for a fixed d.
"""

import logging
import math
from typing import Iterable, Iterator, Sequence

import numpy as np

from payroll_anomaly.config.settings import ArimaConfig, SelectionCriterion
from payroll_anomaly.errors import InsufficientDataError, InvalidModelError
from payroll_anomaly.forecasting.differencing import (
    difference,
    ljung_box,
    select_differencing_order,
)
from payroll_anomaly.models.arima import ArimaModel

logger = logging.getLogger(__name__)

# Residual variance below this share of the series variance is treated as zero
_NEGLIGIBLE_VARIANCE = 1e-12
# Floor relative to the squared level, for series with no variance of their own
_ROUNDOFF_VARIANCE = 1e-24


class ArimaFitter:
    """Searches (p, d, q) orders and returns the best valid fitted model.

    d is chosen once by the stationarity heuristic; p and q are then
    searched exhaustively within the configured bounds. The search has no
    random component, so the same series and config always produce the
    same order and coefficients.
    """

    _ALGORITHM_VERSION = "1.0.0"

    def __init__(self, config: ArimaConfig | None = None) -> None:
        """Initialize the fitter.

        Args:
            config: Search bounds and selection criterion
        """
        self._config = config or ArimaConfig.default()

    @property
    def config(self) -> ArimaConfig:
        """The search configuration."""
        return self._config

    @property
    def algorithm_version(self) -> str:
        """Get the algorithm version for this fitter."""
        return self._ALGORITHM_VERSION

    def fit(self, series: Sequence[float]) -> ArimaModel:
        """Fit the best ARIMA model to a series.

        Args:
            series: Observations, oldest first

        Returns:
            The best valid model under the configured criterion

        Raises:
            InsufficientDataError: If the series is shorter than min_periods
            InvalidModelError: If no candidate order yields a valid model
        """
        values = np.asarray(series, dtype=float)
        values = values[np.isfinite(values)]

        if values.size < self._config.min_periods:
            raise InsufficientDataError(
                f"Insufficient data: {values.size} observations "
                f"(minimum: {self._config.min_periods})"
            )

        d = select_differencing_order(values, self._config.max_d)
        candidates = list(self._candidates(values, d))

        if not candidates:
            raise InvalidModelError(
                f"No valid ARIMA model for {values.size} observations with d={d}"
            )

        best = select_best(candidates, self._config.criterion)
        logger.debug(
            "Selected %s among %d candidates (%s=%.2f)",
            best.notation,
            len(candidates),
            self._config.criterion.value,
            best.criterion_value(self._config.criterion),
        )
        return best

    def fit_order(self, series: Sequence[float], p: int, d: int, q: int) -> ArimaModel | None:
        """Fit one ARIMA(p, d, q) candidate.

        Returns:
            The fitted model, or None when the order cannot be estimated on
            this series (too few rows, singular design, non-invertible MA
            part, or diverging residuals)
        """
        values = np.asarray(series, dtype=float)
        w = difference(values, d)
        n = w.size

        if n < 2 * (p + d + q + 1):
            return None

        with np.errstate(all="ignore"):
            estimate = _hannan_rissanen(w, p, q)
            if estimate is None:
                return None
            intercept, phi, theta = estimate

            if not _roots_outside_unit_circle(theta):
                logger.debug("Rejected ARIMA(%d,%d,%d): MA part not invertible", p, d, q)
                return None

            residuals = _conditional_residuals(w, intercept, phi, theta)

        n_eff = residuals.size
        if n_eff == 0 or not np.all(np.isfinite(residuals)):
            return None

        sse = float(residuals @ residuals)
        variance = sse / n_eff
        if variance <= _exact_fit_tolerance(w):
            # Exact fit up to rounding noise
            variance = 0.0
        k = p + q + 2  # ARMA coefficients, intercept and innovation variance

        if variance > 0:
            log_likelihood = -0.5 * n_eff * (math.log(2 * math.pi * variance) + 1.0)
            aic = 2 * k - 2 * log_likelihood
            bic = k * math.log(n_eff) - 2 * log_likelihood
        else:
            aic = bic = math.inf

        _, lb_pvalue = ljung_box(residuals, fitted_params=p + q)

        return ArimaModel(
            p=p,
            d=d,
            q=q,
            ar_coefficients=tuple(float(c) for c in phi),
            ma_coefficients=tuple(float(c) for c in theta),
            intercept=float(intercept),
            aic=aic,
            bic=bic,
            residual_std_error=math.sqrt(variance),
            adjusted_r2=_adjusted_r2(w[p:], sse, p + q + 1),
            residual_variance=variance,
            observation_count=n,
            was_differenced=d > 0,
            original_mean=float(values.mean()),
            residuals=tuple(float(e) for e in residuals),
            is_stationary=_roots_outside_unit_circle(-phi),
            is_invertible=True,
            ljung_box_pvalue=lb_pvalue,
            residuals_uncorrelated=lb_pvalue > self._config.significance_level,
        )

    def _candidates(self, values: np.ndarray, d: int) -> Iterator[ArimaModel]:
        for p in range(self._config.max_p + 1):
            for q in range(self._config.max_q + 1):
                # A stationary white-noise model with no terms explains nothing
                if p == 0 and q == 0 and d == 0:
                    continue
                model = self.fit_order(values, p, d, q)
                if model is not None and model.is_valid:
                    yield model


def select_best(
    models: Iterable[ArimaModel],
    criterion: SelectionCriterion | str = SelectionCriterion.AIC,
) -> ArimaModel:
    """Pick the lowest criterion value; ties go to fewer terms, then smaller p."""
    models = list(models)
    if not models:
        raise InvalidModelError("No valid ARIMA model")
    return min(
        models,
        key=lambda m: (round(m.criterion_value(criterion), 9), m.parameter_count, m.p),
    )


def _hannan_rissanen(w: np.ndarray, p: int, q: int) -> tuple[float, np.ndarray, np.ndarray] | None:
    n = w.size
    innovations = None
    start = p

    if q > 0:
        m = min(max(p, q) + 2, (n - 1) // 3)
        if m < 1:
            return None
        long_ar = _least_squares(_design_matrix(w, m, start=m), w[m:])
        if long_ar is None:
            return None
        innovations = np.zeros(n)
        innovations[m:] = long_ar[1]
        start = max(p, m + q)

    design = _design_matrix(w, p, innovations, q, start)
    fit = _least_squares(design, w[start:])
    if fit is None:
        return None

    coefficients = fit[0]
    return float(coefficients[0]), coefficients[1 : 1 + p], coefficients[1 + p :]


def _design_matrix(
    w: np.ndarray,
    p: int,
    innovations: np.ndarray | None = None,
    q: int = 0,
    start: int = 0,
) -> np.ndarray:
    n = w.size
    columns = [np.ones(n - start)]
    columns += [w[start - i : n - i] for i in range(1, p + 1)]
    if innovations is not None:
        columns += [innovations[start - j : n - j] for j in range(1, q + 1)]
    return np.column_stack(columns)


def _least_squares(design: np.ndarray, target: np.ndarray) -> tuple[np.ndarray, np.ndarray] | None:
    """OLS fit; None unless there are more rows than columns."""
    if target.size <= design.shape[1]:
        return None
    try:
        coefficients, *_ = np.linalg.lstsq(design, target, rcond=None)
    except np.linalg.LinAlgError:
        return None
    if not np.all(np.isfinite(coefficients)):
        return None
    return coefficients, target - design @ coefficients


def _conditional_residuals(
    w: np.ndarray,
    intercept: float,
    phi: np.ndarray,
    theta: np.ndarray,
) -> np.ndarray:
    p, q = len(phi), len(theta)
    n = w.size
    e = np.zeros(n)
    for t in range(p, n):
        ar = sum(phi[i] * w[t - 1 - i] for i in range(p))
        ma = sum(theta[j] * e[t - 1 - j] for j in range(q) if t - 1 - j >= 0)
        e[t] = w[t] - intercept - ar - ma
    return e[p:]


def _roots_outside_unit_circle(coefficients: np.ndarray) -> bool:
    """True when every root of 1 + c1*z + ... + ck*z^k lies outside |z| = 1."""
    coefficients = np.asarray(coefficients, dtype=float)
    if coefficients.size == 0 or not np.any(coefficients):
        return True
    if not np.all(np.isfinite(coefficients)):
        return False
    roots = np.roots(np.concatenate([coefficients[::-1], [1.0]]))
    return bool(np.all(np.abs(roots) > 1.0))


def _adjusted_r2(target: np.ndarray, sse: float, n_params: int) -> float:
    n = target.size
    centered = target - target.mean()
    sst = float(centered @ centered)
    if sst == 0.0 or n <= n_params:
        return 0.0
    return 1.0 - (sse / (n - n_params)) / (sst / (n - 1))


def _exact_fit_tolerance(w: np.ndarray) -> float:
    """Residual variance at or below which a fit is exact up to rounding.

    Scaled by the spread of the series so that its level does not matter;
    the level only enters through the rounding floor.
    """
    return _NEGLIGIBLE_VARIANCE * float(np.var(w)) + _ROUNDOFF_VARIANCE * float(np.mean(w * w))
