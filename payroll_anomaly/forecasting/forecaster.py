"""One-step-ahead ARIMA forecasts with prediction intervals."""

import logging
import math
from typing import Sequence

import numpy as np

from payroll_anomaly.config.settings import ArimaConfig
from payroll_anomaly.errors import DegenerateForecastError
from payroll_anomaly.forecasting.differencing import difference, integrate_forecast
from payroll_anomaly.models.arima import ArimaForecast, ArimaModel

logger = logging.getLogger(__name__)


class ArimaForecaster:
    """Turns a fitted model and its source series into an interval forecast.

    The standard error is the residual standard error inflated by a simple
    parameter-uncertainty term, ``sqrt(1 + (p + q + 1) / n)``, where ``n``
    is the number of residuals the model was estimated on.
    """

    def __init__(self, config: ArimaConfig | None = None) -> None:
        """Initialize the forecaster.

        Args:
            config: Supplies the confidence level and its z-value
        """
        self._config = config or ArimaConfig.default()

    def forecast(self, model: ArimaModel, series: Sequence[float]) -> ArimaForecast:
        """Forecast the next value of ``series``.

        Args:
            model: Model fitted on ``series``
            series: The same observations the model was fitted on, oldest first

        Returns:
            Point forecast and symmetric interval on the original scale

        Raises:
            DegenerateForecastError: If the point or standard error is not
                finite, or the standard error is not positive
        """
        values = np.asarray(series, dtype=float)
        values = values[np.isfinite(values)]
        w = difference(values, model.d)

        if w.size < model.p:
            raise DegenerateForecastError(
                f"{model.notation}: series too short to forecast ({w.size} points)"
            )

        next_w = model.intercept
        for i, phi in enumerate(model.ar_coefficients):
            next_w += phi * w[-1 - i]
        for j, theta in enumerate(model.ma_coefficients):
            if j < len(model.residuals):
                next_w += theta * model.residuals[-1 - j]

        point = integrate_forecast(values, model.d, next_w)
        standard_error = self.standard_error(model)

        if not math.isfinite(point) or not math.isfinite(standard_error) or standard_error <= 0:
            raise DegenerateForecastError(
                f"{model.notation}: degenerate forecast (point={point}, se={standard_error})"
            )

        half_width = self._config.z_value * standard_error
        return ArimaForecast(
            point=point,
            lower=point - half_width,
            upper=point + half_width,
            standard_error=standard_error,
            confidence_level=self._config.confidence_level,
        )

    @staticmethod
    def standard_error(model: ArimaModel) -> float:
        """Forecast standard error for one step ahead."""
        n_eff = len(model.residuals) or model.observation_count
        if n_eff <= 0:
            return math.nan
        inflation = 1.0 + (model.parameter_count + 1) / n_eff
        return model.residual_std_error * math.sqrt(inflation)
