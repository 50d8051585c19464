"""ARIMA prediction-interval detector implementation."""

import logging
import math
from typing import Sequence

from payroll_anomaly.alerts.assembler import AlertAssembler
from payroll_anomaly.config.settings import ArimaConfig, DetectorKind
from payroll_anomaly.detectors.interface import GroupDetector
from payroll_anomaly.errors import InsufficientDataError
from payroll_anomaly.forecasting.fitter import ArimaFitter
from payroll_anomaly.forecasting.forecaster import ArimaForecaster
from payroll_anomaly.models.group import GroupKey, Observation, SeriesPoint
from payroll_anomaly.models.results import ArimaResult

logger = logging.getLogger(__name__)


class ArimaDetector(GroupDetector):
    """Flags values outside a one-step-ahead ARIMA prediction interval.

    Algorithm:
    1. Keep the last ``analysis_window`` points
    2. Require ``min_periods`` points and a ``min_valid_fraction`` share of
       finite values, then drop the non-finite ones
    3. Fit the best ARIMA(p,d,q) and forecast the current period
    4. Out of range when the observation falls outside the interval

    Values stay in the units of the series.
    """

    _ALGORITHM_VERSION = "1.0.0"

    def __init__(
        self,
        config: ArimaConfig | None = None,
        assembler: AlertAssembler | None = None,
        fitter: ArimaFitter | None = None,
        forecaster: ArimaForecaster | None = None,
    ) -> None:
        """Initialize the ARIMA detector.

        Args:
            config: Search bounds, interval settings and data requirements
            assembler: Builds result records
            fitter: Model search; defaults to one built from ``config``
            forecaster: Interval forecasts; defaults to one built from ``config``
        """
        self._config = config or ArimaConfig.default()
        self._assembler = assembler or AlertAssembler()
        self._fitter = fitter or ArimaFitter(self._config)
        self._forecaster = forecaster or ArimaForecaster(self._config)

    @property
    def kind(self) -> DetectorKind:
        """Get the kind of detector."""
        return DetectorKind.ARIMA

    @property
    def algorithm_version(self) -> str:
        """Get the algorithm version for this detector."""
        return self._ALGORITHM_VERSION

    @property
    def config_name(self) -> str:
        """Name of the preset the detector runs with."""
        return self._config.name

    @property
    def config(self) -> ArimaConfig:
        """Active search bounds."""
        return self._config

    def is_excluded(self, key: GroupKey) -> bool:
        """Check whether the group's concept is excluded."""
        return self._config.excluded_concept is not None and key.concept == self._config.excluded_concept

    def detect(
        self,
        key: GroupKey,
        history: Sequence[SeriesPoint],
        current: Observation,
    ) -> ArimaResult:
        """Fit, forecast and compare one group's current value.

        Raises:
            InsufficientDataError: If the window is too short or holds too
                many non-finite values
            InvalidModelError: If no valid model exists or its forecast is
                degenerate
        """
        window = self._window(history, self._config.analysis_window)
        if len(window) < self._config.min_periods:
            raise InsufficientDataError(
                f"Insufficient data: {len(window)} periods (minimum: {self._config.min_periods})"
            )

        series = [v for v in window if v is not None and math.isfinite(v)]
        valid_fraction = len(series) / len(window)
        if valid_fraction < self._config.min_valid_fraction or len(series) < self._config.min_periods:
            raise InsufficientDataError(
                f"Insufficient valid data: {len(series)}/{len(window)} finite values "
                f"(minimum fraction: {self._config.min_valid_fraction:.0%})"
            )

        model = self._fitter.fit(series)
        forecast = self._forecaster.forecast(model, series)

        logger.debug(
            "%s: %s forecast=%.4f interval=[%.4f, %.4f] observed=%.4f",
            key.label,
            model.notation,
            forecast.point,
            forecast.lower,
            forecast.upper,
            current.value,
        )

        return self._assembler.build_arima_result(
            key=key,
            period=current.period,
            observed=current.value,
            forecast=forecast,
            model=model,
            historical_count=len(series),
        )
