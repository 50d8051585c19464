"""Fitted ARIMA model and forecast models."""

import math
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ArimaModel:
    """An ARIMA(p,d,q) model fitted to one series.

    Coefficients, intercept and residuals refer to the series after ``d``
    rounds of differencing. ``observation_count`` is the length of that
    differenced series.
    """

    p: int
    d: int
    q: int
    ar_coefficients: tuple[float, ...]
    ma_coefficients: tuple[float, ...]
    intercept: float
    aic: float
    bic: float
    residual_std_error: float
    adjusted_r2: float
    residual_variance: float
    observation_count: int
    was_differenced: bool
    original_mean: float
    residuals: tuple[float, ...]
    is_stationary: bool = True
    is_invertible: bool = True
    ljung_box_pvalue: float = 1.0
    residuals_uncorrelated: bool = True

    def __post_init__(self) -> None:
        """Validate coefficient lengths against the model order."""
        if min(self.p, self.d, self.q) < 0:
            raise ValueError("Model orders cannot be negative")
        if len(self.ar_coefficients) != self.p:
            raise ValueError("AR coefficient count must equal p")
        if len(self.ma_coefficients) != self.q:
            raise ValueError("MA coefficient count must equal q")

    @property
    def order(self) -> tuple[int, int, int]:
        """The (p, d, q) triple."""
        return (self.p, self.d, self.q)

    @property
    def notation(self) -> str:
        """Conventional ARIMA(p,d,q) notation."""
        return f"ARIMA({self.p},{self.d},{self.q})"

    @property
    def parameter_count(self) -> int:
        """Number of ARMA coefficients, used to break criterion ties."""
        return self.p + self.q

    @property
    def is_valid(self) -> bool:
        """Enough observations per parameter and a usable residual error."""
        return (
            self.observation_count >= 2 * (self.p + self.d + self.q + 1)
            and math.isfinite(self.residual_std_error)
            and self.residual_std_error > 0
        )

    def criterion_value(self, criterion: str) -> float:
        """AIC or BIC, by name."""
        name = getattr(criterion, "value", criterion)
        return self.bic if str(name).upper() == "BIC" else self.aic

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization (residuals omitted)."""
        return {
            "order": list(self.order),
            "notation": self.notation,
            "ar_coefficients": list(self.ar_coefficients),
            "ma_coefficients": list(self.ma_coefficients),
            "intercept": self.intercept,
            "aic": self.aic,
            "bic": self.bic,
            "residual_std_error": self.residual_std_error,
            "adjusted_r2": self.adjusted_r2,
            "residual_variance": self.residual_variance,
            "observation_count": self.observation_count,
            "was_differenced": self.was_differenced,
            "original_mean": self.original_mean,
            "is_stationary": self.is_stationary,
            "is_invertible": self.is_invertible,
            "ljung_box_pvalue": self.ljung_box_pvalue,
            "residuals_uncorrelated": self.residuals_uncorrelated,
        }


@dataclass(frozen=True)
class ArimaForecast:
    """One-step-ahead forecast with a symmetric prediction interval."""

    point: float
    lower: float
    upper: float
    standard_error: float
    confidence_level: float

    def __post_init__(self) -> None:
        """Validate interval ordering."""
        if not self.lower <= self.point <= self.upper:
            raise ValueError("Forecast must satisfy lower <= point <= upper")

    @property
    def width(self) -> float:
        """Width of the prediction interval."""
        return self.upper - self.lower

    @property
    def uncertainty_percentage(self) -> float:
        """Interval width relative to the forecast, in percent."""
        if self.point == 0:
            return 0.0
        return self.width / abs(self.point) * 100

    def contains(self, value: float) -> bool:
        """True when value lies inside the closed interval."""
        return self.lower <= value <= self.upper
