"""Detection result records."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from payroll_anomaly.models.group import GroupKey
from payroll_anomaly.models.severity import SeverityLevel, severity_by_name


class Direction(str, Enum):
    """Where an observation sits relative to its prediction interval."""

    BELOW = "BELOW"
    WITHIN = "WITHIN"
    ABOVE = "ABOVE"


@dataclass(frozen=True)
class ZScoreResult:
    """Z-score evaluation of one group.

    Value fields are percentages rounded to two decimals; z-scores are
    rounded to two decimals.
    """

    key: GroupKey
    period: str
    current_value: float
    historical_mean: float
    historical_std: float
    margin: float
    lower_bound: float
    upper_bound: float
    z_score: float
    abs_z_score: float
    severity: SeverityLevel
    out_of_range: bool
    exceeds_bounds: bool
    significant_difference: bool
    significant_zscore: bool
    historical_count: int

    @property
    def color(self) -> str:
        """Display color of the severity."""
        return self.severity.color

    def to_dict(self) -> dict[str, Any]:
        """Flatten to a dictionary for serialization."""
        return {
            **self.key.to_dict(),
            "period": self.period,
            "current_value": self.current_value,
            "historical_mean": self.historical_mean,
            "historical_std": self.historical_std,
            "margin": self.margin,
            "lower_bound": self.lower_bound,
            "upper_bound": self.upper_bound,
            "z_score": self.z_score,
            "abs_z_score": self.abs_z_score,
            "severity": self.severity.name,
            "color": self.severity.color,
            "label": self.severity.label,
            "out_of_range": self.out_of_range,
            "exceeds_bounds": self.exceeds_bounds,
            "significant_difference": self.significant_difference,
            "significant_zscore": self.significant_zscore,
            "historical_count": self.historical_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ZScoreResult":
        """Create a ZScoreResult from a flat dictionary."""
        return cls(
            key=GroupKey.from_dict(data),
            period=data["period"],
            current_value=data["current_value"],
            historical_mean=data["historical_mean"],
            historical_std=data["historical_std"],
            margin=data["margin"],
            lower_bound=data["lower_bound"],
            upper_bound=data["upper_bound"],
            z_score=data["z_score"],
            abs_z_score=data["abs_z_score"],
            severity=severity_by_name(data["severity"]),
            out_of_range=data["out_of_range"],
            exceeds_bounds=data.get("exceeds_bounds", False),
            significant_difference=data.get("significant_difference", False),
            significant_zscore=data.get("significant_zscore", False),
            historical_count=data["historical_count"],
        )


@dataclass(frozen=True)
class ArimaResult:
    """ARIMA prediction-interval evaluation of one group."""

    key: GroupKey
    period: str
    observed_value: float
    forecast: float
    lower_bound: float
    upper_bound: float
    standard_error: float
    interval_width: float
    deviation_percentage: float
    distance_se: float
    direction: Direction
    out_of_range: bool
    historical_count: int
    robust_model: bool
    advisory: str | None
    severity: SeverityLevel
    model_notation: str
    aic: float

    @property
    def color(self) -> str:
        """Display color of the severity."""
        return self.severity.color

    def to_dict(self) -> dict[str, Any]:
        """Flatten to a dictionary for serialization."""
        return {
            **self.key.to_dict(),
            "period": self.period,
            "observed_value": self.observed_value,
            "forecast": self.forecast,
            "lower_bound": self.lower_bound,
            "upper_bound": self.upper_bound,
            "standard_error": self.standard_error,
            "interval_width": self.interval_width,
            "deviation_percentage": self.deviation_percentage,
            "distance_se": self.distance_se,
            "direction": self.direction.value,
            "out_of_range": self.out_of_range,
            "historical_count": self.historical_count,
            "robust_model": self.robust_model,
            "advisory": self.advisory,
            "severity": self.severity.name,
            "color": self.severity.color,
            "model": self.model_notation,
            "aic": self.aic,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ArimaResult":
        """Create an ArimaResult from a flat dictionary."""
        return cls(
            key=GroupKey.from_dict(data),
            period=data["period"],
            observed_value=data["observed_value"],
            forecast=data["forecast"],
            lower_bound=data["lower_bound"],
            upper_bound=data["upper_bound"],
            standard_error=data["standard_error"],
            interval_width=data["interval_width"],
            deviation_percentage=data["deviation_percentage"],
            distance_se=data.get("distance_se", 0.0),
            direction=Direction(data["direction"]),
            out_of_range=data["out_of_range"],
            historical_count=data["historical_count"],
            robust_model=data["robust_model"],
            advisory=data.get("advisory"),
            severity=severity_by_name(data["severity"]),
            model_notation=data.get("model", ""),
            aic=data.get("aic", 0.0),
        )
