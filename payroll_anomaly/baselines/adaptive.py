"""Adaptive margins and the triple validation rule for Z-score alerts.

The bound width depends on how volatile a series has been:

- very stable series (sigma below the stable cutoff) get a small fixed
  margin, ``stable_factor * stable_volatility_cutoff``;
- medium volatility gets ``medium_factor * sigma``;
- high volatility uses sigma directly.

The result is then clamped to ``[margin_floor, margin_ceiling]``.

A value is out of range only if it breaks the adaptive bounds AND differs
from the mean by more than ``min_difference`` AND has an absolute z-score
above ``min_zscore``. Failing any one gate keeps the group in range even
when its severity is HIGH or CRITICAL.
"""

import logging
from dataclasses import dataclass

from payroll_anomaly.config.settings import ZScoreConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdaptiveBounds:
    """Mean-centred bounds built from an adaptive margin."""

    mean: float
    std: float
    margin: float
    lower: float
    upper: float

    def excludes(self, value: float) -> bool:
        """True when value falls strictly outside the bounds."""
        return value < self.lower or value > self.upper


@dataclass(frozen=True)
class AlertGates:
    """Outcome of each of the three validation conditions."""

    exceeds_bounds: bool
    significant_difference: bool
    significant_zscore: bool

    @property
    def out_of_range(self) -> bool:
        """All three conditions must hold."""
        return self.exceeds_bounds and self.significant_difference and self.significant_zscore


def adaptive_margin(std: float, config: ZScoreConfig) -> float:
    """Volatility-tiered margin, clamped to the configured floor and ceiling."""
    std = abs(std)

    if std < config.stable_volatility_cutoff:
        margin = config.stable_factor * config.stable_volatility_cutoff
        tier = "stable"
    elif std < config.high_volatility_cutoff:
        margin = config.medium_factor * std
        tier = "medium"
    else:
        margin = std
        tier = "volatile"

    clamped = min(max(margin, config.margin_floor), config.margin_ceiling)
    logger.debug("Margin tier=%s sigma=%.4f margin=%.4f clamped=%.4f", tier, std, margin, clamped)
    return clamped


def compute_bounds(mean: float, std: float, config: ZScoreConfig) -> AdaptiveBounds:
    """Build adaptive bounds around the historical mean."""
    margin = adaptive_margin(std, config)
    return AdaptiveBounds(
        mean=mean,
        std=std,
        margin=margin,
        lower=mean - margin,
        upper=mean + margin,
    )


def validate_alert_conditions(
    current: float,
    z_score: float,
    bounds: AdaptiveBounds,
    config: ZScoreConfig,
) -> AlertGates:
    """Evaluate the three conditions that must all hold to flag a value."""
    return AlertGates(
        exceeds_bounds=bounds.excludes(current),
        significant_difference=abs(current - bounds.mean) > config.min_difference,
        significant_zscore=abs(z_score) > config.min_zscore,
    )
