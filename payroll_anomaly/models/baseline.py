"""Baseline models for historical statistics."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class BaselineMetrics:
    """Historical statistics for one group.

    Values are decimal fractions, the same unit as the series they were
    computed from. ``std`` is the sample standard deviation.
    """

    mean: float
    std: float
    median: float
    min_value: float
    max_value: float
    sample_count: int

    def __post_init__(self) -> None:
        """Validate baseline metrics constraints."""
        if self.std < 0:
            raise ValueError("Standard deviation cannot be negative")
        if self.sample_count < 0:
            raise ValueError("Sample count cannot be negative")
        if self.min_value > self.max_value:
            raise ValueError("Min value cannot be greater than max value")

    @property
    def is_degenerate(self) -> bool:
        """True when the history has no spread at all."""
        return self.std == 0

    def z_score(self, value: float) -> float:
        """Z-score of a value against this baseline; 0 when sigma is 0."""
        if self.std == 0:
            return 0.0
        return (value - self.mean) / self.std

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "mean": self.mean,
            "std": self.std,
            "median": self.median,
            "min_value": self.min_value,
            "max_value": self.max_value,
            "sample_count": self.sample_count,
        }
