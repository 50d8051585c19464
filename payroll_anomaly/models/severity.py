"""Severity levels and their classification rules.

Severity levels are plain tagged values; the classification policy lives
in separate pure functions so thresholds can come from any config.
"""

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class SeverityLevel:
    """A named severity with its rank and display attributes."""

    name: str
    level: int
    color: str
    label: str

    def __str__(self) -> str:
        return self.name

    def is_above(self, other: "SeverityLevel") -> bool:
        """True when this severity ranks strictly higher."""
        return self.level > other.level

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "level": self.level,
            "color": self.color,
            "label": self.label,
        }


NORMAL = SeverityLevel("NORMAL", 0, "#4CAF50", "🟢")
MODERATE = SeverityLevel("MODERATE", 1, "#FFC107", "🟡")
HIGH = SeverityLevel("HIGH", 2, "#FF9800", "🟠")
CRITICAL = SeverityLevel("CRITICAL", 3, "#F44336", "🔴")

# ARIMA alerts are binary
ALERT = SeverityLevel("ALERT", 1, "#F44336", "🔴")

ZSCORE_SEVERITIES: tuple[SeverityLevel, ...] = (NORMAL, MODERATE, HIGH, CRITICAL)
ARIMA_SEVERITIES: tuple[SeverityLevel, ...] = (NORMAL, ALERT)

_BY_NAME = {s.name: s for s in ZSCORE_SEVERITIES + ARIMA_SEVERITIES}


class SeverityThresholds(Protocol):
    """Anything carrying the three Z-score severity cutoffs."""

    critical_cutoff: float
    high_cutoff: float
    moderate_cutoff: float


def classify_zscore(abs_z: float, thresholds: SeverityThresholds) -> SeverityLevel:
    """Map an absolute z-score to a severity.

    The critical tier uses a strict comparison while the lower tiers are
    inclusive, so a score exactly on the critical cutoff is HIGH.
    """
    abs_z = abs(abs_z)
    if abs_z > thresholds.critical_cutoff:
        return CRITICAL
    if abs_z >= thresholds.high_cutoff:
        return HIGH
    if abs_z >= thresholds.moderate_cutoff:
        return MODERATE
    return NORMAL


def classify_interval(out_of_range: bool) -> SeverityLevel:
    """ARIMA severity: ALERT outside the prediction interval, else NORMAL."""
    return ALERT if out_of_range else NORMAL


def severity_by_name(name: str) -> SeverityLevel:
    """Look up a severity by name."""
    try:
        return _BY_NAME[name.upper()]
    except KeyError:
        raise ValueError(f"Unknown severity: {name}") from None
