"""Result assembly module."""

from payroll_anomaly.alerts.assembler import (
    NON_ROBUST_ADVISORY,
    AlertAssembler,
    deviation_percentage,
    direction,
)
from payroll_anomaly.alerts.numbers import (
    DEVIATION_LIMIT,
    clamp,
    normalize_to_fraction,
    safe_round,
    to_percentage,
)

__all__ = [
    "DEVIATION_LIMIT",
    "NON_ROBUST_ADVISORY",
    "AlertAssembler",
    "clamp",
    "deviation_percentage",
    "direction",
    "normalize_to_fraction",
    "safe_round",
    "to_percentage",
]
