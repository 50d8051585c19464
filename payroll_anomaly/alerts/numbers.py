"""Numeric helpers applied at the result boundary."""

import logging
import math

logger = logging.getLogger(__name__)

DEVIATION_LIMIT = 1000.0


def safe_round(value: float, digits: int = 2, field: str = "value") -> float:
    """Round a value, coercing NaN and infinities to 0.0 with a warning."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Non-numeric %s coerced to 0.0: %r", field, value)
        return 0.0
    if not math.isfinite(number):
        logger.warning("Non-finite %s coerced to 0.0: %s", field, number)
        return 0.0
    return round(number, digits)


def clamp(value: float, low: float, high: float) -> float:
    """Limit value to [low, high]."""
    return max(low, min(high, value))


def to_percentage(fraction: float, digits: int = 2, field: str = "value") -> float:
    """Express a decimal fraction as a rounded percentage."""
    return safe_round(fraction * 100.0, digits, field)


def normalize_to_fraction(value: float) -> float:
    """Treat magnitudes above 1 as percentages and scale them to fractions."""
    if abs(value) > 1.0:
        return value / 100.0
    return value
