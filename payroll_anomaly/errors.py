"""Error taxonomy for the detection engine.

Per-group errors (insufficient data, invalid model) are recovered by the
runner and surfaced as batch counters. Configuration and provider errors
abort the whole run.
"""


class AnomalyEngineError(Exception):
    """Base class for all detection engine errors."""


class ConfigurationError(AnomalyEngineError, ValueError):
    """Raised when detector thresholds or settings are malformed."""


class InsufficientDataError(AnomalyEngineError, ValueError):
    """Raised when a group has fewer usable points than required."""


class InvalidModelError(AnomalyEngineError, ValueError):
    """Raised when no ARIMA candidate satisfies the validity rules."""


class DegenerateForecastError(InvalidModelError):
    """Raised when a fitted model yields a non-finite or zero standard error."""


class ProviderError(AnomalyEngineError):
    """Raised when a series provider breaks its ordering contract."""


class RunCancelledError(AnomalyEngineError):
    """Raised when a detection run is cancelled or times out."""
