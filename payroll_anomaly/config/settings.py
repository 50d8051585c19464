"""Payroll anomaly service configuration settings."""

import json
import os
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from scipy.stats import norm

from payroll_anomaly.errors import ConfigurationError


class DetectorKind(str, Enum):
    """Detection strategies available to a run."""

    ZSCORE = "zscore"
    ARIMA = "arima"


class SelectionCriterion(str, Enum):
    """Information criterion used to rank ARIMA candidates."""

    AIC = "AIC"
    BIC = "BIC"


# Concept code for employee headcount; it is not a compensation indicator.
EMPLOYEE_HEADCOUNT_CONCEPT = 1011


@dataclass(frozen=True)
class ZScoreConfig:
    """Thresholds for the adaptive Z-score detector.

    Volatility cutoffs, margins and the minimum difference are expressed as
    decimal fractions (0.01 == 1%). Severity cutoffs are absolute z-scores.
    """

    name: str = "default"

    # Historical periods
    min_periods: int = 12
    analysis_window: int = 52

    # Adaptive margin tiers
    stable_volatility_cutoff: float = 0.01  # sigma below this uses a fixed margin
    high_volatility_cutoff: float = 0.05  # sigma at or above this uses sigma itself
    stable_factor: float = 1.5
    medium_factor: float = 1.3
    margin_floor: float = 0.01
    margin_ceiling: float = 0.20

    # Triple validation gates
    min_difference: float = 0.01
    min_zscore: float = 1.0

    # Severity cutoffs
    critical_cutoff: float = 3.0
    high_cutoff: float = 2.0
    moderate_cutoff: float = 1.0

    excluded_concepts: tuple[int, ...] = (EMPLOYEE_HEADCOUNT_CONCEPT,)

    def __post_init__(self) -> None:
        """Validate threshold consistency."""
        if self.min_periods < 2:
            raise ConfigurationError("min_periods must be >= 2 for a sample deviation")
        if self.analysis_window < self.min_periods:
            raise ConfigurationError("analysis_window must be >= min_periods")
        if self.stable_volatility_cutoff <= 0:
            raise ConfigurationError("stable_volatility_cutoff must be positive")
        if self.high_volatility_cutoff <= self.stable_volatility_cutoff:
            raise ConfigurationError(
                "high_volatility_cutoff must be greater than stable_volatility_cutoff"
            )
        if self.stable_factor <= 0 or self.medium_factor <= 0:
            raise ConfigurationError("margin factors must be positive")
        if self.margin_floor < 0:
            raise ConfigurationError("margin_floor cannot be negative")
        if self.margin_floor >= self.margin_ceiling:
            raise ConfigurationError("margin_floor must be lower than margin_ceiling")
        if self.min_difference < 0 or self.min_zscore < 0:
            raise ConfigurationError("validation gates cannot be negative")
        if self.moderate_cutoff < 0:
            raise ConfigurationError("moderate_cutoff cannot be negative")
        if self.high_cutoff <= self.moderate_cutoff:
            raise ConfigurationError("high_cutoff must be greater than moderate_cutoff")
        if self.critical_cutoff <= self.high_cutoff:
            raise ConfigurationError("critical_cutoff must be greater than high_cutoff")

    @classmethod
    def default(cls) -> "ZScoreConfig":
        """Balanced thresholds for weekly payroll indicators."""
        return cls()

    @classmethod
    def conservative(cls) -> "ZScoreConfig":
        """Fewer, stronger alerts: longer history and wider severity bands."""
        return cls(
            name="conservative",
            min_periods=16,
            margin_ceiling=0.25,
            min_difference=0.02,
            min_zscore=1.5,
            critical_cutoff=3.5,
            high_cutoff=2.5,
            moderate_cutoff=1.5,
        )

    @classmethod
    def strict(cls) -> "ZScoreConfig":
        """More sensitive thresholds for short or tightly controlled series."""
        return cls(
            name="strict",
            min_periods=8,
            stable_factor=1.2,
            medium_factor=1.1,
            margin_floor=0.005,
            margin_ceiling=0.15,
            min_difference=0.005,
            min_zscore=0.5,
            critical_cutoff=2.5,
            high_cutoff=1.96,
            moderate_cutoff=1.0,
        )


@dataclass(frozen=True)
class ArimaConfig:
    """Search bounds and interval settings for the ARIMA detector."""

    name: str = "default"

    # Data requirements
    min_periods: int = 12
    analysis_window: int = 52
    min_valid_fraction: float = 0.80

    # Prediction interval
    confidence_level: float = 0.95
    z_value: float | None = None  # Derived from confidence_level when omitted

    # (p, d, q) search bounds
    max_p: int = 3
    max_d: int = 2
    max_q: int = 3

    criterion: SelectionCriterion = SelectionCriterion.AIC
    significance_level: float = 0.05

    excluded_concept: int | None = EMPLOYEE_HEADCOUNT_CONCEPT

    def __post_init__(self) -> None:
        """Validate search bounds and derive the interval z-value."""
        if self.min_periods < 3:
            raise ConfigurationError("min_periods must be >= 3")
        if self.analysis_window < self.min_periods:
            raise ConfigurationError("analysis_window must be >= min_periods")
        if not 0.0 < self.min_valid_fraction <= 1.0:
            raise ConfigurationError("min_valid_fraction must be in (0, 1]")
        if not 0.0 < self.confidence_level < 1.0:
            raise ConfigurationError("confidence_level must be in (0, 1)")
        if min(self.max_p, self.max_d, self.max_q) < 0:
            raise ConfigurationError("ARIMA search bounds cannot be negative")
        if not 0.0 < self.significance_level < 1.0:
            raise ConfigurationError("significance_level must be in (0, 1)")
        try:
            criterion = (
                self.criterion
                if isinstance(self.criterion, SelectionCriterion)
                else SelectionCriterion(str(self.criterion).upper())
            )
        except ValueError as exc:
            raise ConfigurationError(f"Unknown selection criterion: {self.criterion}") from exc
        object.__setattr__(self, "criterion", criterion)

        if self.z_value is None:
            z = float(norm.ppf(0.5 + self.confidence_level / 2.0))
            object.__setattr__(self, "z_value", round(z, 4))
        elif self.z_value <= 0:
            raise ConfigurationError("z_value must be positive")

    @classmethod
    def default(cls) -> "ArimaConfig":
        """Search up to ARIMA(3,2,3) and rank by AIC."""
        return cls(z_value=1.96)

    @classmethod
    def conservative(cls) -> "ArimaConfig":
        """Smaller models ranked by BIC, which penalizes complexity harder."""
        return cls(
            name="conservative",
            min_periods=16,
            min_valid_fraction=0.90,
            z_value=1.96,
            max_p=2,
            max_d=1,
            max_q=2,
            criterion=SelectionCriterion.BIC,
        )

    @classmethod
    def exhaustive(cls) -> "ArimaConfig":
        """Wider search over two years of history."""
        return cls(
            name="exhaustive",
            analysis_window=104,
            min_valid_fraction=0.70,
            z_value=1.96,
            max_p=5,
            max_q=5,
        )


_ZSCORE_PRESETS = {
    "default": ZScoreConfig.default,
    "conservative": ZScoreConfig.conservative,
    "strict": ZScoreConfig.strict,
    "exhaustive": ZScoreConfig.strict,
}

_ARIMA_PRESETS = {
    "default": ArimaConfig.default,
    "conservative": ArimaConfig.conservative,
    "exhaustive": ArimaConfig.exhaustive,
    "strict": ArimaConfig.exhaustive,
}


def zscore_preset(name: str = "default", **overrides: Any) -> ZScoreConfig:
    """Build a named Z-score preset, optionally overriding any threshold."""
    factory = _ZSCORE_PRESETS.get(name.lower())
    if factory is None:
        raise ConfigurationError(f"Unknown Z-score preset: {name}")
    return _apply_overrides(factory(), overrides)


def arima_preset(name: str = "default", **overrides: Any) -> ArimaConfig:
    """Build a named ARIMA preset, optionally overriding any bound."""
    factory = _ARIMA_PRESETS.get(name.lower())
    if factory is None:
        raise ConfigurationError(f"Unknown ARIMA preset: {name}")
    return _apply_overrides(factory(), overrides)


def _apply_overrides(config: Any, overrides: dict[str, Any]) -> Any:
    if not overrides:
        return config
    if "excluded_concepts" in overrides:
        overrides["excluded_concepts"] = tuple(overrides["excluded_concepts"])
    try:
        return replace(config, **overrides)
    except TypeError as exc:
        raise ConfigurationError(f"Invalid override for {type(config).__name__}: {exc}") from exc


@dataclass(frozen=True)
class Settings:
    """Global settings for the anomaly service."""

    # Algorithm versioning - MUST be updated when detection logic changes
    algorithm_version: str = "1.0.0"

    # Service identification
    service_name: str = "payroll-anomaly-service"
    service_version: str = "0.1.0"

    # Detector selection
    zscore_enabled: bool = True
    arima_enabled: bool = True
    zscore_preset: str = "default"
    arima_preset: str = "default"
    zscore_overrides: dict[str, Any] = field(default_factory=dict)
    arima_overrides: dict[str, Any] = field(default_factory=dict)

    # Result shaping
    robust_model_periods: int = 12

    # Execution
    max_workers: int | None = None  # None lets the executor pick from cpu_count
    run_timeout_seconds: float | None = None

    # Data source
    data_path: str = "./data/indicators.jsonl"
    normalize_percentages: bool = False

    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate execution settings."""
        if self.robust_model_periods < 1:
            raise ConfigurationError("robust_model_periods must be >= 1")
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigurationError("max_workers must be >= 1")
        if self.run_timeout_seconds is not None and self.run_timeout_seconds <= 0:
            raise ConfigurationError("run_timeout_seconds must be positive")
        # Build both detector configs once so bad presets or overrides fail here
        self.zscore_config()
        self.arima_config()

    def zscore_config(self) -> ZScoreConfig:
        """Effective Z-score config: named preset plus overrides."""
        return zscore_preset(self.zscore_preset, **dict(self.zscore_overrides))

    def arima_config(self) -> ArimaConfig:
        """Effective ARIMA config: named preset plus overrides."""
        return arima_preset(self.arima_preset, **dict(self.arima_overrides))

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        max_workers = os.getenv("MAX_WORKERS")
        timeout = os.getenv("RUN_TIMEOUT_SECONDS")
        return cls(
            algorithm_version=os.getenv("ALGORITHM_VERSION", "1.0.0"),
            zscore_enabled=os.getenv("ZSCORE_ENABLED", "true").lower() == "true",
            arima_enabled=os.getenv("ARIMA_ENABLED", "true").lower() == "true",
            zscore_preset=os.getenv("ZSCORE_PRESET", "default"),
            arima_preset=os.getenv("ARIMA_PRESET", "default"),
            zscore_overrides=_json_env("ZSCORE_OVERRIDES"),
            arima_overrides=_json_env("ARIMA_OVERRIDES"),
            robust_model_periods=int(os.getenv("ROBUST_MODEL_PERIODS", "12")),
            max_workers=int(max_workers) if max_workers else None,
            run_timeout_seconds=float(timeout) if timeout else None,
            data_path=os.getenv("DATA_PATH", "./data/indicators.jsonl"),
            normalize_percentages=os.getenv("NORMALIZE_PERCENTAGES", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


def _json_env(name: str) -> dict[str, Any]:
    raw = os.getenv(name)
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"{name} must be a JSON object: {exc}") from exc
    if not isinstance(value, dict):
        raise ConfigurationError(f"{name} must be a JSON object")
    return value


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def configure(settings: Settings) -> None:
    """Configure the global settings (primarily for testing)."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to None (for testing)."""
    global _settings
    _settings = None
