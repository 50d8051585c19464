"""Detector registry for managing and accessing group detectors."""

from payroll_anomaly.alerts.assembler import AlertAssembler
from payroll_anomaly.config.settings import ArimaConfig, DetectorKind, Settings, ZScoreConfig, get_settings
from payroll_anomaly.detectors.arima_detector import ArimaDetector
from payroll_anomaly.detectors.interface import GroupDetector
from payroll_anomaly.detectors.zscore_detector import ZScoreDetector


class DetectorRegistry:
    """Registry for managing detector instances.

    Provides:
    - Factory methods for creating configured detectors
    - Detector lookup by kind

    Detectors share one AlertAssembler built from the settings.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the registry with the detectors enabled in settings.

        Args:
            settings: Settings to build detectors from; defaults to the
                global settings
        """
        self._settings = settings or get_settings()
        self._assembler = AlertAssembler(
            robust_model_periods=self._settings.robust_model_periods
        )
        self._detectors: dict[DetectorKind, GroupDetector] = {}
        self._initialize_default_detectors()

    def _initialize_default_detectors(self) -> None:
        """Initialize detectors based on settings."""
        if self._settings.zscore_enabled:
            self._detectors[DetectorKind.ZSCORE] = self._create_zscore_detector(
                self._settings.zscore_config()
            )

        if self._settings.arima_enabled:
            self._detectors[DetectorKind.ARIMA] = self._create_arima_detector(
                self._settings.arima_config()
            )

    def _create_zscore_detector(self, config: ZScoreConfig) -> ZScoreDetector:
        """Create a configured Z-score detector."""
        return ZScoreDetector(config=config, assembler=self._assembler)

    def _create_arima_detector(self, config: ArimaConfig) -> ArimaDetector:
        """Create a configured ARIMA detector."""
        return ArimaDetector(config=config, assembler=self._assembler)

    @property
    def settings(self) -> Settings:
        """Settings the registry was built from."""
        return self._settings

    def get_detector(self, kind: DetectorKind | str) -> GroupDetector | None:
        """Get a detector by kind.

        Args:
            kind: Kind of detector, as enum or its string value

        Returns:
            The detector if registered and enabled, None otherwise
        """
        return self._detectors.get(DetectorKind(kind))

    def register_detector(self, kind: DetectorKind, detector: GroupDetector) -> None:
        """Register a custom detector.

        Args:
            kind: Kind this detector handles
            detector: The detector instance
        """
        if detector.kind != kind:
            raise ValueError(
                f"Detector kind {detector.kind} does not match registration kind {kind}"
            )
        self._detectors[kind] = detector

    def list_enabled_kinds(self) -> list[DetectorKind]:
        """List all enabled detector kinds."""
        return list(self._detectors.keys())


# Global registry instance
_registry: DetectorRegistry | None = None


def get_detector_registry() -> DetectorRegistry:
    """Get or create the global detector registry."""
    global _registry
    if _registry is None:
        _registry = DetectorRegistry()
    return _registry


def reset_detector_registry() -> None:
    """Drop the global registry so the next lookup rebuilds it (for testing)."""
    global _registry
    _registry = None
