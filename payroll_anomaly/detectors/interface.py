"""Interface for per-group detectors."""

from abc import ABC, abstractmethod
from typing import Sequence

from payroll_anomaly.config.settings import DetectorKind
from payroll_anomaly.models.group import GroupKey, Observation, SeriesPoint
from payroll_anomaly.models.report import DetectionResult


class GroupDetector(ABC):
    """Abstract interface for detectors that evaluate one group at a time.

    All implementations MUST be:
    - Deterministic: Same history and current value produce identical results
    - Pure: No shared mutable state, so groups can be evaluated concurrently
    - Versioned: Algorithm version must be tracked

    Per-group failures are signalled with InsufficientDataError or
    InvalidModelError; the caller turns them into batch counters.
    """

    @property
    @abstractmethod
    def kind(self) -> DetectorKind:
        """Get the kind of detector."""
        ...

    @property
    @abstractmethod
    def algorithm_version(self) -> str:
        """Get the algorithm version for this detector."""
        ...

    @property
    @abstractmethod
    def config_name(self) -> str:
        """Name of the preset the detector runs with."""
        ...

    @abstractmethod
    def is_excluded(self, key: GroupKey) -> bool:
        """Check whether a group is outside this detector's scope.

        Args:
            key: Group identity

        Returns:
            True if the group must be skipped
        """
        ...

    @abstractmethod
    def detect(
        self,
        key: GroupKey,
        history: Sequence[SeriesPoint],
        current: Observation,
    ) -> DetectionResult:
        """Evaluate one group's current value against its history.

        Args:
            key: Group identity
            history: Chronologically ordered points, current period excluded
            current: Current-period observation for the group

        Returns:
            The result record for the group

        Raises:
            InsufficientDataError: If the history is too short to evaluate
            InvalidModelError: If no usable model could be built
        """
        ...

    @staticmethod
    def _window(history: Sequence[SeriesPoint], size: int) -> list[float]:
        """Values of the most recent ``size`` points."""
        return [point.value for point in history[-size:]]
