"""In-memory series provider implementation."""

import threading
from typing import Iterable

from payroll_anomaly.models.group import GroupKey, Observation, RunContext, SeriesPoint
from payroll_anomaly.providers.interface import BaseSeriesProvider


class InMemorySeriesProvider(BaseSeriesProvider):
    """Thread-safe in-memory implementation of SeriesProvider.

    This implementation is primarily for testing and development, and for
    callers that already hold their data in memory.
    """

    def __init__(self, observations: Iterable[Observation] | None = None) -> None:
        """Initialize the provider.

        Args:
            observations: Initial observations, any order
        """
        self._observations: list[Observation] = list(observations or ())
        self._lock = threading.Lock()

    def add(self, key: GroupKey, period: str, value: float) -> None:
        """Add one observation."""
        with self._lock:
            self._observations.append(Observation(key=key, period=period, value=value))

    def add_series(self, key: GroupKey, points: Iterable[SeriesPoint | tuple[str, float]]) -> int:
        """Add many observations of one group.

        Args:
            key: Group identity
            points: SeriesPoint instances or (period, value) pairs

        Returns:
            Number of observations added
        """
        new = []
        for point in points:
            period, value = (point.period, point.value) if isinstance(point, SeriesPoint) else point
            new.append(Observation(key=key, period=period, value=value))

        with self._lock:
            self._observations.extend(new)
        return len(new)

    def fetch_history(self, context: RunContext) -> dict[GroupKey, list[SeriesPoint]]:
        """Fetch historical series for every group selected by the context."""
        with self._lock:
            snapshot = list(self._observations)
        return self._build_history(snapshot, context)

    def fetch_current(self, context: RunContext) -> list[Observation]:
        """Fetch the run-period observations selected by the context."""
        with self._lock:
            snapshot = list(self._observations)
        return self._select_current(snapshot, context)

    def __len__(self) -> int:
        with self._lock:
            return len(self._observations)
