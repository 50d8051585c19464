"""Interface for historical baseline calculators."""

from abc import ABC, abstractmethod
from typing import Sequence

from payroll_anomaly.models.baseline import BaselineMetrics


class BaselineCalculator(ABC):
    """Summarizes the history of one group into reference statistics.

    A calculator sees only the values of a single group, already limited
    to the analysis window. It must return the same metrics for the same
    values and must not keep state between groups, since the runner calls
    it from several threads at once.
    """

    @property
    @abstractmethod
    def algorithm_version(self) -> str:
        """Get the algorithm version for this calculator."""
        ...

    @property
    @abstractmethod
    def min_samples(self) -> int:
        """Fewest finite values for which a baseline is produced."""
        ...

    @abstractmethod
    def compute(self, values: Sequence[float]) -> BaselineMetrics:
        """Compute the baseline of one group.

        Args:
            values: Historical values of one group, oldest first; may
                contain NaN for periods with no usable figure

        Returns:
            Mean, sample deviation and range of the finite values

        Raises:
            InsufficientDataError: If fewer than ``min_samples`` values are finite
        """
        ...
