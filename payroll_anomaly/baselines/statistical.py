"""Statistical baseline calculator implementation."""

import math
import statistics
from typing import Sequence

from payroll_anomaly.baselines.interface import BaselineCalculator
from payroll_anomaly.errors import InsufficientDataError
from payroll_anomaly.models.baseline import BaselineMetrics


class StatisticalBaselineCalculator(BaselineCalculator):
    """Computes historical mean and sample standard deviation.

    Non-finite values are dropped before anything else. The sample
    (n - 1) deviation is used because histories are short samples of an
    open-ended process, typically 12 to 52 periods.
    """

    _ALGORITHM_VERSION = "1.0.0"

    def __init__(self, min_samples: int = 2) -> None:
        """Initialize the calculator.

        Args:
            min_samples: Minimum finite values required (at least 2)
        """
        self._min_samples = max(2, min_samples)

    @property
    def algorithm_version(self) -> str:
        """Get the algorithm version for this calculator."""
        return self._ALGORITHM_VERSION

    @property
    def min_samples(self) -> int:
        return self._min_samples

    def compute(self, values: Sequence[float]) -> BaselineMetrics:
        """Compute mean, sample deviation and range of the finite values.

        Raises:
            InsufficientDataError: If fewer than min_samples finite values
        """
        clean = [float(v) for v in values if v is not None and math.isfinite(v)]
        n = len(clean)

        if n < self._min_samples:
            raise InsufficientDataError(
                f"Insufficient data: need at least {self._min_samples} samples, got {n}"
            )

        return BaselineMetrics(
            mean=statistics.fmean(clean),
            std=statistics.stdev(clean),
            median=statistics.median(clean),
            min_value=min(clean),
            max_value=max(clean),
            sample_count=n,
        )

