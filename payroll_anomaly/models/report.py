"""Batch-level detection report models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence, Union

from payroll_anomaly.models.group import RunContext
from payroll_anomaly.models.results import ArimaResult, ZScoreResult

DetectionResult = Union[ZScoreResult, ArimaResult]


@dataclass(frozen=True)
class DetectionSummary:
    """Counters describing one detector's pass over a run.

    Per-group failures never abort a run; they only show up here.
    """

    total_groups: int = 0
    evaluated: int = 0
    out_of_range: int = 0
    by_severity: dict[str, int] = field(default_factory=dict)
    insufficient_data: int = 0
    invalid_models: int = 0
    numeric_failures: int = 0
    missing_current: int = 0
    excluded: int = 0
    cancelled: int = 0
    robust_models: int = 0
    non_robust_models: int = 0

    @property
    def out_of_range_percentage(self) -> float:
        """Share of evaluated groups flagged out of range, in percent."""
        if self.evaluated == 0:
            return 0.0
        return round(self.out_of_range * 100.0 / self.evaluated, 1)

    def severity_percentage(self, name: str) -> float:
        """Share of evaluated groups with the given severity, in percent."""
        if self.evaluated == 0:
            return 0.0
        return round(self.by_severity.get(name, 0) * 100.0 / self.evaluated, 1)

    @classmethod
    def from_results(
        cls,
        results: Sequence[DetectionResult],
        **counters: int,
    ) -> "DetectionSummary":
        """Build a summary from results plus the failure counters."""
        by_severity: dict[str, int] = {}
        for result in results:
            name = result.severity.name
            by_severity[name] = by_severity.get(name, 0) + 1

        robust = sum(1 for r in results if isinstance(r, ArimaResult) and r.robust_model)
        non_robust = sum(
            1 for r in results if isinstance(r, ArimaResult) and not r.robust_model
        )

        return cls(
            evaluated=len(results),
            out_of_range=sum(1 for r in results if r.out_of_range),
            by_severity=by_severity,
            robust_models=robust,
            non_robust_models=non_robust,
            **counters,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "total_groups": self.total_groups,
            "evaluated": self.evaluated,
            "out_of_range": self.out_of_range,
            "out_of_range_percentage": self.out_of_range_percentage,
            "by_severity": dict(self.by_severity),
            "insufficient_data": self.insufficient_data,
            "invalid_models": self.invalid_models,
            "numeric_failures": self.numeric_failures,
            "missing_current": self.missing_current,
            "excluded": self.excluded,
            "cancelled": self.cancelled,
            "robust_models": self.robust_models,
            "non_robust_models": self.non_robust_models,
        }


@dataclass(frozen=True)
class DetectionReport:
    """Results and counters of one detector over one run."""

    detector: str
    context: RunContext
    results: tuple[DetectionResult, ...]
    summary: DetectionSummary
    algorithm_version: str
    config_name: str
    started_at: datetime
    duration_seconds: float
    cancelled: bool = False

    @property
    def alerts(self) -> list[DetectionResult]:
        """Results flagged out of range."""
        return [r for r in self.results if r.out_of_range]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "detector": self.detector,
            "period": self.context.period,
            "branch": self.context.branch if not self.context.all_branches else "ALL",
            "business_line": self.context.business_line,
            "algorithm_version": self.algorithm_version,
            "config": self.config_name,
            "started_at": self.started_at.isoformat(),
            "duration_seconds": round(self.duration_seconds, 3),
            "cancelled": self.cancelled,
            "summary": self.summary.to_dict(),
            "results": [r.to_dict() for r in self.results],
        }
