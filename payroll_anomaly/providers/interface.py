"""Interface for series providers."""

from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Iterable

from payroll_anomaly.models.group import GroupKey, Observation, RunContext, SeriesPoint


class SeriesFilter:
    """Filter criteria selecting the groups of one run.

    All filter criteria are optional and applied with AND logic.
    """

    def __init__(
        self,
        branch: str | None = None,
        business_line: int | None = None,
        excluded_concepts: Iterable[int] | None = None,
    ) -> None:
        """Initialize filter criteria.

        Args:
            branch: Case-insensitive substring of the branch name; None,
                empty, "TODAS" or "ALL" select every branch
            business_line: Exact business-line code
            excluded_concepts: Concept codes to leave out
        """
        self.branch = branch
        self.business_line = business_line
        self.excluded_concepts = frozenset(excluded_concepts or ())

    @classmethod
    def from_context(cls, context: RunContext) -> "SeriesFilter":
        """Build the filter implied by a run context."""
        return cls(
            branch=None if context.all_branches else context.branch,
            business_line=context.business_line,
        )

    def matches(self, key: GroupKey) -> bool:
        """Check if a group matches this filter.

        Args:
            key: The group identity to check

        Returns:
            True if the group matches all filter criteria
        """
        if self.branch and self.branch.strip().upper() not in key.branch.upper():
            return False

        if self.business_line is not None and key.business_line != self.business_line:
            return False

        if key.concept in self.excluded_concepts:
            return False

        return True


class SeriesProvider(ABC):
    """Abstract source of historical series and current values.

    CONTRACT:
    - Historical series never contain the run period or anything after it
    - Points of one series are strictly increasing by period
    - Gaps between periods are allowed; only the count matters downstream

    The detection engine assumes nothing about the storage behind it.
    """

    @abstractmethod
    def fetch_history(self, context: RunContext) -> dict[GroupKey, list[SeriesPoint]]:
        """Fetch historical series for every group selected by the context.

        Args:
            context: Run period and filters

        Returns:
            Chronologically ordered points per group
        """
        ...

    @abstractmethod
    def fetch_current(self, context: RunContext) -> list[Observation]:
        """Fetch the run-period observations selected by the context.

        Args:
            context: Run period and filters

        Returns:
            Observations for the run period; a group may appear more than
            once when the source holds duplicates
        """
        ...


class BaseSeriesProvider(SeriesProvider):
    """Base implementation shaping flat observations into series."""

    def _build_history(
        self,
        observations: Iterable[Observation],
        context: RunContext,
    ) -> dict[GroupKey, list[SeriesPoint]]:
        """Group, filter and order observations before the run period.

        Duplicate periods within a group are averaged.

        Args:
            observations: Flat observations from the source
            context: Run period and filters

        Returns:
            Chronologically ordered points per group
        """
        series_filter = SeriesFilter.from_context(context)
        buckets: dict[GroupKey, dict[str, list[float]]] = defaultdict(lambda: defaultdict(list))

        for obs in observations:
            if obs.period >= context.period or not series_filter.matches(obs.key):
                continue
            buckets[obs.key][obs.period].append(obs.value)

        return {
            key: [
                SeriesPoint(period=period, value=sum(values) / len(values))
                for period, values in sorted(by_period.items())
            ]
            for key, by_period in buckets.items()
        }

    def _select_current(
        self,
        observations: Iterable[Observation],
        context: RunContext,
    ) -> list[Observation]:
        """Keep the observations of the run period that match the context."""
        series_filter = SeriesFilter.from_context(context)
        return [
            obs
            for obs in observations
            if obs.period == context.period and series_filter.matches(obs.key)
        ]
