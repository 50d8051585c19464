"""Group identity and time-series point models."""

from dataclasses import dataclass, field
from typing import Any, Sequence

# Branch filter values that mean "every branch"
ALL_BRANCHES = frozenset({"", "TODAS", "ALL"})


@dataclass(frozen=True, order=True)
class GroupKey:
    """Identity of one independent indicator series.

    Two observations with an identical key belong to the same series.
    Text fields are stripped so keys built from padded source columns
    still compare equal.
    """

    position: str
    indicator: str
    concept: int
    branch: str
    business_line: int

    def __post_init__(self) -> None:
        """Normalize text fields."""
        object.__setattr__(self, "position", (self.position or "").strip())
        object.__setattr__(self, "indicator", (self.indicator or "").strip())
        object.__setattr__(self, "branch", (self.branch or "").strip())
        object.__setattr__(self, "concept", int(self.concept or 0))
        object.__setattr__(self, "business_line", int(self.business_line or 0))

    @property
    def label(self) -> str:
        """Short human-readable label for logs."""
        return f"{self.position[:20]}-{self.indicator[:30]}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "position": self.position,
            "indicator": self.indicator,
            "concept": self.concept,
            "branch": self.branch,
            "business_line": self.business_line,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GroupKey":
        """Create a GroupKey from a dictionary."""
        return cls(
            position=data.get("position", ""),
            indicator=data.get("indicator", ""),
            concept=data.get("concept", 0),
            branch=data.get("branch", ""),
            business_line=data.get("business_line", 0),
        )


@dataclass(frozen=True)
class SeriesPoint:
    """One historical observation: a period token and its value."""

    period: str
    value: float


@dataclass(frozen=True)
class Observation:
    """A value observed for a group in a given period."""

    key: GroupKey
    period: str
    value: float

    def to_point(self) -> SeriesPoint:
        """Drop the group identity."""
        return SeriesPoint(period=self.period, value=self.value)


@dataclass(frozen=True)
class RunContext:
    """Parameters identifying one detection run."""

    period: str
    branch: str | None = None
    business_line: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate the run period."""
        if not self.period or not str(self.period).strip():
            raise ValueError("Run period is required")

    @property
    def all_branches(self) -> bool:
        """True when no branch filter applies."""
        return self.branch is None or self.branch.strip().upper() in ALL_BRANCHES


def is_chronological(points: Sequence[SeriesPoint]) -> bool:
    """Check that periods are strictly increasing (and therefore unique)."""
    return all(a.period < b.period for a, b in zip(points, points[1:]))
