"""File-based series provider implementation."""

import fcntl
import json
import logging
from pathlib import Path
from typing import Any

from payroll_anomaly.alerts.numbers import normalize_to_fraction
from payroll_anomaly.errors import ProviderError
from payroll_anomaly.models.group import GroupKey, Observation, RunContext, SeriesPoint
from payroll_anomaly.providers.interface import BaseSeriesProvider

logger = logging.getLogger(__name__)


def observation_from_dict(data: dict[str, Any], normalize: bool = False) -> Observation:
    """Create an Observation from one flat record.

    Raises:
        KeyError: If period or value is missing
        TypeError, ValueError: If a field has the wrong type
    """
    value = float(data["value"])
    if normalize:
        value = normalize_to_fraction(value)
    return Observation(
        key=GroupKey.from_dict(data),
        period=str(data["period"]).strip(),
        value=value,
    )


class JsonlSeriesProvider(BaseSeriesProvider):
    """Reads indicator observations from a JSON Lines file.

    FILE FORMAT:
    - One JSON object per line with ``position``, ``indicator``,
      ``concept``, ``branch``, ``business_line``, ``period`` and ``value``
    - Lines in any order; history and current values share the file
    - Blank lines are ignored, malformed lines are skipped with a warning

    The file is read under a shared lock so a concurrent writer holding an
    exclusive lock is never observed half-written.
    """

    def __init__(self, path: str | Path, normalize_percentages: bool = False) -> None:
        """Initialize the provider.

        Args:
            path: Path to the JSONL file
            normalize_percentages: Scale values above 1 in magnitude down
                by 100, for sources that mix percentages and fractions
        """
        self._file_path = Path(path)
        self._normalize = normalize_percentages

    @property
    def file_path(self) -> Path:
        """Path of the source file."""
        return self._file_path

    def fetch_history(self, context: RunContext) -> dict[GroupKey, list[SeriesPoint]]:
        """Fetch historical series for every group selected by the context."""
        return self._build_history(self._read_all_observations(), context)

    def fetch_current(self, context: RunContext) -> list[Observation]:
        """Fetch the run-period observations selected by the context."""
        return self._select_current(self._read_all_observations(), context)

    def _read_all_observations(self) -> list[Observation]:
        """Read all observations from the file.

        Raises:
            ProviderError: If the file does not exist
        """
        if not self._file_path.exists():
            raise ProviderError(f"Series file not found: {self._file_path}")

        observations = []
        skipped = 0

        with open(self._file_path, "r", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_SH)
            try:
                for line_number, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        data = json.loads(line)
                        observations.append(observation_from_dict(data, self._normalize))
                    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
                        skipped += 1
                        logger.warning(
                            "Skipping malformed line %d in %s: %s",
                            line_number,
                            self._file_path,
                            exc,
                        )
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)

        logger.debug(
            "Read %d observations from %s (%d skipped)",
            len(observations),
            self._file_path,
            skipped,
        )
        return observations
