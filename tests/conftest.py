"""Shared fixtures."""

from typing import Iterator

import pytest

from payroll_anomaly.config import reset_settings
from payroll_anomaly.detectors import reset_detector_registry


@pytest.fixture(autouse=True)
def isolated_globals() -> Iterator[None]:
    """Give every test fresh global settings and detector registry."""
    reset_settings()
    reset_detector_registry()
    yield
    reset_settings()
    reset_detector_registry()
