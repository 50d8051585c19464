"""Series provider module."""

from payroll_anomaly.providers.file_provider import JsonlSeriesProvider, observation_from_dict
from payroll_anomaly.providers.interface import BaseSeriesProvider, SeriesFilter, SeriesProvider
from payroll_anomaly.providers.memory_provider import InMemorySeriesProvider

__all__ = [
    "BaseSeriesProvider",
    "InMemorySeriesProvider",
    "JsonlSeriesProvider",
    "SeriesFilter",
    "SeriesProvider",
    "observation_from_dict",
]
