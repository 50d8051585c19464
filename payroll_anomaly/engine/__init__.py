"""Detection engine module."""

from payroll_anomaly.engine.runner import DetectionRunner

__all__ = ["DetectionRunner"]
