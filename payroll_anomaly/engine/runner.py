"""Batch execution of detectors across every group of a run."""

import logging
import math
import statistics
import threading
import time
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import Callable, Sequence

from payroll_anomaly.config.settings import DetectorKind, Settings, get_settings
from payroll_anomaly.detectors.interface import GroupDetector
from payroll_anomaly.detectors.registry import DetectorRegistry, get_detector_registry
from payroll_anomaly.errors import (
    ConfigurationError,
    InsufficientDataError,
    InvalidModelError,
    ProviderError,
    RunCancelledError,
)
from payroll_anomaly.models.group import (
    GroupKey,
    Observation,
    RunContext,
    SeriesPoint,
    is_chronological,
)
from payroll_anomaly.models.report import DetectionReport, DetectionResult, DetectionSummary
from payroll_anomaly.models.results import ZScoreResult
from payroll_anomaly.models.severity import CRITICAL
from payroll_anomaly.providers.interface import SeriesProvider

logger = logging.getLogger(__name__)

# Data-quality hints: alert shares above these usually mean bad input
ARIMA_ALERT_WARNING_PCT = 10.0
ZSCORE_CRITICAL_WARNING_PCT = 20.0

_EVALUATED = "evaluated"
_INSUFFICIENT = "insufficient"
_INVALID = "invalid"
_FAILED = "failed"
_CANCELLED = "cancelled"


class DetectionRunner:
    """Runs one or all detectors over the groups supplied by a provider.

    Each group is an independent task on a thread pool. Per-group failures
    become counters in the report; only provider and configuration errors
    abort the run. A cancellation event and an optional deadline are checked
    before each group starts, and pending groups are dropped once either
    fires.
    """

    def __init__(
        self,
        provider: SeriesProvider,
        registry: DetectorRegistry | None = None,
        settings: Settings | None = None,
        max_workers: int | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            provider: Source of historical series and current values
            registry: Detectors to run; built from ``settings`` when omitted
            settings: Defaults for workers and timeout
            max_workers: Thread pool size; overrides the settings value
        """
        if registry is None:
            registry = DetectorRegistry(settings) if settings is not None else get_detector_registry()
        self._provider = provider
        self._registry = registry
        self._settings = settings or registry.settings or get_settings()
        self._max_workers = max_workers or self._settings.max_workers

    @property
    def registry(self) -> DetectorRegistry:
        """Detectors available to this runner."""
        return self._registry

    def run(
        self,
        context: RunContext,
        kind: DetectorKind | str = DetectorKind.ZSCORE,
        cancel_event: threading.Event | None = None,
        timeout: float | None = None,
        raise_on_cancel: bool = False,
    ) -> DetectionReport:
        """Run one detector over every group of the run.

        Args:
            context: Run period and filters
            kind: Detector to run
            cancel_event: Set from another thread to stop the run
            timeout: Whole-run time limit in seconds; defaults to settings
            raise_on_cancel: Raise instead of returning a partial report

        Returns:
            Report with sorted results and batch counters

        Raises:
            ConfigurationError: If the detector is not enabled
            ProviderError: If the provider breaks its ordering contract
            RunCancelledError: If cancelled and ``raise_on_cancel`` is set
        """
        kind = DetectorKind(kind)
        detector = self._registry.get_detector(kind)
        if detector is None:
            raise ConfigurationError(f"Detector '{kind.value}' is not enabled")

        started_at = datetime.now(timezone.utc)
        start = time.monotonic()
        if timeout is None:
            timeout = self._settings.run_timeout_seconds
        deadline = start + timeout if timeout else None

        def is_cancelled() -> bool:
            if cancel_event is not None and cancel_event.is_set():
                return True
            return deadline is not None and time.monotonic() >= deadline

        history = self._provider.fetch_history(context)
        self._validate_history(history)
        current = self._merge_current(self._provider.fetch_current(context), context)

        counters = {
            "total_groups": len(history.keys() | current.keys()),
            "excluded": 0,
            "missing_current": 0,
            "insufficient_data": 0,
            "invalid_models": 0,
            "numeric_failures": 0,
            "cancelled": 0,
        }

        tasks: list[tuple[GroupKey, list[SeriesPoint], Observation]] = []
        for key in sorted(history.keys() | current.keys()):
            if detector.is_excluded(key):
                counters["excluded"] += 1
            elif key not in current:
                counters["missing_current"] += 1
            elif key not in history:
                counters["insufficient_data"] += 1
            else:
                tasks.append((key, history[key], current[key]))

        logger.info(
            "Starting %s detection for period %s: %d groups to evaluate "
            "(%d excluded, %d without current value)",
            kind.value,
            context.period,
            len(tasks),
            counters["excluded"],
            counters["missing_current"],
        )

        results, cancelled = self._execute(detector, tasks, is_cancelled, counters)
        results.sort(key=_result_sort_key)

        summary = DetectionSummary.from_results(results, **counters)
        duration = time.monotonic() - start
        self._log_summary(kind, context, summary, duration)

        if cancelled and raise_on_cancel:
            raise RunCancelledError(
                f"{kind.value} run for {context.period} cancelled: "
                f"{counters['cancelled']} groups not evaluated"
            )

        return DetectionReport(
            detector=kind.value,
            context=context,
            results=tuple(results),
            summary=summary,
            algorithm_version=detector.algorithm_version,
            config_name=detector.config_name,
            started_at=started_at,
            duration_seconds=duration,
            cancelled=cancelled,
        )

    def run_all(
        self,
        context: RunContext,
        cancel_event: threading.Event | None = None,
        timeout: float | None = None,
    ) -> dict[DetectorKind, DetectionReport]:
        """Run every enabled detector, one after the other."""
        reports = {}
        for kind in self._registry.list_enabled_kinds():
            reports[kind] = self.run(context, kind, cancel_event=cancel_event, timeout=timeout)
        return reports

    def _execute(
        self,
        detector: GroupDetector,
        tasks: Sequence[tuple[GroupKey, list[SeriesPoint], Observation]],
        is_cancelled: Callable[[], bool],
        counters: dict[str, int],
    ) -> tuple[list[DetectionResult], bool]:
        """Evaluate groups in parallel, updating counters in place."""
        results: list[DetectionResult] = []
        cancelled = False

        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            future_to_key = {
                executor.submit(self._evaluate_group, detector, key, points, obs, is_cancelled): key
                for key, points, obs in tasks
            }

            for future in as_completed(future_to_key):
                if not cancelled and is_cancelled():
                    cancelled = True
                    for pending in future_to_key:
                        pending.cancel()

                if future.cancelled():
                    counters["cancelled"] += 1
                    continue

                status, result = future.result()
                if status == _EVALUATED:
                    results.append(result)
                elif status == _INSUFFICIENT:
                    counters["insufficient_data"] += 1
                elif status == _INVALID:
                    counters["invalid_models"] += 1
                elif status == _FAILED:
                    counters["numeric_failures"] += 1
                else:
                    cancelled = True
                    counters["cancelled"] += 1

        return results, cancelled

    @staticmethod
    def _evaluate_group(
        detector: GroupDetector,
        key: GroupKey,
        points: list[SeriesPoint],
        current: Observation,
        is_cancelled: Callable[[], bool],
    ) -> tuple[str, DetectionResult | None]:
        """Evaluate one group, turning per-group failures into a status."""
        if is_cancelled():
            return _CANCELLED, None

        try:
            return _EVALUATED, detector.detect(key, points, current)
        except InsufficientDataError as exc:
            logger.debug("Skipping %s: %s", key.label, exc)
            return _INSUFFICIENT, None
        except InvalidModelError as exc:
            logger.warning("Invalid model for %s: %s", key.label, exc)
            return _INVALID, None
        except (ValueError, ArithmeticError) as exc:
            logger.warning("Numeric failure for %s: %s", key.label, exc)
            # Only a fitted model can be invalid
            if detector.kind is DetectorKind.ARIMA:
                return _INVALID, None
            return _FAILED, None

    @staticmethod
    def _validate_history(history: dict[GroupKey, list[SeriesPoint]]) -> None:
        """Reject series whose periods are not strictly increasing."""
        for key, points in history.items():
            if not is_chronological(points):
                raise ProviderError(
                    f"Series for {key.label} is not in strictly increasing period order"
                )

    @staticmethod
    def _merge_current(
        observations: Sequence[Observation],
        context: RunContext,
    ) -> dict[GroupKey, Observation]:
        """One current observation per group; duplicates are averaged."""
        grouped: dict[GroupKey, list[float]] = defaultdict(list)
        for obs in observations:
            if obs.value is None or not math.isfinite(obs.value):
                logger.warning("Ignoring non-finite current value for %s", obs.key.label)
                continue
            grouped[obs.key].append(obs.value)

        merged = {}
        for key, values in grouped.items():
            if len(values) > 1:
                logger.warning(
                    "%d current values for %s in %s, using their average",
                    len(values),
                    key.label,
                    context.period,
                )
            merged[key] = Observation(key=key, period=context.period, value=statistics.fmean(values))
        return merged

    @staticmethod
    def _log_summary(
        kind: DetectorKind,
        context: RunContext,
        summary: DetectionSummary,
        duration: float,
    ) -> None:
        logger.info(
            "%s detection for %s finished in %.2fs: %d evaluated, %d out of range (%.1f%%), "
            "%d insufficient data, %d invalid models, %d numeric failures, %d cancelled",
            kind.value,
            context.period,
            duration,
            summary.evaluated,
            summary.out_of_range,
            summary.out_of_range_percentage,
            summary.insufficient_data,
            summary.invalid_models,
            summary.numeric_failures,
            summary.cancelled,
        )

        if kind is DetectorKind.ARIMA and summary.out_of_range_percentage > ARIMA_ALERT_WARNING_PCT:
            logger.warning(
                "%.1f%% of ARIMA groups are out of range; check the input data quality",
                summary.out_of_range_percentage,
            )

        critical_pct = summary.severity_percentage(CRITICAL.name)
        if kind is DetectorKind.ZSCORE and critical_pct > ZSCORE_CRITICAL_WARNING_PCT:
            logger.warning(
                "%.1f%% of Z-score groups are CRITICAL; check the input data quality",
                critical_pct,
            )


def _result_sort_key(result: DetectionResult) -> tuple:
    """Severity descending, then magnitude descending, then group key."""
    if isinstance(result, ZScoreResult):
        magnitude = result.abs_z_score
    else:
        magnitude = abs(result.deviation_percentage)
    return (-result.severity.level, -magnitude, result.key)
