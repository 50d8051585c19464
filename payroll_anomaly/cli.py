"""Command-line batch entry point.

Reads observations from a JSONL file, runs the requested detectors for one
period and prints the reports as JSON on stdout.
"""

import argparse
import dataclasses
import json
import logging
import sys
from typing import Sequence

from payroll_anomaly.config import Settings, configure, configure_logging
from payroll_anomaly.engine.runner import DetectionRunner
from payroll_anomaly.errors import AnomalyEngineError
from payroll_anomaly.models.group import RunContext
from payroll_anomaly.providers.file_provider import JsonlSeriesProvider

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="payroll-anomaly",
        description="Detect anomalous payroll indicators for one period.",
    )
    parser.add_argument("--input", help="JSONL file with observations (default: DATA_PATH)")
    parser.add_argument("--period", required=True, help="Period to evaluate, e.g. 202544")
    parser.add_argument("--branch", default=None, help="Branch filter; omit or TODAS for all")
    parser.add_argument("--business-line", type=int, default=None, help="Business line code")
    parser.add_argument(
        "--detector",
        choices=["zscore", "arima", "all"],
        default="all",
        help="Detector to run",
    )
    parser.add_argument("--zscore-preset", default=None, help="default, conservative or strict")
    parser.add_argument("--arima-preset", default=None, help="default, conservative or exhaustive")
    parser.add_argument("--workers", type=int, default=None, help="Thread pool size")
    parser.add_argument("--timeout", type=float, default=None, help="Run time limit in seconds")
    parser.add_argument(
        "--normalize-percentages",
        action="store_true",
        help="Treat values above 1 as percentages",
    )
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    return parser


def settings_from_args(args: argparse.Namespace, base: Settings) -> Settings:
    """Apply command-line overrides on top of environment settings."""
    changes = {}
    if args.input:
        changes["data_path"] = args.input
    if args.zscore_preset:
        changes["zscore_preset"] = args.zscore_preset
    if args.arima_preset:
        changes["arima_preset"] = args.arima_preset
    if args.workers:
        changes["max_workers"] = args.workers
    if args.timeout:
        changes["run_timeout_seconds"] = args.timeout
    if args.normalize_percentages:
        changes["normalize_percentages"] = True
    if args.log_level:
        changes["log_level"] = args.log_level.upper()
    if args.detector == "zscore":
        changes["arima_enabled"] = False
        changes["zscore_enabled"] = True
    elif args.detector == "arima":
        changes["zscore_enabled"] = False
        changes["arima_enabled"] = True
    return dataclasses.replace(base, **changes)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return a process exit code."""
    args = build_parser().parse_args(argv)

    try:
        settings = settings_from_args(args, Settings.from_env())
    except (AnomalyEngineError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    configure(settings)
    configure_logging(settings.log_level)

    provider = JsonlSeriesProvider(
        settings.data_path,
        normalize_percentages=settings.normalize_percentages,
    )
    runner = DetectionRunner(provider, settings=settings)
    context = RunContext(
        period=args.period,
        branch=args.branch,
        business_line=args.business_line,
    )

    try:
        reports = runner.run_all(context)
    except AnomalyEngineError as exc:
        logger.error("Detection run failed: %s", exc)
        return 1

    output = {kind.value: report.to_dict() for kind, report in reports.items()}
    json.dump(output, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")

    if any(report.cancelled for report in reports.values()):
        return 3
    return 0
