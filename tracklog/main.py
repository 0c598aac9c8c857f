"""Command line entry point: run the pipeline over track log files.

Usage:
    python -m tracklog activities/                 # every .gpx / .gpx.gz in a folder
    python -m tracklog run.gpx ride.gpx.gz --budget 300
    python -m tracklog activities/ --output results.json
"""

from __future__ import annotations

import argparse
from dataclasses import asdict
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .batch import BatchConfig, BatchProcessor, BatchReport, list_track_log_files
from .config import BATCH_MAX_WORKERS, DEFAULT_SAMPLE_BUDGET, LOG_LEVEL
from .geodesy import meters_to_feet, meters_to_miles
from .models import Success
from .utils import format_duration, format_pace, json_dumps_sorted

LOGGER = logging.getLogger("tracklog")


def _setup_logging(level: str = LOG_LEVEL) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert GPX track logs into resampled streams and encoded paths"
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        help="Track log files or directories containing .gpx / .gpx.gz files",
    )
    parser.add_argument(
        "--budget",
        type=int,
        default=DEFAULT_SAMPLE_BUDGET,
        help=f"Output samples per file (default: {DEFAULT_SAMPLE_BUDGET})",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=BATCH_MAX_WORKERS,
        help=f"Files processed concurrently (default: {BATCH_MAX_WORKERS})",
    )
    parser.add_argument(
        "--output",
        help="Write a JSON document with every file's outcome to this path",
    )
    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Python logging level",
    )
    return parser


def _collect_paths(inputs: Sequence[str]) -> List[Path]:
    paths: List[Path] = []
    for raw in inputs:
        path = Path(raw).expanduser()
        if path.is_dir():
            found = list_track_log_files(path)
            LOGGER.info("Found %d track logs in %s", len(found), path)
            paths.extend(found)
        else:
            paths.append(path)
    return paths


def _describe(report: BatchReport) -> None:
    for item in report.outcomes:
        outcome = item.outcome
        if not isinstance(outcome, Success):
            detail = item.error or type(outcome).__name__
            print(f"{item.path.name}: {item.status} ({detail})")
            continue
        result = outcome.result
        print(
            f"{item.path.name}: "
            f"{meters_to_miles(result.total_distance_m):.2f} mi, "
            f"{format_duration(result.total_duration_s)}, "
            f"{format_pace(result.average_pace_s_per_mile)}, "
            f"+{round(meters_to_feet(result.total_elevation_gain_m))} ft, "
            f"HR {'yes' if result.has_heart_rate else 'no'}, "
            f"{len(result.samples)} samples, "
            f"path {len(result.encoded_path)} chars"
        )


def _report_document(report: BatchReport) -> dict:
    files = []
    for item in report.outcomes:
        entry: dict = {"file": str(item.path), "status": item.status}
        if item.error:
            entry["error"] = item.error
        if isinstance(item.outcome, Success):
            entry["result"] = item.outcome.result.to_dict()
        elif item.outcome is not None:
            entry["outcome"] = type(item.outcome).__name__
            entry["detail"] = {
                key: value
                for key, value in asdict(item.outcome).items()
                if key != "status"
            }
        files.append(entry)
    return {"counts": report.counts(), "files": files}


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.log_level)
    if args.budget < 1:
        parser.error("--budget must be at least 1")

    paths = _collect_paths(args.inputs)
    if not paths:
        LOGGER.warning("No track logs to process")
        return 0

    processor = BatchProcessor(
        BatchConfig(sample_budget=args.budget, max_workers=max(1, args.workers))
    )
    report = processor.process(paths)
    _describe(report)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(json_dumps_sorted(_report_document(report), indent=2))
        LOGGER.info("Output written to %s", output_path)
    return 0
