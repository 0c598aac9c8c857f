"""Batch driver running the pipeline over many track log files.

Reading file bytes happens here, before the pipeline; the pipeline itself
never touches the filesystem. One bad file never aborts the batch: every file
ends up as exactly one success, skipped or error entry in the report.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .config import (
    BATCH_MAX_WORKERS,
    BATCH_PROGRESS_EVERY,
    BATCH_SKIP_UNREADABLE,
    DEFAULT_SAMPLE_BUDGET,
)
from .models import PipelineOutcome
from .pipeline import process_track_log

TRACK_LOG_SUFFIXES = (".gpx", ".gpx.gz")

Reader = Callable[[Path], bytes]


def _read_bytes(path: Path) -> bytes:
    return Path(path).read_bytes()


def list_track_log_files(directory: Path) -> List[Path]:
    """Return the ``.gpx`` / ``.gpx.gz`` files directly inside ``directory``, sorted by name."""

    directory = Path(directory)
    return sorted(
        child
        for child in directory.iterdir()
        if child.is_file() and child.name.lower().endswith(TRACK_LOG_SUFFIXES)
    )


@dataclass(slots=True)
class BatchConfig:
    reader: Reader = _read_bytes
    sample_budget: int = DEFAULT_SAMPLE_BUDGET
    max_workers: int = BATCH_MAX_WORKERS
    progress_every: int = BATCH_PROGRESS_EVERY
    skip_unreadable: bool = BATCH_SKIP_UNREADABLE
    logger: logging.Logger | None = None


@dataclass(slots=True, frozen=True)
class FileOutcome:
    path: Path
    status: str
    outcome: Optional[PipelineOutcome] = None
    error: Optional[str] = None


@dataclass(slots=True)
class BatchReport:
    outcomes: List[FileOutcome] = field(default_factory=list)

    def count(self, status: str) -> int:
        return sum(1 for item in self.outcomes if item.status == status)

    @property
    def success_count(self) -> int:
        return self.count("success")

    @property
    def skipped_count(self) -> int:
        return self.count("skipped")

    @property
    def error_count(self) -> int:
        return self.count("error")

    def counts(self) -> Dict[str, int]:
        return {
            "success": self.success_count,
            "skipped": self.skipped_count,
            "error": self.error_count,
        }


class BatchProcessor:
    def __init__(self, config: BatchConfig | None = None):
        self.config = config or BatchConfig()
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)

    def _process_one(self, path: Path) -> FileOutcome:
        try:
            payload = self.config.reader(path)
        except OSError as exc:
            status = "skipped" if self.config.skip_unreadable else "error"
            self._log.warning("Unable to read %s: %s", path, exc)
            return FileOutcome(path=path, status=status, error=str(exc))
        try:
            outcome = process_track_log(
                payload, self.config.sample_budget, label=str(path)
            )
        except Exception as exc:  # pragma: no cover
            self._log.error(
                "Track log %s failed due to unexpected error: %s",
                path,
                exc,
                exc_info=True,
            )
            return FileOutcome(path=path, status="error", error=str(exc))
        return FileOutcome(path=path, status=outcome.status, outcome=outcome)

    def process(self, paths: Sequence[Path]) -> BatchReport:
        """Process every path and return outcomes in input order."""

        paths = [Path(p) for p in paths]
        if not paths:
            return BatchReport()

        workers = max(1, min(self.config.max_workers, len(paths)))
        self._log.info("Processing %d track logs with %d workers", len(paths), workers)
        results: List[Optional[FileOutcome]] = [None] * len(paths)
        done = 0
        counts = {"success": 0, "skipped": 0, "error": 0}

        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_map = {
                executor.submit(self._process_one, path): index
                for index, path in enumerate(paths)
            }
            for future in as_completed(future_map):
                index = future_map[future]
                try:
                    item = future.result()
                except Exception as exc:
                    self._log.error(
                        "Track log %s failed: %s", paths[index], exc, exc_info=True
                    )
                    item = FileOutcome(path=paths[index], status="error", error=str(exc))
                results[index] = item
                done += 1
                counts[item.status] += 1
                if done == len(paths) or (
                    self.config.progress_every > 0
                    and done % self.config.progress_every == 0
                ):
                    self._log.info(
                        "Progress: %d/%d (%d imported, %d skipped, %d errors)",
                        done,
                        len(paths),
                        counts["success"],
                        counts["skipped"],
                        counts["error"],
                    )

        report = BatchReport(outcomes=[item for item in results if item is not None])
        self._log.info(
            "Finished %d track logs: success=%d skipped=%d error=%d",
            len(report.outcomes),
            report.success_count,
            report.skipped_count,
            report.error_count,
        )
        return report


__all__ = [
    "BatchConfig",
    "BatchProcessor",
    "BatchReport",
    "FileOutcome",
    "TRACK_LOG_SUFFIXES",
    "list_track_log_files",
]
