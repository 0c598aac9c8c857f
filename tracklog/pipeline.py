"""Pipeline orchestrator: track log bytes in, tagged outcome out.

Stages run in order and the first failure short-circuits:

    parse -> sanitize -> distance -> gaps -> resample/summarize -> encode

Stage errors are converted into outcome values here and nowhere else, so a bad
file never raises through the caller. The function is pure and synchronous:
identical bytes and settings always yield an identical outcome, and callers
may run any number of invocations in parallel.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import DEFAULT_SAMPLE_BUDGET, PATH_PRECISION, PATH_SOURCE
from .errors import DataQualityError, ParseError
from .gaps import detect_gaps
from .geodesy import annotate_distances
from .models import (
    DataQualityFailure,
    EmptyPath,
    InsufficientData,
    ParseFailure,
    PipelineOutcome,
    PipelineResult,
    Success,
)
from .parser import parse_track_log
from .path_codec import encode_path
from .resampler import resample, summarize
from .sanitizer import sanitize_with_report

_LOG = logging.getLogger(__name__)

MIN_POINTS = 2
PATH_SOURCES = ("resampled", "raw")


def process_track_log(
    payload: bytes,
    sample_budget: int = DEFAULT_SAMPLE_BUDGET,
    *,
    path_source: str = PATH_SOURCE,
    path_precision: int = PATH_PRECISION,
    label: Optional[str] = None,
) -> PipelineOutcome:
    """Run every stage over one document and return a tagged outcome.

    ``sample_budget`` and ``path_source`` are caller settings, not file data,
    so invalid values raise ``ValueError`` instead of producing an outcome.
    """

    if sample_budget < 1:
        raise ValueError("sample_budget must be at least 1")
    if path_source not in PATH_SOURCES:
        raise ValueError(f"path_source must be one of {PATH_SOURCES}")
    label = label or "<bytes>"

    try:
        parsed = parse_track_log(payload)
    except ParseError as exc:
        _LOG.info("Parse failed for %s: %s", label, exc)
        return ParseFailure(reason=str(exc))

    raw_count = len(parsed.points)
    if raw_count < MIN_POINTS:
        _LOG.debug("Skipping %s: only %d parsed trackpoints", label, raw_count)
        return InsufficientData(point_count=raw_count, stage="parse")

    try:
        report = sanitize_with_report(parsed.points)
    except DataQualityError as exc:
        _LOG.warning(
            "Data quality failure for %s: %s (out_of_order=%d total=%d)",
            label,
            exc,
            exc.out_of_order,
            exc.total,
        )
        return DataQualityFailure(
            reason=str(exc), out_of_order=exc.out_of_order, total=exc.total
        )

    clean_count = len(report.points)
    if clean_count < MIN_POINTS:
        _LOG.debug("Skipping %s: only %d points after sanitizing", label, clean_count)
        return InsufficientData(point_count=clean_count, stage="sanitize")

    points, gaps = detect_gaps(annotate_distances(report.points))
    samples = resample(points, sample_budget)
    summary = summarize(points)

    if path_source == "raw":
        coords = [p.latlon for p in points]
    else:
        coords = [(s.latitude, s.longitude) for s in samples]
    encoded = encode_path(coords, path_precision)
    if not encoded:
        _LOG.error("Empty encoded path for %s with %d samples", label, len(samples))
        return EmptyPath()

    result = PipelineResult(
        clean_point_count=clean_count,
        samples=tuple(samples),
        encoded_path=encoded,
        total_distance_m=summary.total_distance_m,
        total_elevation_gain_m=summary.total_elevation_gain_m,
        total_duration_s=summary.total_duration_s,
        max_heart_rate_bpm=summary.max_heart_rate_bpm,
        has_heart_rate=summary.has_heart_rate,
        total_elevation_loss_m=summary.total_elevation_loss_m,
        average_pace_s_per_mile=summary.average_pace_s_per_mile,
        gaps=tuple(gaps),
        raw_point_count=raw_count,
        name=parsed.name,
        activity_type=parsed.activity_type,
    )
    _LOG.debug(
        "Processed %s: points=%d samples=%d distance=%.1fm gaps=%d",
        label,
        clean_count,
        len(samples),
        result.total_distance_m,
        len(gaps),
    )
    return Success(result=result)


__all__ = ["MIN_POINTS", "PATH_SOURCES", "process_track_log"]
