"""Reduction of a cleaned track to a fixed budget of output samples.

The sequence is cut into ``min(len(points), budget)`` contiguous index windows
of near-equal size. Per window:

- distance and elapsed time are read at the window's last point, so both
  streams are non-decreasing by construction
- pace is the time delta over the distance delta between the previous window's
  last point and this window's last point, which damps single-fix GPS jitter;
  it is ``None`` when the span covers a detected gap or barely moves
- altitude is the last known elevation in the window, then smoothed with a
  short centred moving average across neighbouring windows
- heart rate and cadence are the mean of every reading inside the window

Scalar summaries are computed from the full cleaned sequence, never from the
resampled rows, so they do not depend on the budget.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from .config import (
    ELEVATION_GAIN_THRESHOLD_M,
    ELEVATION_SMOOTHING_WINDOWS,
    PACE_MAX_SECONDS_PER_MILE,
    PACE_MIN_DISTANCE_M,
    PACE_MIN_SECONDS_PER_MILE,
)
from .geodesy import METERS_PER_MILE
from .models import CleanTrackpoint, DerivedSample, TrackSummary

_LOG = logging.getLogger(__name__)

FloatArray = NDArray[np.float64]


def window_bounds(count: int, budget: int) -> List[Tuple[int, int]]:
    """Return inclusive ``(first, last)`` index pairs for each window.

    The number of windows is capped to ``count`` so no window is ever empty
    and no sample is fabricated.
    """

    if budget < 1:
        raise ValueError("budget must be at least 1")
    windows = min(count, budget)
    if windows <= 0:
        return []
    edges = (np.arange(windows + 1, dtype=np.int64) * count) // windows
    return [(int(edges[i]), int(edges[i + 1]) - 1) for i in range(windows)]


def _optional_array(values: Sequence[Optional[float]]) -> FloatArray:
    return np.asarray(
        [np.nan if value is None else float(value) for value in values],
        dtype=float,
    )


def _window_mean(values: FloatArray, first: int, last: int) -> Optional[float]:
    chunk = values[first : last + 1]
    finite = chunk[~np.isnan(chunk)]
    if finite.size == 0:
        return None
    return float(np.mean(finite))


def _last_known(values: FloatArray, first: int, last: int) -> float:
    chunk = values[first : last + 1]
    known = np.nonzero(~np.isnan(chunk))[0]
    if known.size == 0:
        return math.nan
    return float(chunk[known[-1]])


def smooth_altitudes(values: FloatArray, width: int) -> FloatArray:
    """Centred moving average that skips missing values and never fills them in."""

    if width <= 1 or values.size < 2:
        return values.copy()
    half = width // 2
    smoothed = np.full(values.shape, np.nan, dtype=float)
    for index in range(values.size):
        if np.isnan(values[index]):
            continue
        chunk = values[max(0, index - half) : index + half + 1]
        smoothed[index] = float(np.mean(chunk[~np.isnan(chunk)]))
    return smoothed


def _pace(
    elapsed_s: float,
    distance_m: float,
    *,
    min_distance_m: float,
    min_pace: float,
    max_pace: float,
) -> Optional[float]:
    if elapsed_s <= 0 or distance_m < min_distance_m or distance_m <= 0:
        return None
    pace = elapsed_s / (distance_m / METERS_PER_MILE)
    return min(max(pace, min_pace), max_pace)


def resample(
    points: Sequence[CleanTrackpoint],
    budget: int,
    *,
    smoothing_windows: int = ELEVATION_SMOOTHING_WINDOWS,
    min_pace_distance_m: float = PACE_MIN_DISTANCE_M,
    min_pace: float = PACE_MIN_SECONDS_PER_MILE,
    max_pace: float = PACE_MAX_SECONDS_PER_MILE,
) -> List[DerivedSample]:
    """Return ``min(len(points), budget)`` derived samples."""

    bounds = window_bounds(len(points), budget)
    if not bounds:
        return []

    start = points[0].timestamp
    elapsed = np.asarray(
        [(p.timestamp - start).total_seconds() for p in points], dtype=float
    )
    distance = np.asarray([p.cumulative_distance_m for p in points], dtype=float)
    gap_before = np.asarray([p.gap_before for p in points], dtype=bool)
    elevation = _optional_array([p.point.elevation_m for p in points])
    heart_rate = _optional_array([p.point.heart_rate_bpm for p in points])
    cadence = _optional_array([p.point.cadence for p in points])

    altitudes = smooth_altitudes(
        np.asarray([_last_known(elevation, first, last) for first, last in bounds]),
        smoothing_windows,
    )

    samples: List[DerivedSample] = []
    suppressed = 0
    for window, (first, last) in enumerate(bounds):
        anchor = bounds[window - 1][1] if window > 0 else first
        if np.any(gap_before[anchor + 1 : last + 1]):
            pace = None
            suppressed += 1
        else:
            pace = _pace(
                float(elapsed[last] - elapsed[anchor]),
                float(distance[last] - distance[anchor]),
                min_distance_m=min_pace_distance_m,
                min_pace=min_pace,
                max_pace=max_pace,
            )
        altitude = altitudes[window]
        representative = points[last].point
        samples.append(
            DerivedSample(
                cumulative_distance_m=float(distance[last]),
                cumulative_elapsed_s=float(elapsed[last]),
                pace_s_per_mile=pace,
                altitude_m=None if np.isnan(altitude) else float(altitude),
                heart_rate_bpm=_window_mean(heart_rate, first, last),
                latitude=representative.latitude,
                longitude=representative.longitude,
                cadence=_window_mean(cadence, first, last),
            )
        )
    if suppressed:
        _LOG.debug("Suppressed pace on %d samples spanning gaps", suppressed)
    return samples


def elevation_change(
    points: Sequence[CleanTrackpoint],
    *,
    threshold_m: float = ELEVATION_GAIN_THRESHOLD_M,
) -> Tuple[float, float]:
    """Return ``(gain, loss)`` in metres across consecutive known elevations.

    Points without an elevation are bridged: the next known value is compared
    with the last known one rather than with zero.
    """

    gain = 0.0
    loss = 0.0
    previous: Optional[float] = None
    for point in points:
        current = point.point.elevation_m
        if current is None:
            continue
        if previous is not None:
            delta = current - previous
            if delta > threshold_m:
                gain += delta
            elif delta < -threshold_m:
                loss -= delta
        previous = current
    return gain, loss


def summarize(
    points: Sequence[CleanTrackpoint],
    *,
    elevation_threshold_m: float = ELEVATION_GAIN_THRESHOLD_M,
    min_pace_distance_m: float = PACE_MIN_DISTANCE_M,
) -> TrackSummary:
    """Compute scalar summaries from the full cleaned sequence."""

    if not points:
        return TrackSummary(
            total_distance_m=0.0,
            total_elevation_gain_m=0.0,
            total_elevation_loss_m=0.0,
            total_duration_s=0.0,
            max_heart_rate_bpm=None,
            has_heart_rate=False,
            average_pace_s_per_mile=None,
        )
    total_distance = points[-1].cumulative_distance_m
    duration = (points[-1].timestamp - points[0].timestamp).total_seconds()
    gain, loss = elevation_change(points, threshold_m=elevation_threshold_m)
    readings = [
        p.point.heart_rate_bpm for p in points if p.point.heart_rate_bpm is not None
    ]
    average_pace = None
    if total_distance >= min_pace_distance_m and duration > 0:
        average_pace = duration / (total_distance / METERS_PER_MILE)
    return TrackSummary(
        total_distance_m=total_distance,
        total_elevation_gain_m=gain,
        total_elevation_loss_m=loss,
        total_duration_s=duration,
        max_heart_rate_bpm=max(readings) if readings else None,
        has_heart_rate=bool(readings),
        average_pace_s_per_mile=average_pace,
    )


__all__ = [
    "elevation_change",
    "resample",
    "smooth_altitudes",
    "summarize",
    "window_bounds",
]
