"""Detection of suspected device dropouts.

Gaps are reporting metadata only: the point sequence and its cumulative
distances are never altered. The only effect downstream is that the point
closing a gap carries ``gap_before=True`` so the resampler can suppress pace
for any sample spanning it.
"""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import List, Sequence, Tuple

from .config import GAP_MAX_SPEED_MPS, GAP_MIN_ELAPSED_SECONDS, GAP_MIN_SPEED_MPS
from .models import CleanTrackpoint, GapSegment

_LOG = logging.getLogger(__name__)


def find_gaps(
    points: Sequence[CleanTrackpoint],
    *,
    min_elapsed_s: float = GAP_MIN_ELAPSED_SECONDS,
    min_speed_mps: float = GAP_MIN_SPEED_MPS,
    max_speed_mps: float = GAP_MAX_SPEED_MPS,
) -> List[GapSegment]:
    """Return a gap for every consecutive pair that is both slow to arrive and implausibly fast or slow."""

    gaps: List[GapSegment] = []
    for index in range(1, len(points)):
        previous = points[index - 1]
        current = points[index]
        elapsed = (current.timestamp - previous.timestamp).total_seconds()
        if elapsed <= min_elapsed_s:
            continue
        distance = current.cumulative_distance_m - previous.cumulative_distance_m
        speed = distance / elapsed
        if min_speed_mps <= speed <= max_speed_mps:
            continue
        gaps.append(
            GapSegment(
                start_index=index - 1,
                end_index=index,
                elapsed_seconds=elapsed,
                distance_m=distance,
            )
        )
    return gaps


def mark_gaps(
    points: Sequence[CleanTrackpoint],
    gaps: Sequence[GapSegment],
) -> List[CleanTrackpoint]:
    """Return a copy of ``points`` with ``gap_before`` set on each gap's closing point."""

    closing = {gap.end_index for gap in gaps}
    return [
        replace(point, gap_before=True) if index in closing else point
        for index, point in enumerate(points)
    ]


def detect_gaps(
    points: Sequence[CleanTrackpoint],
    *,
    min_elapsed_s: float = GAP_MIN_ELAPSED_SECONDS,
    min_speed_mps: float = GAP_MIN_SPEED_MPS,
    max_speed_mps: float = GAP_MAX_SPEED_MPS,
) -> Tuple[List[CleanTrackpoint], List[GapSegment]]:
    gaps = find_gaps(
        points,
        min_elapsed_s=min_elapsed_s,
        min_speed_mps=min_speed_mps,
        max_speed_mps=max_speed_mps,
    )
    if gaps:
        _LOG.debug(
            "Detected %d gaps totalling %.0f s",
            len(gaps),
            sum(gap.elapsed_seconds for gap in gaps),
        )
    return mark_gaps(points, gaps), gaps


__all__ = ["detect_gaps", "find_gaps", "mark_gaps"]
