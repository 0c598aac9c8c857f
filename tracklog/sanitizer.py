"""Removal of physically implausible trackpoints.

Rules, applied in order:
  1. drop points at exactly (0, 0) or outside the valid coordinate range
  2. drop points repeating an earlier point's timestamp (the first one wins)
  3. if more than ``SANITIZER_MAX_DISORDER_FRACTION`` of the remaining points
     would have to move to restore timestamp order, fail with ``DataQualityError``;
     otherwise stable-sort the few stray points back into place

No distance computation happens here.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
import logging
import math
from datetime import datetime
from typing import List, Sequence

from .config import SANITIZER_MAX_DISORDER_FRACTION
from .errors import DataQualityError
from .models import RawTrackpoint

_LOG = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SanitizeReport:
    points: List[RawTrackpoint]
    dropped_invalid: int = 0
    dropped_duplicates: int = 0
    reordered: int = 0


def has_valid_coordinates(point: RawTrackpoint) -> bool:
    lat = point.latitude
    lon = point.longitude
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    if lat == 0.0 and lon == 0.0:
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def count_out_of_order(points: Sequence[RawTrackpoint]) -> int:
    """Return the fewest points that must move to put the timestamps in order.

    This is the point count minus the longest non-decreasing subsequence
    of timestamps, so one stray fix far in the future counts once rather than
    flagging every point after it.
    """

    tails: list[datetime] = []
    for point in points:
        index = bisect_right(tails, point.timestamp)
        if index == len(tails):
            tails.append(point.timestamp)
        else:
            tails[index] = point.timestamp
    return len(points) - len(tails)


def sanitize_with_report(
    points: Sequence[RawTrackpoint],
    *,
    max_disorder_fraction: float = SANITIZER_MAX_DISORDER_FRACTION,
) -> SanitizeReport:
    """Apply the sanitizing rules and report what was dropped or moved."""

    valid = [p for p in points if has_valid_coordinates(p)]
    dropped_invalid = len(points) - len(valid)

    seen: set[datetime] = set()
    unique: list[RawTrackpoint] = []
    for point in valid:
        if point.timestamp in seen:
            continue
        seen.add(point.timestamp)
        unique.append(point)
    dropped_duplicates = len(valid) - len(unique)

    out_of_order = count_out_of_order(unique)
    if out_of_order:
        total = len(unique)
        if out_of_order > max_disorder_fraction * total:
            _LOG.warning(
                "Timestamp disorder too high: %d of %d points out of order (limit %.1f%%)",
                out_of_order,
                total,
                max_disorder_fraction * 100.0,
            )
            raise DataQualityError(
                f"{out_of_order} of {total} trackpoints are out of timestamp order",
                out_of_order=out_of_order,
                total=total,
            )
        unique.sort(key=lambda p: p.timestamp)

    if dropped_invalid or dropped_duplicates or out_of_order:
        _LOG.debug(
            "Sanitized trackpoints: kept=%d invalid=%d duplicates=%d reordered=%d",
            len(unique),
            dropped_invalid,
            dropped_duplicates,
            out_of_order,
        )
    return SanitizeReport(
        points=unique,
        dropped_invalid=dropped_invalid,
        dropped_duplicates=dropped_duplicates,
        reordered=out_of_order,
    )


def sanitize_trackpoints(
    points: Sequence[RawTrackpoint],
    *,
    max_disorder_fraction: float = SANITIZER_MAX_DISORDER_FRACTION,
) -> List[RawTrackpoint]:
    return sanitize_with_report(
        points, max_disorder_fraction=max_disorder_fraction
    ).points


__all__ = [
    "SanitizeReport",
    "count_out_of_order",
    "has_valid_coordinates",
    "sanitize_trackpoints",
    "sanitize_with_report",
]
