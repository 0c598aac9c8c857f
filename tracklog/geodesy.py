"""Great-circle distance helpers on a spherical Earth.

The spherical model stays well under 1% error for foot-travel distances, which
is far below the 3-5 m fix error of consumer GPS receivers.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence

from .config import DISTANCE_MAX_SEGMENT_SPEED_MPS
from .models import CleanTrackpoint, LatLon, RawTrackpoint

_LOG = logging.getLogger(__name__)

EARTH_RADIUS_M = 6_371_000.0
METERS_PER_MILE = 1609.344
METERS_PER_FOOT = 0.3048


def meters_to_miles(meters: float) -> float:
    return meters / METERS_PER_MILE


def meters_to_feet(meters: float) -> float:
    return meters / METERS_PER_FOOT


def haversine_m(first: LatLon, second: LatLon) -> float:
    """Return the surface distance in metres between two (lat, lon) pairs."""

    lat1, lon1 = first
    lat2, lon2 = second
    sin = math.sin
    cos = math.cos
    radians = math.radians
    atan2 = math.atan2
    sqrt = math.sqrt
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = lat2_rad - lat1_rad
    delta_lon = radians(lon2 - lon1)
    sin_half_lat = sin(delta_lat / 2.0)
    sin_half_lon = sin(delta_lon / 2.0)
    a = sin_half_lat**2 + cos(lat1_rad) * cos(lat2_rad) * sin_half_lon**2
    c = 2.0 * atan2(sqrt(a), sqrt(1.0 - a))
    return EARTH_RADIUS_M * c


def step_distances(
    points: Sequence[RawTrackpoint],
    *,
    max_speed_mps: float = DISTANCE_MAX_SEGMENT_SPEED_MPS,
) -> List[float]:
    """Return the distance contributed by each consecutive pair.

    The list has ``len(points) - 1`` entries. Pairs whose implied speed exceeds
    ``max_speed_mps`` are GPS spikes and contribute ``0.0``; a non-positive
    limit disables the filter.
    """

    steps: List[float] = []
    spikes = 0
    for previous, current in zip(points, points[1:]):
        distance = haversine_m(previous.latlon, current.latlon)
        if max_speed_mps > 0:
            elapsed = (current.timestamp - previous.timestamp).total_seconds()
            if elapsed > 0 and distance / elapsed > max_speed_mps:
                spikes += 1
                distance = 0.0
        steps.append(distance)
    if spikes:
        _LOG.debug("Ignored %d GPS spikes faster than %.1f m/s", spikes, max_speed_mps)
    return steps


def cumulative_distances(
    points: Sequence[RawTrackpoint],
    *,
    max_speed_mps: float = DISTANCE_MAX_SEGMENT_SPEED_MPS,
) -> List[float]:
    """Return the running distance total (metres) at each point, starting at 0."""

    if not points:
        return []
    totals = [0.0]
    running = 0.0
    for step in step_distances(points, max_speed_mps=max_speed_mps):
        running += step
        totals.append(running)
    return totals


def annotate_distances(
    points: Sequence[RawTrackpoint],
    *,
    max_speed_mps: float = DISTANCE_MAX_SEGMENT_SPEED_MPS,
) -> List[CleanTrackpoint]:
    """Wrap sanitized points with their cumulative distance."""

    totals = cumulative_distances(points, max_speed_mps=max_speed_mps)
    return [
        CleanTrackpoint(point=point, cumulative_distance_m=total)
        for point, total in zip(points, totals)
    ]


__all__ = [
    "EARTH_RADIUS_M",
    "METERS_PER_MILE",
    "METERS_PER_FOOT",
    "annotate_distances",
    "cumulative_distances",
    "haversine_m",
    "meters_to_feet",
    "meters_to_miles",
    "step_distances",
]
