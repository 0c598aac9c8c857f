"""Encoded polyline codec for path geometry.

Coordinates are scaled by ``10**precision``, rounded, delta-encoded against the
previous point, zig-zag mapped to unsigned integers and emitted as 5-bit
groups offset into printable ASCII. The heavy lifting is done by the
``polyline`` package; this module adds input validation and the empty-input
conventions used by the pipeline.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence

import polyline

from .config import PATH_PRECISION
from .models import LatLon


def _validated(points: Iterable[Sequence[float]]) -> List[LatLon]:
    coords: List[LatLon] = []
    for index, point in enumerate(points):
        if len(point) != 2:
            raise ValueError(f"Point {index} is not a (lat, lon) pair")
        lat, lon = float(point[0]), float(point[1])
        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise ValueError(f"Point {index} has a non-finite coordinate")
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
            raise ValueError(f"Point {index} is outside the valid coordinate range")
        coords.append((lat, lon))
    return coords


def encode_path(
    points: Iterable[Sequence[float]], precision: int = PATH_PRECISION
) -> str:
    """Encode ordered (lat, lon) pairs into a polyline string ("" for no points)."""

    coords = _validated(points)
    if not coords:
        return ""
    return polyline.encode(coords, precision)


def decode_path(encoded: str, precision: int = PATH_PRECISION) -> List[LatLon]:
    """Decode a polyline string back into (lat, lon) tuples."""

    if not encoded:
        return []
    try:
        decoded = polyline.decode(encoded, precision)
    except (ValueError, TypeError, IndexError) as exc:
        raise ValueError("Unable to decode polyline") from exc
    return [(float(lat), float(lon)) for lat, lon in decoded]


__all__ = ["decode_path", "encode_path"]
