"""Global pytest fixtures & helpers.

Adds project root to path and provides GPX document builders so stage tests
can create small track logs without fixture files on disk.
"""
from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Sequence

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from tracklog.geodesy import EARTH_RADIUS_M
from tracklog.models import CleanTrackpoint, RawTrackpoint

START = datetime(2024, 5, 1, 7, 30, tzinfo=timezone.utc)
# Degrees of latitude per metre travelled along a meridian.
DEG_PER_M = 180.0 / (3.141592653589793 * EARTH_RADIUS_M)


# --- Factory helpers -------------------------------------------------
def make_point(
    seconds: float,
    lat: float = 40.0,
    lon: float = -74.0,
    *,
    ele: Optional[float] = None,
    hr: Optional[float] = None,
    cad: Optional[float] = None,
) -> RawTrackpoint:
    return RawTrackpoint(
        timestamp=START + timedelta(seconds=seconds),
        latitude=lat,
        longitude=lon,
        elevation_m=ele,
        heart_rate_bpm=hr,
        cadence=cad,
    )


def straight_track(
    count: int,
    *,
    step_m: float = 30.0,
    step_s: float = 10.0,
    start_lat: float = 40.0,
    lon: float = -74.0,
    elevations: Optional[Sequence[Optional[float]]] = None,
    heart_rates: Optional[Sequence[Optional[float]]] = None,
) -> list[RawTrackpoint]:
    """Return ``count`` points heading due north at a constant speed."""

    points = []
    for i in range(count):
        points.append(
            make_point(
                i * step_s,
                start_lat + i * step_m * DEG_PER_M,
                lon,
                ele=elevations[i] if elevations is not None else None,
                hr=heart_rates[i] if heart_rates is not None else None,
            )
        )
    return points


def clean(points: Iterable[RawTrackpoint], distances: Iterable[float]) -> list[CleanTrackpoint]:
    return [
        CleanTrackpoint(point=p, cumulative_distance_m=d)
        for p, d in zip(points, distances)
    ]


def _format_time(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def trkpt_xml(point: RawTrackpoint) -> str:
    lines = [f'      <trkpt lat="{point.latitude!r}" lon="{point.longitude!r}">']
    if point.elevation_m is not None:
        lines.append(f"        <ele>{point.elevation_m}</ele>")
    lines.append(f"        <time>{_format_time(point.timestamp)}</time>")
    if point.heart_rate_bpm is not None or point.cadence is not None:
        lines.append("        <extensions>")
        lines.append("          <gpxtpx:TrackPointExtension>")
        if point.heart_rate_bpm is not None:
            lines.append(f"            <gpxtpx:hr>{int(point.heart_rate_bpm)}</gpxtpx:hr>")
        if point.cadence is not None:
            lines.append(f"            <gpxtpx:cad>{int(point.cadence)}</gpxtpx:cad>")
        lines.append("          </gpxtpx:TrackPointExtension>")
        lines.append("        </extensions>")
    lines.append("      </trkpt>")
    return "\n".join(lines)


def gpx_document(
    segments: Sequence[Sequence[RawTrackpoint | str]],
    *,
    name: str = "Morning Run",
    activity_type: Optional[str] = "running",
) -> bytes:
    """Build a GPX 1.1 document; raw strings inside a segment are inserted verbatim."""

    gpx_lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<gpx version="1.1" creator="tests"',
        '     xmlns="http://www.topografix.com/GPX/1/1"',
        '     xmlns:gpxtpx="http://www.garmin.com/xmlschemas/TrackPointExtension/v1">',
        "  <trk>",
        f"    <name>{name}</name>",
    ]
    if activity_type:
        gpx_lines.append(f"    <type>{activity_type}</type>")
    for segment in segments:
        gpx_lines.append("    <trkseg>")
        for item in segment:
            gpx_lines.append(item if isinstance(item, str) else trkpt_xml(item))
        gpx_lines.append("    </trkseg>")
    gpx_lines.extend(["  </trk>", "</gpx>"])
    return "\n".join(gpx_lines).encode("utf-8")


def gpx_bytes(points: Sequence[RawTrackpoint], **kwargs) -> bytes:
    return gpx_document([points], **kwargs)


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def hilly_track() -> list[RawTrackpoint]:
    """200 points, 30 m / 10 s, rolling elevation and a heart-rate reading every other point."""

    count = 200
    elevations = [100.0 + 0.5 * abs(20 - i % 40) for i in range(count)]
    heart_rates = [140.0 + (i % 7) if i % 2 == 0 else None for i in range(count)]
    return straight_track(count, elevations=elevations, heart_rates=heart_rates)


@pytest.fixture
def hilly_gpx(hilly_track) -> bytes:
    return gpx_bytes(hilly_track)
