from __future__ import annotations

import pytest

from tracklog.errors import DataQualityError
from tracklog.sanitizer import (
    count_out_of_order,
    has_valid_coordinates,
    sanitize_trackpoints,
    sanitize_with_report,
)

from conftest import make_point, straight_track


@pytest.mark.parametrize(
    "lat, lon, expected",
    [
        (40.0, -74.0, True),
        (0.0, 0.0, False),
        (0.0, 12.5, True),
        (90.0, 180.0, True),
        (91.0, 10.0, False),
        (10.0, -180.5, False),
        (float("nan"), 10.0, False),
        (10.0, float("inf"), False),
    ],
)
def test_has_valid_coordinates(lat: float, lon: float, expected: bool) -> None:
    assert has_valid_coordinates(make_point(0, lat, lon)) is expected


def test_null_island_and_out_of_range_points_are_dropped() -> None:
    points = [
        make_point(0, 40.0, -74.0),
        make_point(1, 0.0, 0.0),
        make_point(2, 95.0, -74.0),
        make_point(3, 40.001, -74.0),
    ]
    report = sanitize_with_report(points)
    assert [p.timestamp for p in report.points] == [points[0].timestamp, points[3].timestamp]
    assert report.dropped_invalid == 2
    assert report.dropped_duplicates == 0


def test_duplicate_timestamps_keep_first_occurrence() -> None:
    points = straight_track(4)
    duplicate = make_point(20, 41.0, -73.0)
    sequence = points[:3] + [duplicate] + points[3:]
    report = sanitize_with_report(sequence)

    assert len(report.points) == 4
    assert report.dropped_duplicates == 1
    # The point listed first for the shared timestamp survives.
    assert report.points[2].latitude == pytest.approx(points[2].latitude)


def test_output_timestamps_strictly_increase() -> None:
    points = straight_track(30)
    points[10], points[11] = points[11], points[10]
    cleaned = sanitize_trackpoints(points)
    stamps = [p.timestamp for p in cleaned]
    assert all(a < b for a, b in zip(stamps, stamps[1:]))
    assert len(cleaned) == 30


def test_count_out_of_order_counts_points_that_must_move() -> None:
    points = [make_point(s) for s in (0, 10, 5, 6, 20, 15)]
    # 0, 5, 6, 15 stay put; 10 and 20 have to move.
    assert count_out_of_order(points) == 2
    assert count_out_of_order(straight_track(5)) == 0
    assert count_out_of_order([]) == 0


def test_minor_disorder_is_sorted() -> None:
    points = straight_track(40)
    points[5], points[6] = points[6], points[5]
    report = sanitize_with_report(points)
    assert report.reordered == 1
    assert [p.timestamp for p in report.points] == sorted(p.timestamp for p in points)


def test_heavy_disorder_raises_data_quality_error() -> None:
    points = list(reversed(straight_track(20)))
    with pytest.raises(DataQualityError) as excinfo:
        sanitize_with_report(points)
    assert excinfo.value.out_of_order == 19
    assert excinfo.value.total == 20


def test_disorder_limit_is_configurable() -> None:
    points = straight_track(20)
    points[3], points[4] = points[4], points[3]
    points[10], points[11] = points[11], points[10]
    with pytest.raises(DataQualityError):
        sanitize_with_report(points)
    report = sanitize_with_report(points, max_disorder_fraction=0.2)
    assert report.reordered == 2


def test_empty_input_returns_empty() -> None:
    report = sanitize_with_report([])
    assert report.points == []
    assert report.reordered == 0


def test_single_stray_future_timestamp_counts_once() -> None:
    points = straight_track(1000)
    points[10] = make_point(86400, points[10].latitude, points[10].longitude)
    assert count_out_of_order(points) == 1

    report = sanitize_with_report(points)
    assert report.reordered == 1
    assert len(report.points) == 1000
    assert report.points[-1].timestamp == points[10].timestamp
