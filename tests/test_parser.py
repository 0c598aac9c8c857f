"""Tests for the GPX track log parser."""

from __future__ import annotations

from datetime import timezone
import gzip

import pytest

from tracklog.errors import ParseError
from tracklog.parser import parse_track_log

from conftest import START, gpx_bytes, gpx_document, make_point, straight_track


def test_parses_points_in_document_order() -> None:
    points = straight_track(5, elevations=[10.0, 11.0, 12.0, 13.0, 14.0])
    parsed = parse_track_log(gpx_bytes(points))

    assert len(parsed.points) == 5
    assert [p.timestamp for p in parsed.points] == [p.timestamp for p in points]
    assert parsed.points[0].latitude == pytest.approx(points[0].latitude)
    assert parsed.points[0].longitude == pytest.approx(-74.0)
    assert parsed.points[4].elevation_m == pytest.approx(14.0)
    assert parsed.name == "Morning Run"
    assert parsed.activity_type == "running"


def test_timestamps_are_utc_aware() -> None:
    parsed = parse_track_log(gpx_bytes(straight_track(2)))
    assert parsed.points[0].timestamp == START
    assert parsed.points[0].timestamp.tzinfo == timezone.utc


def test_missing_optional_fields_are_none() -> None:
    parsed = parse_track_log(gpx_bytes(straight_track(3)))
    for point in parsed.points:
        assert point.elevation_m is None
        assert point.heart_rate_bpm is None
        assert point.cadence is None


def test_extracts_heart_rate_and_cadence_from_extensions() -> None:
    points = [
        make_point(0, 40.0, -74.0, hr=141, cad=88),
        make_point(1, 40.0001, -74.0, hr=143),
    ]
    parsed = parse_track_log(gpx_bytes(points))
    assert parsed.points[0].heart_rate_bpm == 141
    assert parsed.points[0].cadence == 88
    assert parsed.points[1].heart_rate_bpm == 143
    assert parsed.points[1].cadence is None


def test_heart_rate_with_unprefixed_extension_tag() -> None:
    raw = (
        '<trkpt lat="40.0" lon="-74.0"><time>2024-05-01T07:30:00Z</time>'
        "<extensions><hr>150</hr></extensions></trkpt>"
    )
    parsed = parse_track_log(gpx_document([[raw]]))
    assert parsed.points[0].heart_rate_bpm == 150


def test_multiple_segments_are_concatenated() -> None:
    first = straight_track(3)
    second = [make_point(100 + i, 40.01 + i * 0.0001, -74.0) for i in range(2)]
    parsed = parse_track_log(gpx_document([first, second]))
    assert len(parsed.points) == 5
    assert parsed.points[3].latitude == pytest.approx(40.01)


def test_malformed_points_are_skipped_not_fatal() -> None:
    good = straight_track(2)
    bad_lat = '<trkpt lat="north" lon="-74.0"><time>2024-05-01T07:31:00Z</time></trkpt>'
    no_time = '<trkpt lat="40.1" lon="-74.0"><ele>5</ele></trkpt>'
    bad_time = '<trkpt lat="40.1" lon="-74.0"><time>yesterday</time></trkpt>'
    bad_ele = (
        '<trkpt lat="40.2" lon="-74.0"><ele>high</ele>'
        "<time>2024-05-01T07:32:00Z</time></trkpt>"
    )
    parsed = parse_track_log(gpx_document([[good[0], bad_lat, no_time, bad_time, bad_ele, good[1]]]))

    assert len(parsed.points) == 3
    # An unreadable elevation is absent, not zero, and does not drop the point.
    assert parsed.points[1].latitude == pytest.approx(40.2)
    assert parsed.points[1].elevation_m is None


def test_gzip_payload_is_decompressed() -> None:
    payload = gzip.compress(gpx_bytes(straight_track(4)))
    assert len(parse_track_log(payload).points) == 4


def test_gpx_10_namespace_is_supported() -> None:
    doc = (
        '<gpx version="1.0" xmlns="http://www.topografix.com/GPX/1/0"><trk><trkseg>'
        '<trkpt lat="40.0" lon="-74.0"><time>2024-05-01T07:30:00Z</time></trkpt>'
        "</trkseg></trk></gpx>"
    ).encode()
    assert len(parse_track_log(doc).points) == 1


@pytest.mark.parametrize(
    "payload, message",
    [
        (b"", "Empty"),
        (b"<gpx><trk>", "Malformed"),
        (b"not xml at all", "Malformed"),
        (b"\x1f\x8bgarbage", "gzip"),
        (b'<kml xmlns="http://www.opengis.net/kml/2.2"/>', "Unsupported document root"),
        (b'<gpx xmlns="http://example.com/gpx/9"><trk/></gpx>', "Unsupported GPX schema"),
        (b'<gpx xmlns="http://www.topografix.com/GPX/1/1"><wpt lat="1" lon="1"/></gpx>', "no <trk>"),
        (b'<gpx xmlns="http://www.topografix.com/GPX/1/1"><trk><trkseg/></trk></gpx>', "no trackpoints"),
    ],
)
def test_invalid_documents_raise_parse_error(payload: bytes, message: str) -> None:
    with pytest.raises(ParseError, match=message):
        parse_track_log(payload)


def test_all_points_malformed_returns_empty_list() -> None:
    raw = '<trkpt lat="40.0" lon="-74.0"></trkpt>'
    parsed = parse_track_log(gpx_document([[raw, raw]]))
    assert parsed.points == []


def test_entity_declarations_are_rejected() -> None:
    doc = (
        '<?xml version="1.0"?>'
        '<!DOCTYPE gpx [<!ENTITY a "aaaaaaaaaa"><!ENTITY b "&a;&a;&a;&a;&a;&a;&a;&a;&a;&a;">]>'
        '<gpx xmlns="http://www.topografix.com/GPX/1/1"><trk><name>&b;</name><trkseg>'
        '<trkpt lat="40.0" lon="-74.0"><time>2024-05-01T07:30:00Z</time></trkpt>'
        "</trkseg></trk></gpx>"
    ).encode()
    with pytest.raises(ParseError, match="Forbidden XML construct"):
        parse_track_log(doc)


@pytest.mark.parametrize(
    "stamp, micros",
    [
        ("2024-05-01T07:30:00.5Z", 500000),
        ("2024-05-01T07:30:00.123Z", 123000),
        ("2024-05-01T07:30:00.1234567Z", 123456),
    ],
)
def test_fractional_seconds_of_any_length(stamp: str, micros: int) -> None:
    raw = f'<trkpt lat="40.0" lon="-74.0"><time>{stamp}</time></trkpt>'
    parsed = parse_track_log(gpx_document([[raw]]))
    assert parsed.points[0].timestamp.microsecond == micros
