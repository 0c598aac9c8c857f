"""GPX track log parser.

Pure structural transform: document bytes in, ordered raw trackpoints out. No
geospatial computation happens here.

Tolerated input quirks:
- missing ``<ele>`` or heart-rate extensions (fields stay ``None``)
- several ``<trk>``/``<trkseg>`` blocks (points are concatenated in document
  order; segment boundaries are not treated as gaps)
- malformed individual points (the point is skipped, not the file)
- gzip-compressed payloads (``.gpx.gz`` exports)

Documents are parsed with ``defusedxml``; entity declarations and external
references are rejected as a ``ParseError``.
"""

from __future__ import annotations

import datetime as _dt
import gzip
import logging
import math
import re
import zlib
from typing import Iterable, Optional

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as ET

from .errors import ParseError
from .models import ParsedTrackLog, RawTrackpoint

_LOG = logging.getLogger(__name__)

GPX_NAMESPACES = (
    "http://www.topografix.com/GPX/1/1",
    "http://www.topografix.com/GPX/1/0",
    "",
)
_GZIP_MAGIC = b"\x1f\x8b"
_HEART_RATE_TAGS = {"hr", "heartrate", "heart_rate"}
_CADENCE_TAGS = {"cad", "cadence"}
_FRACTION_RE = re.compile(r"\.(\d+)")


def _split_tag(tag: object) -> tuple[str, str]:
    """Return ``(namespace, local_name)`` for an ElementTree tag."""

    if not isinstance(tag, str):
        # Comments and processing instructions carry callables as tags.
        return "", ""
    if tag.startswith("{"):
        namespace, _, local = tag[1:].partition("}")
        return namespace, local
    return "", tag


def _qn(namespace: str, tag: str) -> str:
    return f"{{{namespace}}}{tag}" if namespace else tag


def _parse_gpx_time(text: Optional[str]) -> Optional[_dt.datetime]:
    """
    Parse an ISO-8601 timestamp from a ``<time>`` node as tz-aware UTC.

    Expected examples:
      - "2026-01-02T21:14:44Z"
      - "2026-01-02T21:14:44.123Z"
      - "2026-01-02T21:14:44+00:00"
    """
    if not text:
        return None
    s = text.strip()
    if not s:
        return None
    if s.endswith("Z") or s.endswith("z"):
        s = s[:-1] + "+00:00"
    # fromisoformat only takes 3 or 6 fraction digits before Python 3.11.
    s = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), s, count=1)
    try:
        parsed = _dt.datetime.fromisoformat(s)
    except ValueError:
        return None
    # Naive times are assumed UTC, as most devices write UTC anyway.
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=_dt.timezone.utc)
    return parsed.astimezone(_dt.timezone.utc)


def _parse_float(text: Optional[str]) -> Optional[float]:
    if text is None:
        return None
    try:
        value = float(text.strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _child_text(element: ET.Element, namespace: str, tag: str) -> Optional[str]:
    child = element.find(_qn(namespace, tag))
    if child is None or child.text is None:
        return None
    return child.text


def _extension_values(element: ET.Element, namespace: str) -> tuple[Optional[float], Optional[float]]:
    """Return ``(heart_rate, cadence)`` from a trackpoint's extensions block.

    Vendors nest these under different prefixes (``gpxtpx:hr``, ``ns3:hr``,
    plain ``hr``), so matching is done on the local tag name only.
    """
    extensions = element.find(_qn(namespace, "extensions"))
    if extensions is None:
        return None, None
    heart_rate: Optional[float] = None
    cadence: Optional[float] = None
    for child in extensions.iter():
        _, local = _split_tag(child.tag)
        name = local.lower()
        if heart_rate is None and name in _HEART_RATE_TAGS:
            value = _parse_float(child.text)
            if value is not None and value > 0:
                heart_rate = value
        elif cadence is None and name in _CADENCE_TAGS:
            value = _parse_float(child.text)
            if value is not None and value >= 0:
                cadence = value
    return heart_rate, cadence


def _to_raw_trackpoint(element: ET.Element, namespace: str) -> Optional[RawTrackpoint]:
    """Convert a ``<trkpt>`` element, or return ``None`` when a required field is unusable."""

    latitude = _parse_float(element.get("lat"))
    longitude = _parse_float(element.get("lon"))
    if latitude is None or longitude is None:
        return None
    timestamp = _parse_gpx_time(_child_text(element, namespace, "time"))
    if timestamp is None:
        return None
    heart_rate, cadence = _extension_values(element, namespace)
    return RawTrackpoint(
        timestamp=timestamp,
        latitude=latitude,
        longitude=longitude,
        elevation_m=_parse_float(_child_text(element, namespace, "ele")),
        heart_rate_bpm=heart_rate,
        cadence=cadence,
    )


def _decode_payload(payload: bytes) -> bytes:
    if payload[:2] == _GZIP_MAGIC:
        try:
            return gzip.decompress(payload)
        except (OSError, EOFError, zlib.error) as exc:
            raise ParseError(f"Corrupt gzip payload: {exc}") from exc
    return payload


def _parse_root(payload: bytes) -> ET.Element:
    data = _decode_payload(payload)
    if not data.strip():
        raise ParseError("Empty document")
    try:
        return ET.fromstring(data)
    except ET.ParseError as exc:
        raise ParseError(f"Malformed XML: {exc}") from exc
    except DefusedXmlException as exc:
        raise ParseError(f"Forbidden XML construct: {exc!r}") from exc


def _iter_trackpoints(root: ET.Element, namespace: str) -> Iterable[ET.Element]:
    for track in root.iter(_qn(namespace, "trk")):
        for segment in track.iter(_qn(namespace, "trkseg")):
            yield from segment.iter(_qn(namespace, "trkpt"))


def parse_track_log(payload: bytes) -> ParsedTrackLog:
    """Parse GPX document bytes into ordered raw trackpoints.

    Raises:
        ParseError: malformed document, unsupported schema, or no track data.
    """

    root = _parse_root(payload)
    namespace, local = _split_tag(root.tag)
    if local != "gpx":
        raise ParseError(f"Unsupported document root <{local or root.tag}>")
    if namespace not in GPX_NAMESPACES:
        raise ParseError(f"Unsupported GPX schema namespace {namespace!r}")

    first_track = root.find(_qn(namespace, "trk"))
    if first_track is None:
        raise ParseError("Document contains no <trk> element")

    points: list[RawTrackpoint] = []
    seen = 0
    skipped = 0
    for element in _iter_trackpoints(root, namespace):
        seen += 1
        point = _to_raw_trackpoint(element, namespace)
        if point is None:
            skipped += 1
            continue
        points.append(point)

    if seen == 0:
        raise ParseError("Document contains no trackpoints")
    if skipped:
        _LOG.debug("Skipped %d of %d malformed trackpoints", skipped, seen)

    name = _child_text(first_track, namespace, "name")
    activity_type = _child_text(first_track, namespace, "type")
    return ParsedTrackLog(
        points=points,
        name=name.strip() if name else None,
        activity_type=activity_type.strip() if activity_type else None,
    )


__all__ = ["parse_track_log", "GPX_NAMESPACES"]
