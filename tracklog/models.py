"""Dataclasses shared by the pipeline stages.

Every stage hands the next one immutable values; nothing here is mutated after
construction.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

LatLon = Tuple[float, float]


@dataclass(slots=True, frozen=True)
class RawTrackpoint:
    """One timestamped position exactly as read from the document."""

    timestamp: datetime
    latitude: float
    longitude: float
    elevation_m: Optional[float] = None
    heart_rate_bpm: Optional[float] = None
    cadence: Optional[float] = None

    @property
    def latlon(self) -> LatLon:
        return (self.latitude, self.longitude)


@dataclass(slots=True, frozen=True)
class CleanTrackpoint:
    """Sanitized trackpoint annotated with cumulative distance and gap flag."""

    point: RawTrackpoint
    cumulative_distance_m: float
    gap_before: bool = False

    @property
    def timestamp(self) -> datetime:
        return self.point.timestamp

    @property
    def latlon(self) -> LatLon:
        return self.point.latlon


@dataclass(slots=True, frozen=True)
class ParsedTrackLog:
    """Parser output: ordered raw points plus document-level metadata."""

    points: List[RawTrackpoint]
    name: Optional[str] = None
    activity_type: Optional[str] = None


@dataclass(slots=True, frozen=True)
class GapSegment:
    """Suspected device dropout between two consecutive cleaned points."""

    start_index: int
    end_index: int
    elapsed_seconds: float
    distance_m: float


@dataclass(slots=True, frozen=True)
class DerivedSample:
    """One resampled row of the output streams."""

    cumulative_distance_m: float
    cumulative_elapsed_s: float
    pace_s_per_mile: Optional[float]
    altitude_m: Optional[float]
    heart_rate_bpm: Optional[float]
    latitude: float
    longitude: float
    cadence: Optional[float] = None


@dataclass(slots=True, frozen=True)
class TrackSummary:
    """Scalar summaries computed from the full cleaned sequence."""

    total_distance_m: float
    total_elevation_gain_m: float
    total_elevation_loss_m: float
    total_duration_s: float
    max_heart_rate_bpm: Optional[float]
    has_heart_rate: bool
    average_pace_s_per_mile: Optional[float]


@dataclass(slots=True, frozen=True)
class PipelineResult:
    """Everything produced for one successfully processed track log."""

    clean_point_count: int
    samples: Tuple[DerivedSample, ...]
    encoded_path: str
    total_distance_m: float
    total_elevation_gain_m: float
    total_duration_s: float
    max_heart_rate_bpm: Optional[float]
    has_heart_rate: bool
    total_elevation_loss_m: float = 0.0
    average_pace_s_per_mile: Optional[float] = None
    gaps: Tuple[GapSegment, ...] = ()
    raw_point_count: int = 0
    name: Optional[str] = None
    activity_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Tagged pipeline outcomes
# ---------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class Success:
    result: PipelineResult
    status: str = field(default="success", init=False)


@dataclass(slots=True, frozen=True)
class ParseFailure:
    reason: str
    status: str = field(default="error", init=False)


@dataclass(slots=True, frozen=True)
class DataQualityFailure:
    reason: str
    out_of_order: int
    total: int
    status: str = field(default="error", init=False)


@dataclass(slots=True, frozen=True)
class InsufficientData:
    """Fewer than two usable points; an expected skip, not an error."""

    point_count: int
    stage: str
    status: str = field(default="skipped", init=False)


@dataclass(slots=True, frozen=True)
class EmptyPath:
    status: str = field(default="error", init=False)


PipelineOutcome = Union[
    Success, ParseFailure, DataQualityFailure, InsufficientData, EmptyPath
]


__all__ = [
    "LatLon",
    "RawTrackpoint",
    "CleanTrackpoint",
    "ParsedTrackLog",
    "GapSegment",
    "DerivedSample",
    "TrackSummary",
    "PipelineResult",
    "Success",
    "ParseFailure",
    "DataQualityFailure",
    "InsufficientData",
    "EmptyPath",
    "PipelineOutcome",
]
