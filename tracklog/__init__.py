"""GPX track log ingestion: parse, clean, resample and encode activity tracks."""

from .main import main
from .models import (
    DataQualityFailure,
    DerivedSample,
    EmptyPath,
    GapSegment,
    InsufficientData,
    ParseFailure,
    PipelineResult,
    RawTrackpoint,
    Success,
)
from .errors import DataQualityError, ParseError, TrackLogError
from .pipeline import process_track_log

__all__ = [
    "main",
    "process_track_log",
    "DataQualityFailure",
    "DerivedSample",
    "EmptyPath",
    "GapSegment",
    "InsufficientData",
    "ParseFailure",
    "PipelineResult",
    "RawTrackpoint",
    "Success",
    "DataQualityError",
    "ParseError",
    "TrackLogError",
]
