"""Central error types used across the pipeline stages."""

from __future__ import annotations


class TrackLogError(RuntimeError):
    """Base error for track log processing failures."""


class ParseError(TrackLogError):
    """Raised when a document is malformed, unsupported, or has no track data."""


class DataQualityError(TrackLogError):
    """Raised when trackpoint timestamps are systemically out of order."""

    def __init__(self, message: str, *, out_of_order: int, total: int) -> None:
        super().__init__(message)
        self.out_of_order = out_of_order
        self.total = total


__all__ = [
    "TrackLogError",
    "ParseError",
    "DataQualityError",
]
