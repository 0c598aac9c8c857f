"""General utility helpers shared across modules."""

from __future__ import annotations

import json
import math
from datetime import date, datetime
from typing import Any


def format_duration(seconds: float) -> str:
    """Format seconds as ``H:MM:SS`` (or ``M:SS`` under an hour)."""

    total = int(round(seconds))
    hours, rest = divmod(total, 3600)
    mins, sec = divmod(rest, 60)
    if hours:
        return f"{hours}:{mins:02d}:{sec:02d}"
    return f"{mins}:{sec:02d}"


def format_pace(seconds_per_mile: float | None) -> str:
    """Format a pace as ``M:SS/mi``; missing or non-positive values render ``--``."""

    if seconds_per_mile is None or not math.isfinite(seconds_per_mile):
        return "--"
    if seconds_per_mile <= 0:
        return "--"
    total = int(round(seconds_per_mile))
    mins, sec = divmod(total, 60)
    return f"{mins}:{sec:02d}/mi"


def _normalise_value(value: Any) -> Any:
    """Convert objects to JSON-friendly representations."""

    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="ignore")
    if isinstance(value, set):
        return sorted(_normalise_value(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [_normalise_value(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _normalise_value(val) for key, val in value.items()}
    return value


def json_dumps_sorted(value: Any, *, indent: int | None = None) -> str:
    """Return canonical JSON (sorted keys, no NaN)."""

    normalised = _normalise_value(value)
    if indent is None:
        return json.dumps(normalised, sort_keys=True, separators=(",", ":"))
    return json.dumps(normalised, sort_keys=True, indent=indent)
