"""Central configuration for the track log ingestion pipeline.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Every value can be overridden through an environment
variable of the same name (optionally via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _env_str(key: str, default: str, choices: set[str] | None = None) -> str:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if choices is not None and normalized not in choices:
        return default
    return normalized


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except Exception:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Resampling
# ---------------------------------------------------------------------------
# Number of output samples produced per file when the caller does not pass a
# budget. Files with fewer points produce one sample per point.
DEFAULT_SAMPLE_BUDGET = _env_int("DEFAULT_SAMPLE_BUDGET", 500)

# Centred moving average width (in windows) applied to per-window altitude.
# Set to 1 to report the raw altitude of each window's last point.
ELEVATION_SMOOTHING_WINDOWS = _env_int("ELEVATION_SMOOTHING_WINDOWS", 3)

# Per-step elevation change (metres) that must be exceeded before it counts
# towards total gain / loss. 0 counts every positive / negative delta.
ELEVATION_GAIN_THRESHOLD_M = _env_float("ELEVATION_GAIN_THRESHOLD_M", 0.0)


# ---------------------------------------------------------------------------
# Pace
# ---------------------------------------------------------------------------
# Windows that moved less than this (metres) report no pace at all.
PACE_MIN_DISTANCE_M = _env_float("PACE_MIN_DISTANCE_M", 0.16)

# Reported pace (seconds per mile) is clamped to this range.
PACE_MIN_SECONDS_PER_MILE = _env_float("PACE_MIN_SECONDS_PER_MILE", 180.0)
PACE_MAX_SECONDS_PER_MILE = _env_float("PACE_MAX_SECONDS_PER_MILE", 1800.0)


# ---------------------------------------------------------------------------
# Sanitizer
# ---------------------------------------------------------------------------
# Fraction of points that may need moving to restore timestamp order. A
# handful of stray points are re-sorted; anything above this fails the file.
SANITIZER_MAX_DISORDER_FRACTION = _env_float("SANITIZER_MAX_DISORDER_FRACTION", 0.05)


# ---------------------------------------------------------------------------
# Distance / gap detection
# ---------------------------------------------------------------------------
# A consecutive pair whose implied speed exceeds this (m/s) is treated as a
# GPS spike and adds no distance. Set to 0 to disable the filter.
DISTANCE_MAX_SEGMENT_SPEED_MPS = _env_float("DISTANCE_MAX_SEGMENT_SPEED_MPS", 100.0)

# Elapsed time (seconds) between consecutive points above which the pair is a
# gap candidate.
GAP_MIN_ELAPSED_SECONDS = _env_float("GAP_MIN_ELAPSED_SECONDS", 30.0)

# Plausible human-travel envelope (m/s). Gap candidates whose implied speed
# falls outside it are reported as gaps.
GAP_MIN_SPEED_MPS = _env_float("GAP_MIN_SPEED_MPS", 0.5)
GAP_MAX_SPEED_MPS = _env_float("GAP_MAX_SPEED_MPS", 15.0)


# ---------------------------------------------------------------------------
# Encoded path
# ---------------------------------------------------------------------------
# Coordinate sequence used for the encoded path: "resampled" keeps the string
# bounded by the sample budget, "raw" encodes every cleaned point.
PATH_SOURCE = _env_str("PATH_SOURCE", "resampled", {"resampled", "raw"})

# Decimal digits kept by the polyline encoding (5 matches the common scheme).
PATH_PRECISION = _env_int("PATH_PRECISION", 5)


# ---------------------------------------------------------------------------
# Batch driver
# ---------------------------------------------------------------------------
# Maximum files processed concurrently. Cost is CPU bound, so keep this a
# small multiple of the available cores.
BATCH_MAX_WORKERS = _env_int("BATCH_MAX_WORKERS", 2 * (os.cpu_count() or 1))

# Log a progress line every N completed files.
BATCH_PROGRESS_EVERY = _env_int("BATCH_PROGRESS_EVERY", 10)

# Skip files that cannot be read instead of reporting them as errors.
BATCH_SKIP_UNREADABLE = _env_bool("BATCH_SKIP_UNREADABLE", False)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
