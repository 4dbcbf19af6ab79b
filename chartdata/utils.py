"""
Shared utility functions for the chartdata package.

Consolidates helpers used by the detector, the suggesters and every adapter:
  - sanitize_for_json: numpy/pandas/datetime/dataclass -> native JSON types
  - is_null / is_number: value classification that treats NaN as null and
    booleans as non-numeric
  - parse_float / coerce_number: lenient numeric parsing
  - parse_date / to_millis: date parsing into naive UTC datetimes
"""

import enum
import math
import re
import warnings
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

import numpy as np
import pandas as pd


EPOCH = datetime(1970, 1, 1)

# Unix timestamps between 2000-01-01 and 2100-01-01
UNIX_SECONDS_MIN = 946_684_800
UNIX_SECONDS_MAX = 4_102_444_800
UNIX_MILLIS_MIN = UNIX_SECONDS_MIN * 1000
UNIX_MILLIS_MAX = UNIX_SECONDS_MAX * 1000

_LEADING_FLOAT = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_NUMBER_STRIP = re.compile(r"[,$%]")
_CN_DATE = re.compile(r"(\d{4})年(\d{1,2})月(\d{1,2})日")
_CN_MONTH = re.compile(r"^(\d{4})年(\d{1,2})月$")
_QUARTER = re.compile(r"^(\d{4})-Q([1-4])$")
_ISO_WEEK = re.compile(r"^(\d{4})-W(\d{2})$")
_HAS_DIGIT = re.compile(r"\d")
_UNIX_SECONDS_TEXT = re.compile(r"^\d{10}$")
_UNIX_MILLIS_TEXT = re.compile(r"^\d{13}$")


# ─── Value classification ───────────────────────────────────────────

def is_null(value: Any) -> bool:
    """True for None, NaN and NaT."""
    if value is None or value is pd.NaT:
        return True
    if isinstance(value, (float, np.floating)):
        return math.isnan(value)
    return False


def is_number(value: Any) -> bool:
    """True for real numbers that are not booleans."""
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))


def is_date_instance(value: Any) -> bool:
    if value is pd.NaT:
        return False
    return isinstance(value, (datetime, date, np.datetime64))


# ─── Numbers ────────────────────────────────────────────────────────

def parse_float(text: str) -> Optional[float]:
    """Parse the leading numeric prefix of ``text`` ("12px" -> 12.0)."""
    stripped = text.strip()
    match = _LEADING_FLOAT.match(stripped)
    if match:
        return float(match.group(0))
    if stripped.startswith(("Infinity", "+Infinity")):
        return math.inf
    if stripped.startswith("-Infinity"):
        return -math.inf
    return None


def strip_number_symbols(text: str) -> str:
    """Remove thousands separators, dollar and percent signs."""
    return _NUMBER_STRIP.sub("", text)


def coerce_number(value: Any) -> Optional[float]:
    """
    Strict whole-value numeric conversion.

    Booleans count as 1/0 and dates as epoch milliseconds. Strings must be
    entirely numeric (surrounding whitespace allowed); blank strings and
    "nan"/"inf" spellings are rejected.
    """
    if is_null(value):
        return None
    if isinstance(value, (bool, np.bool_)):
        return 1.0 if value else 0.0
    if is_number(value):
        return float(value)
    if is_date_instance(value):
        parsed = normalize_datetime(value)
        return to_millis(parsed) if parsed is not None else None
    if isinstance(value, str):
        text = value.strip()
        if not text or "_" in text:
            return None
        if text.lstrip("+-").lower() in ("nan", "inf", "infinity"):
            return None
        try:
            return float(text)
        except ValueError:
            return None
    return None


# ─── Dates ──────────────────────────────────────────────────────────

def normalize_datetime(value: Any) -> Optional[datetime]:
    """Convert datetime-like values to a naive UTC ``datetime``."""
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, np.datetime64):
        value = pd.Timestamp(value)
        if value is pd.NaT:
            return None
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return None


def from_unix_seconds(seconds: float) -> datetime:
    return EPOCH + timedelta(seconds=float(seconds))


def from_unix_millis(millis: float) -> datetime:
    return EPOCH + timedelta(milliseconds=float(millis))


def to_millis(value: datetime) -> float:
    """Milliseconds since the epoch for a naive UTC datetime."""
    return (value - EPOCH) / timedelta(milliseconds=1)


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parse a value into a naive UTC datetime, or None.

    Numbers are read as epoch milliseconds. Strings go through the
    CN / quarter / ISO-week special forms first, then pandas.
    """
    if is_null(value):
        return None
    if is_date_instance(value):
        return normalize_datetime(value)
    if isinstance(value, (bool, np.bool_)):
        return None
    if is_number(value):
        try:
            return from_unix_millis(value)
        except (OverflowError, ValueError):
            return None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text or not _HAS_DIGIT.search(text):
        return None

    try:
        if _UNIX_SECONDS_TEXT.match(text):
            return from_unix_seconds(int(text))
        if _UNIX_MILLIS_TEXT.match(text):
            return from_unix_millis(int(text))
        match = _CN_DATE.search(text)
        if match:
            return datetime(int(match.group(1)), int(match.group(2)), int(match.group(3)))
        match = _CN_MONTH.match(text)
        if match:
            return datetime(int(match.group(1)), int(match.group(2)), 1)
        match = _QUARTER.match(text)
        if match:
            return datetime(int(match.group(1)), 3 * (int(match.group(2)) - 1) + 1, 1)
        match = _ISO_WEEK.match(text)
        if match:
            return datetime.fromisocalendar(int(match.group(1)), int(match.group(2)), 1)
    except ValueError:
        return None

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    if parsed is None or pd.isna(parsed):
        return None
    return normalize_datetime(parsed)


def parse_time_value(value: Any) -> Optional[datetime]:
    """
    Parse a time-axis value.

    Unlike ``parse_date``, numbers are only accepted inside the 2000-2100
    unix range, read as seconds or milliseconds depending on magnitude.
    """
    if is_null(value):
        return None
    if is_date_instance(value):
        return normalize_datetime(value)
    if is_number(value):
        if UNIX_SECONDS_MIN < value < UNIX_SECONDS_MAX:
            return from_unix_seconds(value)
        if UNIX_MILLIS_MIN < value < UNIX_MILLIS_MAX:
            return from_unix_millis(value)
        return None
    if isinstance(value, str):
        return parse_date(value)
    return None


# ─── JSON serialization ────────────────────────────────────────────

def sanitize_for_json(obj: Any) -> Any:
    """Recursively convert numpy/pandas/datetime types to native Python for JSON."""
    if hasattr(obj, "to_dict") and not isinstance(obj, (pd.DataFrame, pd.Series)):
        return sanitize_for_json(obj.to_dict())
    if isinstance(obj, dict):
        return {str(k): sanitize_for_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [sanitize_for_json(item) for item in obj]
    if isinstance(obj, enum.Enum):
        return obj.value
    if obj is pd.NaT:
        return None
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, (np.integer,)):
        return int(obj)
    if isinstance(obj, (np.floating,)):
        val = float(obj)
        return None if (math.isnan(val) or math.isinf(val)) else val
    if isinstance(obj, np.ndarray):
        return sanitize_for_json(obj.tolist())
    if isinstance(obj, float) and (math.isnan(obj) or math.isinf(obj)):
        return None
    return obj
