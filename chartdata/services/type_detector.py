"""
Column Type Detector

Infers the semantic type of a column of raw values (date, number, boolean,
falling back to string) together with a confidence score, a subtype and a
display format. Each candidate type is scored independently as the share
of non-null values that look like that type; the best one wins.

Runs entirely locally and keeps no state; the pattern tables below are
immutable and shared by every call.
"""

import logging
import re
from typing import Any, List, NamedTuple, Optional, Pattern, Sequence

import numpy as np

from ..models.mapping import ColumnTypeInfo, DataType
from ..utils import (
    UNIX_MILLIS_MAX,
    UNIX_MILLIS_MIN,
    UNIX_SECONDS_MAX,
    UNIX_SECONDS_MIN,
    coerce_number,
    is_date_instance,
    is_null,
    is_number,
    normalize_datetime,
    parse_date,
    parse_float,
    strip_number_symbols,
)

logger = logging.getLogger("chartdata.detector")

SAMPLE_COUNT = 5


class FormatPattern(NamedTuple):
    pattern: Pattern[str]
    format: str
    subtype: str


# ─── Pattern tables (checked in order) ──────────────────────────────

DATE_PATTERNS: Sequence[FormatPattern] = (
    FormatPattern(re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}"), "ISO DateTime", "iso-datetime"),
    FormatPattern(re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}"), "YYYY-MM-DD HH:mm:ss", "datetime"),
    FormatPattern(re.compile(r"^\d{4}-\d{2}-\d{2}"), "YYYY-MM-DD", "iso-date"),
    FormatPattern(re.compile(r"^\d{1,2}/\d{1,2}/\d{4}"), "MM/DD/YYYY", "us-date"),
    FormatPattern(re.compile(r"^\d{1,2}-\d{1,2}-\d{4}"), "MM-DD-YYYY", "us-date-dash"),
    FormatPattern(re.compile(r"^\d{1,2}\.\d{1,2}\.\d{4}"), "DD.MM.YYYY", "eu-date"),
    FormatPattern(re.compile(r"^\d{1,2}/\d{1,2}/\d{4}"), "DD/MM/YYYY", "eu-date-slash"),
    FormatPattern(re.compile(r"^\d{4}年\d{1,2}月\d{1,2}日"), "YYYY年MM月DD日", "cn-date"),
    FormatPattern(re.compile(r"^\d{4}年\d{1,2}月"), "YYYY年MM月", "cn-month"),
    FormatPattern(re.compile(r"^\d{10}$"), "Unix Timestamp (seconds)", "unix-seconds"),
    FormatPattern(re.compile(r"^\d{13}$"), "Unix Timestamp (milliseconds)", "unix-milliseconds"),
    FormatPattern(re.compile(r"^\d{4}-Q[1-4]$"), "YYYY-Q#", "quarter"),
    FormatPattern(re.compile(r"^\d{4}-W\d{2}$"), "YYYY-W##", "week"),
    FormatPattern(
        re.compile(r"(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\s+\d{4}", re.IGNORECASE),
        "MMM YYYY",
        "month-name",
    ),
    FormatPattern(
        re.compile(
            r"(January|February|March|April|May|June|July|August|September|October|November|December)"
            r"\s+\d{1,2},?\s+\d{4}",
            re.IGNORECASE,
        ),
        "MMMM DD, YYYY",
        "full-month-name",
    ),
)

NUMBER_PATTERNS: Sequence[FormatPattern] = (
    FormatPattern(re.compile(r"^\$[\d,]+\.?\d*$"), "Currency ($)", "currency-usd"),
    FormatPattern(re.compile(r"^[\d,]+\.?\d*%$"), "Percentage (%)", "percentage"),
    FormatPattern(re.compile(r"^[\d,]+\.\d{2}$"), "Decimal (2 places)", "decimal-2"),
    FormatPattern(re.compile(r"^[\d,]+$"), "Integer with commas", "integer-comma"),
    FormatPattern(re.compile(r"^\d+$"), "Integer", "integer"),
    FormatPattern(re.compile(r"^\d*\.\d+$"), "Decimal", "decimal"),
    FormatPattern(re.compile(r"^-?\d+\.?\d*[eE][+-]?\d+$"), "Scientific notation", "scientific"),
)

BOOLEAN_PATTERNS: Sequence[Pattern[str]] = (
    re.compile(r"^(true|false)$", re.IGNORECASE),
    re.compile(r"^(yes|no)$", re.IGNORECASE),
    re.compile(r"^(是|否)$"),
    re.compile(r"^(y|n)$", re.IGNORECASE),
    re.compile(r"^(1|0)$"),
    re.compile(r"^(on|off)$", re.IGNORECASE),
    re.compile(r"^(enabled|disabled)$", re.IGNORECASE),
)


class _Candidate(NamedTuple):
    type: DataType
    confidence: float
    subtype: Optional[str] = None
    format: Optional[str] = None


# ─── Public API ─────────────────────────────────────────────────────


def detect_column_type(values: Sequence[Any]) -> ColumnTypeInfo:
    """
    Detect the semantic type of a column.

    Nulls (None / NaN) are excluded from scoring and reported as
    ``null_count``. Candidates are compared in the order date, number,
    boolean and only a strictly greater confidence displaces an earlier
    one. If nothing scores above zero the column is plain text.
    """
    values = list(values)
    non_null = [v for v in values if not is_null(v)]
    null_count = len(values) - len(non_null)

    if not non_null:
        return ColumnTypeInfo(type=DataType.STRING, confidence=0.5, samples=[], null_count=null_count)

    samples = non_null[:SAMPLE_COUNT]

    candidates = [
        _detect_date(non_null),
        _detect_number(non_null),
        _detect_boolean(non_null),
    ]
    best: Optional[_Candidate] = None
    for candidate in candidates:
        if candidate.confidence <= 0:
            continue
        if best is None or candidate.confidence > best.confidence:
            best = candidate

    if best is None:
        return ColumnTypeInfo(
            type=DataType.STRING,
            confidence=0.9,
            samples=samples,
            null_count=null_count,
            subtype="text",
        )

    logger.debug(
        "detect_column_type: %s (%.2f, subtype=%s) over %d values",
        best.type.value, best.confidence, best.subtype, len(non_null),
    )
    return ColumnTypeInfo(
        type=best.type,
        confidence=best.confidence,
        samples=samples,
        null_count=null_count,
        subtype=best.subtype,
        format=best.format,
    )


def detect_data_type(values: Sequence[Any]) -> DataType:
    """Shortcut returning only the detected type."""
    return detect_column_type(values).type


# ─── Candidate scoring ──────────────────────────────────────────────


def _detect_date(values: List[Any]) -> _Candidate:
    matches = 0
    fmt: Optional[str] = None
    subtype: Optional[str] = None

    for value in values:
        if is_date_instance(value):
            if normalize_datetime(value) is not None:
                matches += 1
            continue

        if isinstance(value, str):
            trimmed = value.strip()
            for entry in DATE_PATTERNS:
                if entry.pattern.search(trimmed) and parse_date(trimmed) is not None:
                    matches += 1
                    if fmt is None:
                        fmt, subtype = entry.format, entry.subtype
                    break
            continue

        if is_number(value):
            if UNIX_SECONDS_MIN <= value < UNIX_SECONDS_MAX:
                matches += 1
                if fmt is None:
                    fmt, subtype = "Unix Timestamp (seconds)", "unix-seconds"
            elif UNIX_MILLIS_MIN <= value < UNIX_MILLIS_MAX:
                matches += 1
                if fmt is None:
                    fmt, subtype = "Unix Timestamp (milliseconds)", "unix-milliseconds"

    return _Candidate(DataType.DATE, matches / len(values), subtype, fmt)


def _detect_number(values: List[Any]) -> _Candidate:
    matches = 0
    fmt: Optional[str] = None
    subtype: Optional[str] = None

    for value in values:
        if is_number(value):
            matches += 1
            if subtype is None:
                integral = isinstance(value, (int, np.integer)) or float(value).is_integer()
                subtype = "integer" if integral else "decimal"
            continue

        if not isinstance(value, str):
            continue

        trimmed = value.strip()
        matched = False
        for entry in NUMBER_PATTERNS:
            if entry.pattern.match(trimmed) and parse_float(strip_number_symbols(trimmed)) is not None:
                matched = True
                if fmt is None:
                    fmt, subtype = entry.format, entry.subtype
                break

        if not matched and coerce_number(trimmed) is not None:
            matched = True
            if subtype is None:
                subtype = "decimal" if "." in trimmed else "integer"

        if matched:
            matches += 1

    return _Candidate(DataType.NUMBER, matches / len(values), subtype, fmt)


def _detect_boolean(values: List[Any]) -> _Candidate:
    matches = 0
    for value in values:
        if isinstance(value, (bool, np.bool_)):
            matches += 1
        elif is_number(value) and value in (0, 1):
            matches += 1
        elif isinstance(value, str):
            trimmed = value.strip()
            if any(pattern.match(trimmed) for pattern in BOOLEAN_PATTERNS):
                matches += 1

    return _Candidate(DataType.BOOLEAN, matches / len(values), "boolean", None)
