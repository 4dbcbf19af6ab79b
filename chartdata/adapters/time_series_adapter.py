"""
Time Series Adapter

Handles temporal data: recognises time fields by name or value format,
parses time values across many formats, sorts chronologically and checks
the regularity of the time axis.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ..core.config import settings
from ..models.mapping import (
    ChartDataPoint,
    DataType,
    FieldSuggestion,
    MappingConfig,
    MappingRole,
    RowErrorPolicy,
    ValidationResult,
)
from ..utils import (
    UNIX_MILLIS_MAX,
    UNIX_MILLIS_MIN,
    UNIX_SECONDS_MAX,
    UNIX_SECONDS_MIN,
    is_date_instance,
    is_null,
    is_number,
    parse_time_value,
    to_millis,
)
from .base import BaseAdapter

TIME_FORMATS = (
    re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}"),
    re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}"),
    re.compile(r"^\d{4}-\d{2}-\d{2}"),
    re.compile(r"^\d{1,2}/\d{1,2}/\d{4}"),
    re.compile(r"^\d{1,2}-\d{1,2}-\d{4}"),
    re.compile(r"^\d{1,2}\.\d{1,2}\.\d{4}"),
    re.compile(r"^\d{4}年\d{1,2}月\d{1,2}日"),
    re.compile(r"^\d{10}$"),
    re.compile(r"^\d{13}$"),
)

TIME_FIELD_NAME = re.compile(r"time|date|timestamp|created|updated|year|month|day")

TIME_VALUE_RATIO = 0.7
MIN_PARSE_RATE = 0.8
MAX_GAPS_CHECKED = 10
IRREGULAR_RATIO = 0.3
GAP_TOLERANCE = 0.5
MAX_INTERVAL_SAMPLES = 10
HIGH_CONFIDENCE = 0.85
TIME_SUGGESTION_BOOST = 0.2
MAX_CONFIDENCE = 0.95

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS
WEEK_MS = 7 * DAY_MS
MONTH_MS = 30 * DAY_MS
YEAR_MS = 365 * DAY_MS


class TimeSeriesAdapter(BaseAdapter):
    """Adapter for records keyed by a time axis."""

    kind = "time-series"

    def __init__(self, row_error_policy: Optional[RowErrorPolicy] = None):
        super().__init__(row_error_policy)
        self.field_sample_size = settings.FIELD_SAMPLE_SIZE

    def transform(self, records: Sequence[Dict[str, Any]], config: MappingConfig) -> List[ChartDataPoint]:
        ordered = self.sort_by_time_field(records, config.get("x"))
        points = self._extract_points(
            ordered, config,
            clean_x=self.parse_time_value,
            clean_extra=self.clean_time_value,
        )
        self.logger.info("transform: %d points from %d records", len(points), len(records))
        return points

    def validate(self, records: Any) -> ValidationResult:
        base = super().validate(records)
        if not base.is_valid or len(records) == 0:
            return base

        errors = list(base.errors)
        warnings = list(base.warnings)

        time_fields = self.find_time_fields(records)
        if not time_fields:
            errors.append("No time field found; a time series needs at least one time field")
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings, confidence=0.0)

        for field in time_fields:
            values = [row.get(field) for row in records if isinstance(row, dict) and not is_null(row.get(field))]
            if not values:
                warnings.append(f'Time field "{field}" has no values')
                continue

            times = [t for t in (self.parse_time_value(v) for v in values) if t is not None]
            parse_rate = len(times) / len(values)
            if parse_rate < MIN_PARSE_RATE:
                warnings.append(
                    f'Time field "{field}": {round((1 - parse_rate) * 100)}% of values could not be parsed as times'
                )

            if len(times) > 1 and times != sorted(times):
                warnings.append(f'Time field "{field}" is not in chronological order')

            if len(times) > 2 and self._has_irregular_gaps(times):
                warnings.append(f'Time field "{field}" has irregular intervals, which may distort the chart')

        self.logger.debug("validate: time fields %s", time_fields)
        return ValidationResult(
            is_valid=True,
            errors=errors,
            warnings=warnings,
            confidence=min(base.confidence, HIGH_CONFIDENCE),
        )

    def suggest(self, records: Sequence[Dict[str, Any]]) -> List[FieldSuggestion]:
        """Base suggestions with date fields proposed for x ranked higher."""
        suggestions = super().suggest(records)
        for suggestion in suggestions:
            if suggestion.type == DataType.DATE and suggestion.suggested_role == MappingRole.X:
                suggestion.confidence = min(MAX_CONFIDENCE, suggestion.confidence + TIME_SUGGESTION_BOOST)
        suggestions.sort(key=lambda s: s.confidence, reverse=True)
        return suggestions

    # ─── Time values ────────────────────────────────────────────────

    @staticmethod
    def is_time_value(value: Any) -> bool:
        if is_date_instance(value):
            return True
        if is_number(value):
            return (UNIX_SECONDS_MIN < value < UNIX_SECONDS_MAX) or (UNIX_MILLIS_MIN < value < UNIX_MILLIS_MAX)
        if isinstance(value, str):
            return any(pattern.search(value) for pattern in TIME_FORMATS)
        return False

    @staticmethod
    def parse_time_value(value: Any) -> Optional[datetime]:
        return parse_time_value(value)

    @classmethod
    def clean_time_value(cls, value: Any) -> Any:
        """Time first, then the generic cleaning."""
        if is_null(value):
            return None
        parsed = cls.parse_time_value(value)
        if parsed is not None:
            return parsed
        return cls.clean_value(value)

    def find_time_fields(self, records: Sequence[Dict[str, Any]]) -> List[str]:
        """Top-level fields whose name or values look temporal."""
        if not records or not isinstance(records[0], dict):
            return []

        sample = records[:self.field_sample_size]
        fields = []
        for field in records[0].keys():
            values = [row.get(field) for row in sample if isinstance(row, dict) and not is_null(row.get(field))]
            if not values:
                continue

            name_match = bool(TIME_FIELD_NAME.search(str(field).lower()))
            time_rate = sum(1 for v in values if self.is_time_value(v)) / len(values)
            if name_match or time_rate > TIME_VALUE_RATIO:
                fields.append(field)
        return fields

    def sort_by_time_field(self, records: Sequence[Any], time_field: Any) -> List[Any]:
        """
        Order records by parsed time, ascending and stable. Records whose
        time cannot be parsed keep their original positions; the parsable
        ones are sorted into the remaining slots.
        """
        keyed = []
        for index, row in enumerate(records):
            try:
                parsed = self.parse_time_value(self.resolve_field_path(row, time_field))
            except Exception as e:
                self._report_row_error(index, e)
                parsed = None
            keyed.append(parsed)

        slots = [i for i, t in enumerate(keyed) if t is not None]
        ordered_slots = sorted(slots, key=lambda i: keyed[i])

        result = list(records)
        for slot, source in zip(slots, ordered_slots):
            result[slot] = records[source]
        return result

    def get_time_interval(self, records: Sequence[Dict[str, Any]], time_field: Any) -> str:
        """Name the typical spacing of the time axis: minute, hour, day, week, month or year."""
        times = sorted(
            t for t in (self.parse_time_value(self.resolve_field_path(row, time_field)) for row in records)
            if t is not None
        )
        if len(times) < 2:
            return "unknown"

        limit = min(len(times), MAX_INTERVAL_SAMPLES)
        gaps = [to_millis(times[i]) - to_millis(times[i - 1]) for i in range(1, limit)]
        average = sum(gaps) / len(gaps)

        if average < HOUR_MS:
            return "minute"
        if average < DAY_MS:
            return "hour"
        if average < WEEK_MS:
            return "day"
        if average < MONTH_MS:
            return "week"
        if average < YEAR_MS:
            return "month"
        return "year"

    @staticmethod
    def _has_irregular_gaps(times: List[datetime]) -> bool:
        gaps = [
            to_millis(times[i]) - to_millis(times[i - 1])
            for i in range(1, min(len(times), MAX_GAPS_CHECKED + 1))
        ]
        average = sum(gaps) / len(gaps)
        irregular = [g for g in gaps if abs(g - average) > abs(average) * GAP_TOLERANCE]
        return len(irregular) > len(gaps) * IRREGULAR_RATIO
