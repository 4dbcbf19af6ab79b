"""
Data Adapter Framework

Defines the capability interface every adapter implements
(validate / transform / suggest) and the helpers they share: field-path
resolution, value cleaning, point extraction and the row-error policy.

Adapters hold no per-call state, so one instance can serve concurrent
callers.
"""

import logging
import math
import re
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from ..core.config import settings
from ..models.mapping import (
    ChartDataPoint,
    ChartSuggestion,
    FieldAccessor,
    FieldSuggestion,
    MappingConfig,
    RowErrorPolicy,
    ValidationResult,
)
from ..services.chart_suggester import suggest_chart_type
from ..services.field_paths import get_nested_value
from ..services.mapping_suggester import suggest_best_mapping, suggest_mapping
from ..utils import coerce_number, is_null, is_number, parse_date, parse_float, strip_number_symbols

logger = logging.getLogger("chartdata.adapters")

MIN_CONFIDENCE = 0.1
_NUMERIC_LOOKING = re.compile(r"^[0-9.,%-]+$")

Cleaner = Callable[[Any], Any]


class BaseAdapter(ABC):
    """
    Base class for all data adapters.

    Subclasses implement ``transform`` and usually extend ``validate``.
    Rows that cannot become a point are dropped and reported according to
    ``row_error_policy``; ``transform`` and ``validate`` never raise for
    bad data.
    """

    kind: str = "base"
    reserved_config_keys: Sequence[str] = ()

    def __init__(self, row_error_policy: Union[RowErrorPolicy, str, None] = None):
        self.row_error_policy = RowErrorPolicy(row_error_policy or settings.ROW_ERROR_POLICY)
        self.sample_size = settings.VALIDATION_SAMPLE_SIZE
        self.logger = logging.getLogger(f"chartdata.adapters.{self.kind}")

    # ─── Capability interface ───────────────────────────────────────

    @abstractmethod
    def transform(self, records: Sequence[Dict[str, Any]], config: MappingConfig) -> List[ChartDataPoint]:
        """Turn raw records into chart points using a role -> field mapping."""

    def validate(self, records: Any) -> ValidationResult:
        """
        Structural checks shared by every adapter.

        Non-list input and a key-less first record are errors. Key-set
        differences against the first record, within the first rows, are
        warnings that lower the confidence.
        """
        if not isinstance(records, (list, tuple)):
            return ValidationResult(is_valid=False, errors=["Data must be a list of records"], confidence=0.0)

        if len(records) == 0:
            return ValidationResult(is_valid=True, warnings=["Data list is empty"], confidence=0.5)

        first = records[0]
        first_keys = list(first.keys()) if isinstance(first, dict) else []
        if not first_keys:
            return ValidationResult(is_valid=False, errors=["Records must not be empty objects"], confidence=0.0)

        warnings: List[str] = []
        inconsistent_rows = 0
        sample_count = min(len(records), self.sample_size)
        for i in range(1, sample_count):
            row = records[i]
            keys = list(row.keys()) if isinstance(row, dict) else []
            missing = [k for k in first_keys if k not in keys]
            extra = [k for k in keys if k not in first_keys]
            if missing:
                warnings.append(f"Row {i + 1} is missing fields: {', '.join(map(str, missing))}")
                inconsistent_rows += 1
            if extra:
                warnings.append(f"Row {i + 1} has extra fields: {', '.join(map(str, extra))}")
                inconsistent_rows += 1

        confidence = 1.0
        if inconsistent_rows > 0:
            confidence = max(MIN_CONFIDENCE, 1 - inconsistent_rows / sample_count)

        return ValidationResult(is_valid=True, warnings=warnings, confidence=confidence)

    def suggest(self, records: Sequence[Dict[str, Any]]) -> List[FieldSuggestion]:
        return suggest_mapping(records)

    def suggest_charts(self, records: Sequence[Dict[str, Any]]) -> List[ChartSuggestion]:
        return suggest_chart_type(records)

    def suggest_best_mapping(self, records: Sequence[Dict[str, Any]]) -> Optional[Dict[str, str]]:
        return suggest_best_mapping(records, self.sample_size)

    # ─── Shared helpers ─────────────────────────────────────────────

    @staticmethod
    def resolve_field_path(record: Any, path: Optional[FieldAccessor]) -> Any:
        """Resolve a dotted path or accessor function against a record."""
        if path is None:
            return None
        if callable(path):
            return path(record)
        if isinstance(path, str):
            return get_nested_value(record, path)
        return None

    @staticmethod
    def clean_number(value: Any) -> float:
        """
        Coerce to float. Strings lose ``,$%`` and are parsed leniently;
        anything unparsable becomes 0. NaN numbers pass through.
        """
        if isinstance(value, bool):
            return 1.0 if value else 0.0
        if is_number(value):
            return float(value)
        if isinstance(value, str):
            parsed = parse_float(strip_number_symbols(value))
            return 0.0 if parsed is None else parsed
        return 0.0

    @staticmethod
    def clean_date(value: Any) -> Optional[datetime]:
        return parse_date(value)

    @classmethod
    def clean_value(cls, value: Any) -> Any:
        """
        Trim strings and turn numeric-looking or date-like text into numbers
        or dates. Numeric-looking text that is not a plain number ("2024-01-15")
        is tried as a date before falling back to the lenient number parse.
        """
        if is_null(value):
            return None
        if isinstance(value, str):
            trimmed = value.strip()
            if _NUMERIC_LOOKING.match(trimmed):
                number = coerce_number(strip_number_symbols(trimmed))
                if number is not None:
                    return number
                return cls.clean_date(trimmed) or cls.clean_number(trimmed)
            parsed = cls.clean_date(trimmed)
            if parsed is not None:
                return parsed
            return trimmed
        return value

    # ─── Point extraction ───────────────────────────────────────────

    def _extract_points(
        self,
        records: Iterable[Any],
        config: MappingConfig,
        clean_x: Optional[Cleaner] = None,
        clean_extra: Optional[Cleaner] = None,
    ) -> List[ChartDataPoint]:
        """
        Build points from records. x goes through ``clean_x`` (default
        ``clean_value``), y is forced numeric, other mapped roles go
        through ``clean_extra``. Rows with a missing x or y are dropped.
        """
        clean_x = clean_x or self.clean_value
        clean_extra = clean_extra or self.clean_value
        extra_roles = [
            (role, accessor) for role, accessor in config.items()
            if role not in ("x", "y")
            and role not in self.reserved_config_keys
            and (isinstance(accessor, str) or callable(accessor))
        ]

        points: List[ChartDataPoint] = []
        skipped = 0
        total = 0
        for index, row in enumerate(records):
            total += 1
            try:
                x = self.resolve_field_path(row, config.get("x"))
                y = self.resolve_field_path(row, config.get("y"))
                if is_null(x) or is_null(y):
                    skipped += 1
                    continue

                cleaned_x = clean_x(x)
                cleaned_y = self.clean_number(y)
                if cleaned_x is None or math.isnan(cleaned_y):
                    skipped += 1
                    continue

                point = ChartDataPoint(x=cleaned_x, y=cleaned_y, original_data=row, index=index)
                for role, accessor in extra_roles:
                    value = self.resolve_field_path(row, accessor)
                    if is_null(value):
                        continue
                    cleaned = clean_extra(value)
                    if role == "color":
                        point.color = cleaned
                    elif role == "size":
                        point.size = cleaned
                    else:
                        point.extra[role] = cleaned

                points.append(point)
            except Exception as e:
                skipped += 1
                self._report_row_error(index, e)

        if skipped:
            self._report_skipped(skipped, total)
        return points

    def _report_row_error(self, index: int, error: Exception) -> None:
        if self.row_error_policy == RowErrorPolicy.STRICT:
            self.logger.warning("row %d skipped: %s", index, error)
        else:
            self.logger.debug("row %d skipped: %s", index, error)

    def _report_skipped(self, skipped: int, total: int) -> None:
        if self.row_error_policy == RowErrorPolicy.STRICT:
            self.logger.warning("transform: dropped %d of %d rows", skipped, total)
        else:
            self.logger.debug("transform: dropped %d of %d rows", skipped, total)
