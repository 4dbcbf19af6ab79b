"""
Pivot Adapter

Reshapes tabular records between wide and long layouts and aggregates
groups before mapping them onto chart points. Also scores how well a
record set fits a wide-to-long reshape.
"""

import re
from typing import Any, Dict, Hashable, List, Optional, Sequence, Tuple, Union

from ..core.config import settings
from ..models.mapping import ChartDataPoint, MappingConfig, MappingSuggestion, RowErrorPolicy, ValidationResult
from ..models.pivot import AggregateFunction, PivotAnalysis, PivotConfig, PivotType
from ..services.field_analyzer import hashable_key
from ..utils import coerce_number, is_null
from .base import BaseAdapter

VALUE_COLUMN_RATIO = 0.7
PATTERN_RATIO = 0.7
MIN_WIDE_VALUE_COLUMNS = 3
MANY_VALUE_COLUMNS = 10
WIDE_CONFIDENCE = 0.7
HIGH_CONFIDENCE = 0.75
AUTO_MAPPING_CONFIDENCE = 0.9

_NAME_SEPARATOR = re.compile(r"[_\s-]")
_HAS_DIGITS = re.compile(r"\d+")
_DATE_COLUMN_PATTERNS = (
    re.compile(r"\d{4}-\d{2}"),
    re.compile(r"\d{4}_\d{2}"),
    re.compile(r"\d{2}/\d{4}"),
    re.compile(r"(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)", re.IGNORECASE),
    re.compile(r"(Q1|Q2|Q3|Q4)", re.IGNORECASE),
)

ORIGINAL_INDEX_FIELD = "_originalIndex"


class PivotAdapter(BaseAdapter):
    """Adapter for wide/long tables; reads an optional ``pivot_config`` from the mapping."""

    kind = "pivot"
    reserved_config_keys = ("pivot_config",)

    def __init__(self, row_error_policy: Optional[RowErrorPolicy] = None):
        super().__init__(row_error_policy)
        self.field_sample_size = settings.FIELD_SAMPLE_SIZE

    def transform(self, records: Sequence[Dict[str, Any]], config: MappingConfig) -> List[ChartDataPoint]:
        """
        Pivot first when the mapping carries ``pivot_config`` (a PivotConfig
        or its dict form), then extract points from the reshaped rows.

        A ``pivot_config`` that cannot be read is reported through the
        row-error policy and the records are mapped unpivoted.
        """
        pivot_config = config.get("pivot_config")
        if pivot_config is not None:
            try:
                if isinstance(pivot_config, dict):
                    pivot_config = PivotConfig.from_dict(pivot_config)
                records = self.perform_pivot(records, pivot_config)
            except ValueError as e:
                self._report_pivot_error(e)

        points = self._extract_points(records, config)
        self.logger.info("transform: %d points from %d records", len(points), len(records))
        return points

    def validate(self, records: Any) -> ValidationResult:
        base = super().validate(records)
        if not base.is_valid or len(records) == 0:
            return base

        warnings = list(base.warnings)
        analysis = self.analyze_pivotability(records)

        if analysis.is_wide_format and analysis.confidence > WIDE_CONFIDENCE:
            warnings.append("Data looks like a wide table; a wide-to-long pivot will chart better")

        if analysis.has_multiple_value_columns and len(analysis.value_columns) > MANY_VALUE_COLUMNS:
            warnings.append(
                f"Found {len(analysis.value_columns)} value columns; consider selecting the ones to analyse"
            )

        if analysis.duplicate_key_pairs > 0:
            warnings.append(
                f"Found {analysis.duplicate_key_pairs} duplicate identifier combinations; aggregation may be needed"
            )

        return ValidationResult(
            is_valid=True,
            errors=list(base.errors),
            warnings=warnings,
            confidence=min(base.confidence, HIGH_CONFIDENCE),
        )

    # ─── Reshaping ──────────────────────────────────────────────────

    def perform_pivot(self, records: Sequence[Dict[str, Any]], config: PivotConfig) -> List[Dict[str, Any]]:
        if config.type == PivotType.WIDE_TO_LONG:
            result = self.wide_to_long(records, config)
        elif config.type == PivotType.LONG_TO_WIDE:
            result = self.long_to_wide(records, config)
        elif config.type == PivotType.GROUP_BY:
            result = self.group_by(records, config)
        else:
            result = list(records)
        self.logger.debug(
            "perform_pivot: %s %d -> %d rows",
            getattr(config.type, "value", config.type), len(records), len(result),
        )
        return result

    def wide_to_long(self, records: Sequence[Dict[str, Any]], config: PivotConfig) -> List[Dict[str, Any]]:
        """One output row per (input row, value column)."""
        value_columns = config.value_columns or self.identify_value_columns(records)
        id_columns = config.id_columns or self.identify_id_columns(records, value_columns)

        result: List[Dict[str, Any]] = []
        for row_index, row in enumerate(records):
            if not isinstance(row, dict):
                continue
            for column in value_columns:
                long_row = {id_column: row.get(id_column) for id_column in id_columns}
                long_row[config.variable_name] = column
                long_row[config.value_name] = self.clean_number(row.get(column))
                long_row[ORIGINAL_INDEX_FIELD] = row_index
                result.append(long_row)
        return result

    def long_to_wide(self, records: Sequence[Dict[str, Any]], config: PivotConfig) -> List[Dict[str, Any]]:
        """Group by the id columns; each key_field value becomes a column."""
        if not config.key_field or not config.value_field:
            self.logger.warning("long_to_wide: key_field and value_field are required, rows left unchanged")
            return list(records)

        id_columns = config.id_columns or []
        groups: Dict[Tuple[Hashable, ...], Dict[str, Any]] = {}
        for row in records:
            if not isinstance(row, dict):
                continue
            group_key = self._group_key(row, id_columns)
            wide_row = groups.get(group_key)
            if wide_row is None:
                wide_row = {column: row.get(column) for column in id_columns}
                groups[group_key] = wide_row
            key = row.get(config.key_field)
            wide_row[key if isinstance(key, str) else str(key)] = self.clean_number(row.get(config.value_field))
        return list(groups.values())

    def group_by(self, records: Sequence[Dict[str, Any]], config: PivotConfig) -> List[Dict[str, Any]]:
        """Aggregate ``aggregate_fields`` within groups; group keys keep their original values."""
        groups: Dict[Tuple[Hashable, ...], List[Dict[str, Any]]] = {}
        for row in records:
            if not isinstance(row, dict):
                continue
            groups.setdefault(self._group_key(row, config.group_by_fields), []).append(row)

        result: List[Dict[str, Any]] = []
        for rows in groups.values():
            aggregated = {field: rows[0].get(field) for field in config.group_by_fields}
            for field in config.aggregate_fields:
                raw = (row.get(field) for row in rows)
                values = [self.clean_number(v) for v in raw if not is_null(v)]
                aggregated[field] = aggregate(values, config.aggregate_function)
            result.append(aggregated)
        return result

    def _report_pivot_error(self, error: Exception) -> None:
        if self.row_error_policy == RowErrorPolicy.STRICT:
            self.logger.warning("transform: pivot skipped, invalid pivot_config: %s", error)
        else:
            self.logger.debug("transform: pivot skipped, invalid pivot_config: %s", error)

    @staticmethod
    def _group_key(row: Dict[str, Any], fields: Sequence[str]) -> Tuple[Hashable, ...]:
        if not isinstance(row, dict):
            return tuple(None for _ in fields)
        return tuple(hashable_key(row.get(field)) for field in fields)

    # ─── Analysis ───────────────────────────────────────────────────

    def identify_value_columns(self, records: Sequence[Dict[str, Any]]) -> List[str]:
        """Fields with at least 70% numeric values in the sample."""
        if not records or not isinstance(records[0], dict):
            return []

        sample = records[:self.field_sample_size]
        columns = []
        for field in records[0].keys():
            values = [row.get(field) for row in sample if isinstance(row, dict) and not is_null(row.get(field))]
            if not values:
                continue
            numeric = sum(1 for v in values if coerce_number(v) is not None)
            if numeric / len(values) >= VALUE_COLUMN_RATIO:
                columns.append(field)
        return columns

    @staticmethod
    def identify_id_columns(records: Sequence[Dict[str, Any]], value_columns: Sequence[str]) -> List[str]:
        if not records or not isinstance(records[0], dict):
            return []
        return [field for field in records[0].keys() if field not in value_columns]

    def analyze_pivotability(self, records: Sequence[Dict[str, Any]]) -> PivotAnalysis:
        if not records or not isinstance(records[0], dict):
            return PivotAnalysis(is_wide_format=False, confidence=0.0)

        fields = list(records[0].keys())
        value_columns = self.identify_value_columns(records)
        id_columns = self.identify_id_columns(records, value_columns)

        confidence = 0.0
        if len(value_columns) > len(fields) * 0.5:
            confidence += 0.4
        if id_columns:
            confidence += 0.3
        if has_consistent_column_pattern(value_columns):
            confidence += 0.3

        return PivotAnalysis(
            is_wide_format=len(value_columns) > MIN_WIDE_VALUE_COLUMNS and len(id_columns) > 0,
            confidence=round(confidence, 10),
            value_columns=value_columns,
            identifier_columns=id_columns,
            has_multiple_value_columns=len(value_columns) > 1,
            duplicate_key_pairs=self.count_duplicate_key_pairs(records, id_columns),
        )

    def count_duplicate_key_pairs(self, records: Sequence[Dict[str, Any]], key_fields: Sequence[str]) -> int:
        """Sum of (group size - 1) over id-column groups with more than one row."""
        if not key_fields:
            return 0
        counts: Dict[Tuple[Hashable, ...], int] = {}
        for row in records:
            key = self._group_key(row, key_fields)
            counts[key] = counts.get(key, 0) + 1
        return sum(count - 1 for count in counts.values() if count > 1)

    # ─── Suggestions ────────────────────────────────────────────────

    def suggest_pivot_config(self, records: Sequence[Dict[str, Any]]) -> Optional[PivotConfig]:
        """A wide-to-long config when the data is clearly wide, else None."""
        analysis = self.analyze_pivotability(records)
        if not analysis.is_wide_format or analysis.confidence <= WIDE_CONFIDENCE:
            return None
        return PivotConfig(
            type=PivotType.WIDE_TO_LONG,
            value_columns=analysis.value_columns,
            id_columns=analysis.identifier_columns,
        )

    def suggest_auto_mapping(self, records: Sequence[Dict[str, Any]]) -> Optional[MappingSuggestion]:
        config = self.suggest_pivot_config(records)
        if config is None:
            return None
        return MappingSuggestion(
            mapping={"x": config.variable_name, "y": config.value_name},
            chart_type="line",
            confidence=AUTO_MAPPING_CONFIDENCE,
            reasoning="Wide table detected; pivot the value columns into rows and plot them as a series",
        )


# ─── Helpers ────────────────────────────────────────────────────────

def aggregate(values: List[float], function: Union[AggregateFunction, str]) -> float:
    """Reduce ``values`` with ``function``; 0 when there is nothing to reduce."""
    if not values:
        return 0
    function = AggregateFunction(function)
    if function == AggregateFunction.SUM:
        return sum(values)
    if function == AggregateFunction.AVG:
        return sum(values) / len(values)
    if function == AggregateFunction.MAX:
        return max(values)
    if function == AggregateFunction.MIN:
        return min(values)
    return len(values)


def has_consistent_column_pattern(columns: Sequence[str]) -> bool:
    """True when value-column names share a prefix, suffix, date-like or numeric pattern."""
    if len(columns) < 3:
        return False
    return (
        _has_common_part(columns, 0)
        or _has_common_part(columns, -1)
        or _share_of(columns, lambda c: any(p.search(c) for p in _DATE_COLUMN_PATTERNS)) >= PATTERN_RATIO
        or _share_of(columns, lambda c: bool(_HAS_DIGITS.search(c))) >= PATTERN_RATIO
    )


def _has_common_part(columns: Sequence[str], position: int) -> bool:
    counts: Dict[str, int] = {}
    for column in columns:
        part = _NAME_SEPARATOR.split(str(column))[position]
        counts[part] = counts.get(part, 0) + 1
    return max(counts.values()) >= len(columns) * PATTERN_RATIO


def _share_of(columns: Sequence[str], predicate) -> float:
    return sum(1 for column in columns if predicate(str(column))) / len(columns)
