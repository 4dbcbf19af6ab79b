"""
Nested Object Adapter

Handles deep object graphs: dotted paths of any depth, nesting-complexity
analysis, schema-drift detection via structural signatures, and
flattening helpers.
"""

from typing import Any, Dict, List, Optional, Sequence, Set

from ..core.config import settings
from ..models.mapping import (
    ChartDataPoint,
    DataType,
    FlatteningSuggestion,
    MappingConfig,
    MappingRole,
    MappingSuggestion,
    NestingComplexity,
    RowErrorPolicy,
    ValidationResult,
)
from ..services.field_paths import is_container, path_depth
from ..utils import coerce_number, is_date_instance, is_null, parse_date
from .base import BaseAdapter

MAX_REASONABLE_DEPTH = 5
INCONSISTENCY_WARN_RATIO = 0.3
INCONSISTENCY_PARTIAL_RATIO = 0.5
MIN_ACCESSIBILITY = 0.5
SIGNATURE_DEPTH = 3
HIGH_CONFIDENCE = 0.8
TYPE_MAJORITY = 0.8


class NestedAdapter(BaseAdapter):
    """Adapter for records with nested dicts and lists."""

    kind = "nested"

    def __init__(self, row_error_policy: Optional[RowErrorPolicy] = None):
        super().__init__(row_error_policy)
        self.field_sample_size = settings.FIELD_SAMPLE_SIZE

    def transform(self, records: Sequence[Dict[str, Any]], config: MappingConfig) -> List[ChartDataPoint]:
        return self._extract_points(records, config)

    def validate(self, records: Any) -> ValidationResult:
        base = super().validate(records)
        if not base.is_valid or len(records) == 0:
            return base

        warnings = list(base.warnings)
        complexity = self.analyze_nesting_complexity(records)

        if complexity.max_depth > MAX_REASONABLE_DEPTH:
            warnings.append(f"Data is nested {complexity.max_depth} levels deep, which may slow down processing")

        if complexity.inconsistent_structures > len(records) * INCONSISTENCY_WARN_RATIO:
            warnings.append("A high share of records have differing structures, field mapping may be unreliable")

        sample = records[:self.field_sample_size]
        for path in self.get_all_nested_fields(records[0]):
            accessible = sum(1 for row in sample if self._safe_resolve(row, path) is not None)
            if accessible / len(sample) < MIN_ACCESSIBILITY:
                warnings.append(f'Nested field "{path}" is missing from most records')

        return ValidationResult(
            is_valid=True,
            errors=list(base.errors),
            warnings=warnings,
            confidence=min(base.confidence, HIGH_CONFIDENCE),
        )

    # ─── Structure analysis ─────────────────────────────────────────

    def get_all_nested_fields(self, obj: Any, prefix: str = "", max_depth: int = 5,
                              _ancestors: Optional[Set[int]] = None) -> List[str]:
        """
        Every dotted path in ``obj`` down to ``max_depth`` levels.

        For a list of dicts one level of ``field[0].subkey`` paths is added.
        Duplicates are removed, order preserved.
        """
        if max_depth <= 0 or not isinstance(obj, dict):
            return []

        ancestors = _ancestors if _ancestors is not None else set()
        if id(obj) in ancestors:
            return []
        ancestors.add(id(obj))

        fields: List[str] = []
        for key, value in obj.items():
            current = f"{prefix}.{key}" if prefix else str(key)
            fields.append(current)

            if isinstance(value, dict):
                fields.extend(self.get_all_nested_fields(value, current, max_depth - 1, ancestors))
            elif isinstance(value, (list, tuple)) and value and isinstance(value[0], dict):
                fields.extend(f"{current}[0].{sub_key}" for sub_key in value[0].keys())

        ancestors.discard(id(obj))
        return list(dict.fromkeys(fields))

    def analyze_nesting_complexity(self, records: Sequence[Any]) -> NestingComplexity:
        sample = list(records[:self.sample_size])
        if not sample:
            return NestingComplexity(max_depth=0, avg_depth=0.0, inconsistent_structures=0)

        depths = [self.get_object_depth(row) for row in sample]
        signatures = {self.get_structure_signature(row) for row in sample}
        return NestingComplexity(
            max_depth=max(depths),
            avg_depth=sum(depths) / len(depths),
            inconsistent_structures=len(signatures) - 1,
        )

    def get_object_depth(self, obj: Any, _ancestors: Optional[Set[int]] = None) -> int:
        """Depth of nested containers; an empty dict or list counts as one level."""
        if not isinstance(obj, (dict, list, tuple)):
            return 0

        ancestors = _ancestors if _ancestors is not None else set()
        if id(obj) in ancestors:
            return 0
        ancestors.add(id(obj))

        children = obj.values() if isinstance(obj, dict) else obj
        child_depths = [self.get_object_depth(child, ancestors) for child in children]
        ancestors.discard(id(obj))
        return 1 + max(child_depths) if child_depths else 1

    def get_structure_signature(self, obj: Any, depth: int = 0) -> str:
        """
        Canonical shape string: keys sorted, value kinds recursive, lists
        described by their first element, capped at a fixed depth.
        """
        if depth > SIGNATURE_DEPTH or not isinstance(obj, (dict, list, tuple)):
            return _kind_name(obj)

        if isinstance(obj, (list, tuple)):
            if not obj:
                return "array:empty"
            return f"array:{self.get_structure_signature(obj[0], depth + 1)}"

        parts = [
            f"{key}:{self.get_structure_signature(obj[key], depth + 1)}"
            for key in sorted(obj.keys(), key=str)
        ]
        return "{" + ",".join(parts) + "}"

    def suggest_flattening_strategy(self, records: Sequence[Dict[str, Any]]) -> FlatteningSuggestion:
        if not records:
            return FlatteningSuggestion(strategy="none", reason="No data")

        complexity = self.analyze_nesting_complexity(records)
        if complexity.max_depth <= 2:
            return FlatteningSuggestion(strategy="none", reason="Structure is shallow, no flattening needed")

        all_fields = self.get_all_nested_fields(records[0])
        if complexity.max_depth > 4 or complexity.inconsistent_structures > len(records) * INCONSISTENCY_PARTIAL_RATIO:
            return FlatteningSuggestion(
                strategy="partial",
                reason="Structure is complex, flatten only the shallow fields",
                suggested_fields=[f for f in all_fields if path_depth(f) <= 3],
            )

        return FlatteningSuggestion(
            strategy="full",
            reason="Moderate nesting, flatten every field",
            suggested_fields=all_fields,
        )

    @staticmethod
    def flatten(obj: Dict[str, Any], prefix: str = "", _ancestors: Optional[Set[int]] = None) -> Dict[str, Any]:
        """Flatten nested dicts to dotted keys; lists and dates stay as leaf values."""
        ancestors = _ancestors if _ancestors is not None else set()
        ancestors.add(id(obj))

        flattened: Dict[str, Any] = {}
        for key, value in obj.items():
            new_key = f"{prefix}.{key}" if prefix else str(key)
            if isinstance(value, dict) and value and id(value) not in ancestors:
                flattened.update(NestedAdapter.flatten(value, new_key, ancestors))
            else:
                flattened[new_key] = value

        ancestors.discard(id(obj))
        return flattened

    # ─── Suggestions ────────────────────────────────────────────────

    def suggest_auto_mapping(self, records: Sequence[Dict[str, Any]]) -> Optional[MappingSuggestion]:
        """
        Propose one x/y mapping from path-level scoring over a small
        sample. None when fewer than two usable fields exist.
        """
        if not records:
            return None

        scored = self._score_fields(records)
        if len(scored) < 2:
            return None

        x = next((s for s in scored if s[3] == MappingRole.X), scored[0])
        y = next((s for s in scored if s[3] == MappingRole.Y), scored[1])
        return MappingSuggestion(
            mapping={"x": x[0], "y": y[0]},
            chart_type="line" if x[1] == DataType.DATE else "bar",
            confidence=min(x[2], y[2]),
            reasoning=f"Nested structure analysis suggests {x[0]} for the X axis and {y[0]} for the Y axis",
        )

    def _score_fields(self, records: Sequence[Dict[str, Any]]):
        scored = []
        sample = records[:self.field_sample_size]
        for path in self.get_all_nested_fields(records[0]):
            values = [
                v for v in (self._safe_resolve(row, path) for row in sample)
                if not is_null(v) and not is_container(v)
            ]
            if not values:
                continue

            data_type = self._detect_nested_field_type(values)
            confidence = self._field_confidence(path, values, len(records))
            lowered = path.lower()

            role = MappingRole.X
            if data_type == DataType.NUMBER:
                if any(k in lowered for k in ("value", "amount", "count")):
                    role = MappingRole.Y
                elif any(k in lowered for k in ("size", "radius")):
                    role = MappingRole.SIZE
            elif data_type == DataType.STRING:
                if any(k in lowered for k in ("category", "type", "color")):
                    role = MappingRole.COLOR

            scored.append((path, data_type, confidence, role))

        scored.sort(key=lambda s: s[2], reverse=True)
        return scored

    @staticmethod
    def _detect_nested_field_type(values: List[Any]) -> DataType:
        total = len(values)
        if sum(1 for v in values if coerce_number(v) is not None) / total > TYPE_MAJORITY:
            return DataType.NUMBER
        dates = sum(1 for v in values if is_date_instance(v) or (isinstance(v, str) and parse_date(v) is not None))
        if dates / total > TYPE_MAJORITY:
            return DataType.DATE
        if sum(1 for v in values if isinstance(v, bool)) / total > TYPE_MAJORITY:
            return DataType.BOOLEAN
        return DataType.STRING

    @staticmethod
    def _field_confidence(path: str, values: List[Any], total: int) -> float:
        confidence = 0.5 + (len(values) / total) * 0.3

        lowered = path.lower()
        if "id" in lowered or "key" in lowered:
            confidence += 0.1
        if "value" in lowered or "amount" in lowered:
            confidence += 0.2
        if "name" in lowered or "title" in lowered:
            confidence += 0.1

        depth = path_depth(path)
        if depth == 1:
            confidence += 0.1
        elif depth > 3:
            confidence -= 0.1

        return min(0.95, max(0.1, confidence))

    def _safe_resolve(self, row: Any, path: str) -> Any:
        try:
            value = self.resolve_field_path(row, path)
        except (TypeError, ValueError, KeyError, IndexError):
            return None
        return None if is_null(value) else value


def _kind_name(value: Any) -> str:
    """Kind label for signature leaves, mirroring JSON value kinds."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (dict, list, tuple)):
        return "object"
    return type(value).__name__
